from .web_search import WebSearchTools, format_search_results

__all__ = [
    "WebSearchTools",
    "format_search_results",
]
