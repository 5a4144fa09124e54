from .search_port import SearchPort

__all__ = [
    "SearchPort",
]
