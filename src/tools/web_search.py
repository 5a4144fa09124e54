"""
Web Search Tools - Agent-facing presentations of the search gateway.

Three tools share the same gateway call:
- web_search: human-readable report
- web_search_json: the canonical SearchResult
- quick_search: report for the top 3 results
"""

from typing import Any, Dict, List, Optional, Union

from src.application.services.search_gateway import SearchGateway
from src.config.logging import get_logger
from src.domain.exceptions import RateLimitedError, ValidationError, WebSearchError
from src.domain.models import SearchResult

logger = get_logger(__name__)

DEFAULT_MAX_RESULTS = 10
QUICK_SEARCH_COUNT = 3
EMPTY_QUERY_MESSAGE = "Error: Search query cannot be empty"


def format_search_results(result: SearchResult) -> str:
    """Render a search result as a numbered plain-text report."""
    if not result.results:
        return f"No results found for: {result.query}"

    lines = [
        f"Search Results for: {result.query}",
        f"Found {result.total_results} results:",
        "",
    ]
    for index, item in enumerate(result.results, start=1):
        lines.append(f"{index}. **{item.title}**")
        lines.append(f"   URL: {item.url}")
        if item.description.strip():
            lines.append(f"   {item.description}")
        lines.append("")

    return "\n".join(lines) + "\n"


def format_error(error: Exception) -> str:
    """Turn a gateway failure into a message the agent can read."""
    if isinstance(error, RateLimitedError):
        return f"Error performing search: {error.message} Retry after {error.retry_after} seconds."
    if isinstance(error, WebSearchError):
        return f"Error performing search: {error.message}"
    return f"Error performing search: {error}"


class WebSearchTools:
    """
    Tool layer exposed to the calling agent.

    Text tools never raise: validation and provider failures come back as
    error strings. The JSON tool propagates gateway errors to its caller.
    """

    def __init__(self, gateway: SearchGateway):
        """
        Initialize the tools.

        Args:
            gateway: Search gateway all tools delegate to
        """
        self._gateway = gateway

    @staticmethod
    def _resolve_max_results(max_results: Optional[int]) -> int:
        return max_results if max_results is not None and max_results > 0 else DEFAULT_MAX_RESULTS

    async def web_search(self, query: Optional[str], max_results: Optional[int] = None) -> str:
        """Search the web and return a formatted report."""
        logger.info("web_search_tool_invoked", query=query)

        if query is None or not query.strip():
            return EMPTY_QUERY_MESSAGE

        try:
            result = await self._gateway.search(query, self._resolve_max_results(max_results))
            return format_search_results(result)
        except Exception as e:
            logger.error("web_search_tool_failed", query=query, error=str(e))
            return format_error(e)

    async def web_search_json(
        self,
        query: Optional[str],
        max_results: Optional[int] = None,
    ) -> SearchResult:
        """Search the web and return the structured result."""
        logger.info("web_search_json_tool_invoked", query=query)

        if query is None or not query.strip():
            return SearchResult.empty(query)

        return await self._gateway.search(query, self._resolve_max_results(max_results))

    async def quick_search(self, query: Optional[str]) -> str:
        """Search the web for the top 3 results."""
        logger.info("quick_search_tool_invoked", query=query)

        if query is None or not query.strip():
            return EMPTY_QUERY_MESSAGE

        try:
            result = await self._gateway.search(query, QUICK_SEARCH_COUNT)
            return format_search_results(result)
        except Exception as e:
            logger.error("quick_search_tool_failed", query=query, error=str(e))
            return format_error(e)

    async def execute_from_dict(
        self,
        tool_name: str,
        params: Dict[str, Any],
    ) -> Union[str, SearchResult]:
        """Execute a tool by name from dictionary parameters (for tool calling)."""
        if tool_name == "web_search":
            return await self.web_search(params.get("query"), params.get("max_results"))
        if tool_name == "web_search_json":
            return await self.web_search_json(params.get("query"), params.get("max_results"))
        if tool_name == "quick_search":
            return await self.quick_search(params.get("query"))
        raise ValidationError(f"Unknown tool: {tool_name}", field="tool_name")

    @staticmethod
    def get_tool_definitions() -> List[Dict[str, Any]]:
        """Get the tool definitions for LLM function calling."""
        max_results_param = {
            "type": "integer",
            "description": "Maximum number of results to return. Default is 10, maximum is 100.",
            "minimum": 1,
            "maximum": 100,
        }
        return [
            {
                "name": "web_search",
                "description": (
                    "Search the web for information. Returns a list of relevant web pages "
                    "with titles, URLs, and descriptions. Use this tool when you need to find "
                    "current information, facts, or resources from the internet."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": (
                                "The search query string. Be specific and use relevant "
                                "keywords for better results."
                            ),
                        },
                        "max_results": max_results_param,
                    },
                    "required": ["query"],
                },
            },
            {
                "name": "web_search_json",
                "description": (
                    "Search the web and return results as structured JSON. Use this when you "
                    "need to programmatically process search results."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "The search query string",
                        },
                        "max_results": max_results_param,
                    },
                    "required": ["query"],
                },
            },
            {
                "name": "quick_search",
                "description": (
                    "Perform a quick web search returning only the top 3 most relevant results. "
                    "Ideal for quick fact-checking or when you need just a few authoritative sources."
                ),
                "parameters": {
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "The search query",
                        },
                    },
                    "required": ["query"],
                },
            },
        ]
