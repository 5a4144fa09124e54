"""
HTTP Search Client - Shared plumbing for JSON search APIs.

Concrete providers only describe their request (params, headers) and how
to read their payload; this base class owns the httpx client, the timeout
and the translation of transport failures into UpstreamError.
"""

from abc import abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from src.application.ports.search_port import SearchPort
from src.config.logging import get_logger
from src.domain.exceptions import UpstreamError, UpstreamTimeoutError
from src.domain.models import SearchResult, SearchResultItem

logger = get_logger(__name__)


def field_text(data: Dict[str, Any], key: str) -> str:
    """Read a string field, mapping absent or null values to ""."""
    value = data.get(key)
    if value is None or isinstance(value, (dict, list)):
        return ""
    return str(value)


def result_array(data: Any, *path: str) -> List[Dict[str, Any]]:
    """
    Walk a nested path and return the list found there.

    A missing key, a non-dict along the way or a non-list leaf all yield an
    empty list. Non-dict entries inside the list are dropped.
    """
    node = data
    for key in path:
        if not isinstance(node, dict):
            return []
        node = node.get(key)
    if not isinstance(node, list):
        return []
    return [entry for entry in node if isinstance(entry, dict)]


class HttpSearchClient(SearchPort):
    """
    Base class for providers reached over a JSON-over-HTTPS GET endpoint.

    Subclasses implement _build_params, _parse_items and optionally
    _build_headers.
    """

    base_url: str = ""

    def __init__(
        self,
        api_key: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """
        Initialize the client.

        Args:
            api_key: Provider credential
            timeout: Request timeout in seconds
            client: Optional pre-built httpx client (tests inject a MockTransport)
        """
        self._api_key = api_key
        self._timeout = timeout
        self._client = client or httpx.AsyncClient(
            timeout=timeout,
            headers={"Accept": "application/json"},
        )

    @abstractmethod
    def _build_params(self, query: str, count: int) -> Dict[str, Any]:
        """Query string parameters for a search request."""

    def _build_headers(self) -> Dict[str, str]:
        """Extra request headers (credentials sent as headers go here)."""
        return {}

    @abstractmethod
    def _parse_items(self, payload: Dict[str, Any]) -> List[SearchResultItem]:
        """Map the provider payload onto canonical result items."""

    async def search(self, query: str, count: int) -> SearchResult:
        """Execute the search against the provider endpoint."""
        count = self.clamp_count(count)
        logger.info("provider_search_start", provider=self.name, query=query, count=count)

        payload = await self._get_json(query, self._build_params(query, count))
        items = self._parse_items(payload)

        logger.info(
            "provider_search_complete",
            provider=self.name,
            query=query,
            results_count=len(items),
        )
        return SearchResult.from_items(query, items)

    async def _get_json(self, query: str, params: Dict[str, Any]) -> Dict[str, Any]:
        """Perform the GET request and decode a JSON object body."""
        try:
            response = await self._client.get(
                self.base_url,
                params=params,
                headers=self._build_headers(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            logger.error("provider_search_timeout", provider=self.name, query=query, error=str(e))
            raise UpstreamTimeoutError(self.name, self._timeout, cause=e) from e
        except httpx.HTTPError as e:
            logger.error("provider_search_http_error", provider=self.name, query=query, error=str(e))
            raise UpstreamError(
                message=f"{self.name} request failed: {e}",
                provider=self.name,
                cause=e,
            ) from e

        if not response.is_success:
            logger.error(
                "provider_search_bad_status",
                provider=self.name,
                query=query,
                status_code=response.status_code,
            )
            raise UpstreamError(
                message=f"{self.name} returned HTTP {response.status_code}: {response.text[:200]}",
                provider=self.name,
                details={"status_code": response.status_code},
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("provider_search_invalid_json", provider=self.name, query=query, error=str(e))
            raise UpstreamError(
                message=f"Invalid JSON response from {self.name}: {e}",
                provider=self.name,
                cause=e,
            ) from e

        if not isinstance(payload, dict):
            raise UpstreamError(
                message=f"Unexpected {type(payload).__name__} payload from {self.name}",
                provider=self.name,
            )
        return payload

    async def health_check(self) -> bool:
        """Check the provider by issuing a one-result query."""
        try:
            await self.search("test", 1)
            return True
        except Exception as e:
            logger.error("provider_health_check_failed", provider=self.name, error=str(e))
            return False

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()
