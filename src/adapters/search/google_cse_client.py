"""
Google Custom Search Client - Programmable Search Engine JSON API.

Google needs both an API key and a search engine ID (cx). They are
configured together as a single composite credential "apiKey:cx".
"""

from typing import Any, Dict, List, Optional, Tuple

import httpx

from src.adapters.search.http_search_client import HttpSearchClient, field_text, result_array
from src.domain.exceptions import ConfigurationError
from src.domain.models import SearchResultItem


def split_credential(api_key: str) -> Tuple[str, str]:
    """
    Split a composite "apiKey:cx" credential.

    Raises:
        ConfigurationError: If the credential does not have exactly two non-empty parts
    """
    parts = api_key.split(":")
    if len(parts) != 2 or not all(p.strip() for p in parts):
        raise ConfigurationError(
            "Google Custom Search requires API key in format 'apiKey:cx'",
            setting="websearch.api_key",
        )
    return parts[0].strip(), parts[1].strip()


class GoogleCustomSearchClient(HttpSearchClient):
    """Google Custom Search JSON API client."""

    name = "google"
    base_url = "https://www.googleapis.com/customsearch/v1"
    max_results = 10  # CSE returns at most 10 results per request

    def __init__(
        self,
        api_key: str,
        timeout: float = 15.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        # Fail before any client is created or request is sent
        self._key, self._cx = split_credential(api_key)
        super().__init__(api_key=api_key, timeout=timeout, client=client)

    def _build_params(self, query: str, count: int) -> Dict[str, Any]:
        return {
            "q": query,
            "num": count,
            "key": self._key,
            "cx": self._cx,
        }

    def _parse_items(self, payload: Dict[str, Any]) -> List[SearchResultItem]:
        return [
            SearchResultItem(
                title=field_text(result, "title"),
                url=field_text(result, "link"),
                description=field_text(result, "snippet"),
                display_url=field_text(result, "displayLink"),
                source=self.name,
            )
            for result in result_array(payload, "items")
        ]
