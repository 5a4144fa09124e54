"""
Brave Search Client - Web results from the Brave Search API.

The subscription token travels in the X-Subscription-Token header.
"""

from typing import Any, Dict, List

from src.adapters.search.http_search_client import HttpSearchClient, field_text, result_array
from src.domain.models import SearchResultItem


class BraveClient(HttpSearchClient):
    """Brave Search API client."""

    name = "brave"
    base_url = "https://api.search.brave.com/res/v1/web/search"
    max_results = 100

    def _build_params(self, query: str, count: int) -> Dict[str, Any]:
        return {
            "q": query,
            "count": count,
            "safesearch": "moderate",
        }

    def _build_headers(self) -> Dict[str, str]:
        return {"X-Subscription-Token": self._api_key}

    def _parse_items(self, payload: Dict[str, Any]) -> List[SearchResultItem]:
        items = []
        for result in result_array(payload, "web", "results"):
            display_url = field_text(result, "display_url")
            if not display_url:
                meta_url = result.get("meta_url")
                if isinstance(meta_url, dict):
                    display_url = field_text(meta_url, "hostname")
            items.append(
                SearchResultItem(
                    title=field_text(result, "title"),
                    url=field_text(result, "url"),
                    description=field_text(result, "description"),
                    display_url=display_url,
                    source=self.name,
                )
            )
        return items
