"""
SerpAPI Client - Google organic results through serpapi.com.

The API key is sent as the api_key query parameter.
"""

from typing import Any, Dict, List

from src.adapters.search.http_search_client import HttpSearchClient, field_text, result_array
from src.domain.models import SearchResultItem


class SerpApiClient(HttpSearchClient):
    """SerpAPI client using the Google engine."""

    name = "serpapi"
    base_url = "https://serpapi.com/search"
    max_results = 100

    def _build_params(self, query: str, count: int) -> Dict[str, Any]:
        return {
            "q": query,
            "num": count,
            "api_key": self._api_key,
            "engine": "google",
        }

    def _parse_items(self, payload: Dict[str, Any]) -> List[SearchResultItem]:
        return [
            SearchResultItem(
                title=field_text(result, "title"),
                url=field_text(result, "link"),
                description=field_text(result, "snippet"),
                display_url=field_text(result, "displayed_link"),
                source=self.name,
            )
            for result in result_array(payload, "organic_results")
        ]
