"""Search adapters package."""

from src.adapters.search.brave_client import BraveClient
from src.adapters.search.google_cse_client import GoogleCustomSearchClient
from src.adapters.search.mock_search import MockSearch
from src.adapters.search.serpapi_client import SerpApiClient

__all__ = ["BraveClient", "GoogleCustomSearchClient", "MockSearch", "SerpApiClient"]
