"""
Search Port - Abstract interface for web search providers.

This module defines the contract every upstream search backend implements
so the gateway can dispatch to any of them interchangeably.
"""

from abc import ABC, abstractmethod

from src.domain.models import SearchResult


class SearchPort(ABC):
    """
    Abstract base class for web search providers.

    Implementations should handle:
    - Building the provider-specific request (params, credentials)
    - Parsing the provider payload into a canonical SearchResult
    - Translating transport and payload failures into UpstreamError
    """

    #: Fixed tag stamped on every result item produced by the provider
    name: str = ""

    #: Largest result count the provider accepts in a single request
    max_results: int = 100

    def clamp_count(self, count: int) -> int:
        """Clamp a requested count into the provider's accepted range."""
        return max(1, min(count, self.max_results))

    @abstractmethod
    async def search(self, query: str, count: int) -> SearchResult:
        """
        Execute a web search and return canonical results.

        Args:
            query: Search query string (non-empty)
            count: Number of results to request

        Returns:
            SearchResult in the canonical shape

        Raises:
            UpstreamError: On network, status or payload failures
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the search provider is available.

        Returns:
            True if the provider is healthy, False otherwise
        """
        pass

    async def close(self) -> None:
        """Release any resources held by the provider."""
        return None
