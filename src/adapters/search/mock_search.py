"""
Mock Search Provider - Deterministic search results for development and tests.

Provides canned results for a few topics and synthetic results otherwise.
Supports testing without external API calls.
"""

import asyncio
from typing import Dict, List, Optional, Tuple

from src.application.ports.search_port import SearchPort
from src.config.logging import get_logger
from src.domain.models import SearchResult, SearchResultItem

logger = get_logger(__name__)


# Pre-defined mock results for common topics
MOCK_SEARCH_RESULTS: Dict[str, List[Dict[str, str]]] = {
    "rust": [
        {
            "title": "What is Ownership? - The Rust Programming Language",
            "url": "https://doc.rust-lang.org/book/ch04-01-what-is-ownership.html",
            "description": "Ownership is a set of rules that govern how a Rust program manages memory.",
            "display_url": "doc.rust-lang.org",
        },
        {
            "title": "References and Borrowing - The Rust Programming Language",
            "url": "https://doc.rust-lang.org/book/ch04-02-references-and-borrowing.html",
            "description": "A reference is like a pointer in that it's an address we can follow to access data.",
            "display_url": "doc.rust-lang.org",
        },
        {
            "title": "Rust By Example - Ownership and moves",
            "url": "https://doc.rust-lang.org/rust-by-example/scope/move.html",
            "description": "Because variables are in charge of freeing their own resources, resources can only have one owner.",
            "display_url": "doc.rust-lang.org",
        },
    ],
    "python": [
        {
            "title": "Welcome to Python.org",
            "url": "https://www.python.org/",
            "description": "The official home of the Python Programming Language.",
            "display_url": "www.python.org",
        },
        {
            "title": "asyncio - Asynchronous I/O",
            "url": "https://docs.python.org/3/library/asyncio.html",
            "description": "asyncio is a library to write concurrent code using the async/await syntax.",
            "display_url": "docs.python.org",
        },
    ],
}


class MockSearch(SearchPort):
    """
    Mock search provider with deterministic results.

    Tracks every call so tests can assert how often the upstream was hit.
    """

    name = "mock"
    max_results = 100

    def __init__(self, latency_ms: int = 0, error: Optional[Exception] = None):
        """
        Initialize the mock search provider.

        Args:
            latency_ms: Simulated latency in milliseconds (for testing)
            error: Exception raised by every search call, if set
        """
        self._call_count = 0
        self._latency_ms = latency_ms
        self._error = error
        self._calls: List[Tuple[str, int]] = []

    async def search(self, query: str, count: int) -> SearchResult:
        """Execute a mock web search."""
        self._call_count += 1
        self._calls.append((query, count))

        logger.debug(
            "mock_search_execute",
            query=query,
            count=count,
            call_count=self._call_count,
        )

        if self._latency_ms > 0:
            await asyncio.sleep(self._latency_ms / 1000)

        if self._error is not None:
            raise self._error

        count = self.clamp_count(count)
        results_data = None
        query_lower = query.lower()
        for topic, data in MOCK_SEARCH_RESULTS.items():
            if topic in query_lower:
                results_data = data
                break

        if results_data is None:
            results_data = [
                {
                    "title": f"Result {i} for {query}",
                    "url": f"https://example.com/{i}",
                    "description": f"Synthetic result {i}",
                    "display_url": "example.com",
                }
                for i in range(1, count + 1)
            ]

        items = [
            SearchResultItem(source=self.name, **r)
            for r in results_data[:count]
        ]
        return SearchResult.from_items(query, items)

    async def health_check(self) -> bool:
        """Mock is always healthy."""
        return True

    def set_error(self, error: Optional[Exception]) -> None:
        """Make subsequent searches raise the given error (None clears it)."""
        self._error = error

    def get_call_count(self) -> int:
        """Get the number of calls made."""
        return self._call_count

    def get_calls(self) -> List[Tuple[str, int]]:
        """Get all (query, count) pairs received."""
        return self._calls.copy()

    def reset(self) -> None:
        """Reset the mock state."""
        self._call_count = 0
        self._calls.clear()
        self._error = None
