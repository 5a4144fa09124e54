"""
Pytest configuration and shared fixtures.
"""

import os

# Tests never talk to a real provider
os.environ["WEBSEARCH_PROVIDER"] = "mock"

import pytest
from fastapi.testclient import TestClient

from src.adapters.api.dependencies import reset_dependencies
from src.adapters.search.mock_search import MockSearch
from src.application.services.rate_limiter import FixedWindowRateLimiter
from src.application.services.result_cache import ResultCache
from src.application.services.search_gateway import SearchGateway
from src.config.settings import clear_settings_cache
from src.tools.web_search import WebSearchTools


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset settings and dependency singletons around each test."""
    clear_settings_cache()
    reset_dependencies()
    yield
    clear_settings_cache()
    reset_dependencies()


@pytest.fixture
def fake_clock():
    """Provide a controllable clock."""
    return FakeClock()


@pytest.fixture
def mock_search():
    """Provide a mock search provider."""
    return MockSearch()


@pytest.fixture
def result_cache(fake_clock):
    """Provide a cache with a 300s TTL on the fake clock."""
    return ResultCache(ttl_seconds=300, max_entries=1000, clock=fake_clock)


@pytest.fixture
def rate_limiter(fake_clock):
    """Provide a limiter admitting 5 requests per minute on the fake clock."""
    return FixedWindowRateLimiter(limit_per_window=5, window_seconds=60, clock=fake_clock)


@pytest.fixture
def gateway(mock_search, result_cache, rate_limiter):
    """Provide a search gateway over the mock provider."""
    return SearchGateway(
        provider=mock_search,
        cache=result_cache,
        default_result_count=10,
        rate_limiter=rate_limiter,
    )


@pytest.fixture
def web_search_tools(gateway):
    """Provide the tool layer over the mock-backed gateway."""
    return WebSearchTools(gateway=gateway)


@pytest.fixture
def test_client():
    """Provide a FastAPI test client."""
    from main import app
    return TestClient(app)
