"""
Dependency Injection for FastAPI.

This module provides the process-wide singletons (provider, cache, rate
limiter, gateway, tools), allowing easy swapping between mock and real
providers based on configuration.
"""

import threading
from typing import Optional

from src.application.ports.search_port import SearchPort
from src.application.services.rate_limiter import FixedWindowRateLimiter
from src.application.services.result_cache import ResultCache
from src.application.services.search_gateway import SearchGateway
from src.config.logging import get_logger
from src.config.settings import get_settings
from src.tools.web_search import WebSearchTools

logger = get_logger(__name__)

# Thread-safe singleton management (RLock allows same thread to re-acquire)
_lock = threading.RLock()
_search_provider: Optional[SearchPort] = None
_result_cache: Optional[ResultCache] = None
_rate_limiter: Optional[FixedWindowRateLimiter] = None
_gateway: Optional[SearchGateway] = None
_tools: Optional[WebSearchTools] = None


def create_search_provider() -> SearchPort:
    """
    Build the provider selected in configuration.

    Raises:
        ConfigurationError: If the credential is missing or malformed
        ValueError: If the provider name is unknown
    """
    settings = get_settings().websearch
    settings.check_credentials()

    if settings.provider == "mock":
        from src.adapters.search.mock_search import MockSearch
        return MockSearch()
    if settings.provider == "brave":
        from src.adapters.search.brave_client import BraveClient
        return BraveClient(api_key=settings.api_key, timeout=settings.request_timeout)
    if settings.provider == "serpapi":
        from src.adapters.search.serpapi_client import SerpApiClient
        return SerpApiClient(api_key=settings.api_key, timeout=settings.request_timeout)
    if settings.provider == "google_custom_search":
        from src.adapters.search.google_cse_client import GoogleCustomSearchClient
        return GoogleCustomSearchClient(api_key=settings.api_key, timeout=settings.request_timeout)

    raise ValueError(f"Unknown search provider: {settings.provider}")


def get_search_provider() -> SearchPort:
    """Get the configured search provider (thread-safe)."""
    global _search_provider

    if _search_provider is not None:
        return _search_provider

    with _lock:
        # Double-check after acquiring lock
        if _search_provider is not None:
            return _search_provider

        _search_provider = create_search_provider()
        logger.info("search_provider_created", provider=_search_provider.name)
        return _search_provider


def get_result_cache() -> ResultCache:
    """Get the shared result cache (thread-safe)."""
    global _result_cache

    if _result_cache is not None:
        return _result_cache

    with _lock:
        if _result_cache is not None:
            return _result_cache

        settings = get_settings().websearch
        _result_cache = ResultCache(
            ttl_seconds=settings.cache_expiration_seconds,
            max_entries=settings.cache_max_entries,
        )
        return _result_cache


def get_rate_limiter() -> FixedWindowRateLimiter:
    """Get the shared rate limiter (thread-safe)."""
    global _rate_limiter

    if _rate_limiter is not None:
        return _rate_limiter

    with _lock:
        if _rate_limiter is not None:
            return _rate_limiter

        settings = get_settings().websearch
        _rate_limiter = FixedWindowRateLimiter(limit_per_window=settings.rate_limit_per_minute)
        return _rate_limiter


def get_search_gateway() -> SearchGateway:
    """Get the search gateway with all dependencies (thread-safe)."""
    global _gateway

    if _gateway is not None:
        return _gateway

    with _lock:
        if _gateway is not None:
            return _gateway

        settings = get_settings().websearch
        _gateway = SearchGateway(
            provider=get_search_provider(),
            cache=get_result_cache(),
            default_result_count=settings.default_result_count,
            rate_limiter=get_rate_limiter(),
            health_check_interval=settings.health_check_interval_seconds,
        )
        return _gateway


def get_web_search_tools() -> WebSearchTools:
    """Get the agent-facing tools (thread-safe)."""
    global _tools

    if _tools is not None:
        return _tools

    with _lock:
        if _tools is not None:
            return _tools

        _tools = WebSearchTools(gateway=get_search_gateway())
        return _tools


async def close_search_provider() -> None:
    """Close the provider's HTTP client (call on shutdown)."""
    global _search_provider

    provider = _search_provider
    if provider is not None:
        await provider.close()
        _search_provider = None


def reset_dependencies() -> None:
    """Reset all singleton instances."""
    global _search_provider, _result_cache, _rate_limiter, _gateway, _tools

    with _lock:
        _search_provider = None
        _result_cache = None
        _rate_limiter = None
        _gateway = None
        _tools = None
