"""
Application Services.

This module contains application-level services that coordinate
between domain models and infrastructure adapters.
"""

from src.application.services.rate_limiter import FixedWindowRateLimiter
from src.application.services.result_cache import ResultCache, make_cache_key
from src.application.services.search_gateway import SearchGateway

__all__ = ["FixedWindowRateLimiter", "ResultCache", "SearchGateway", "make_cache_key"]
