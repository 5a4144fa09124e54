from .models import (
    # Search Models
    Query,
    SearchResult,
    SearchResultItem,
    # Cache / Limiter Models
    CacheStats,
    RateLimitDecision,
    # API Models
    WebSearchRequest,
    QuickSearchRequest,
    ToolCallRequest,
    ToolTextResponse,
)
from .exceptions import (
    WebSearchError,
    ValidationError,
    InvalidQueryError,
    RateLimitedError,
    ConfigurationError,
    UpstreamError,
    UpstreamTimeoutError,
)

__all__ = [
    # Search Models
    "Query",
    "SearchResult",
    "SearchResultItem",
    # Cache / Limiter Models
    "CacheStats",
    "RateLimitDecision",
    # API Models
    "WebSearchRequest",
    "QuickSearchRequest",
    "ToolCallRequest",
    "ToolTextResponse",
    # Exceptions
    "WebSearchError",
    "ValidationError",
    "InvalidQueryError",
    "RateLimitedError",
    "ConfigurationError",
    "UpstreamError",
    "UpstreamTimeoutError",
]
