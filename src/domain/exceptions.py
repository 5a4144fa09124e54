"""
Custom Exceptions for the Web Search Gateway.

Hierarchical exception structure for clean error handling.
"""

from typing import Any, Dict, Optional


class WebSearchError(Exception):
    """
    Base exception for all gateway errors.

    Provides structured error information for logging and API responses.
    """

    def __init__(
        self,
        message: str,
        code: str = "WEBSEARCH_ERROR",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON serialization."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# Validation Errors
# =============================================================================

class ValidationError(WebSearchError):
    """Errors related to input validation."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={**(details or {}), "field": field} if field else details,
        )
        self.field = field


class InvalidQueryError(ValidationError):
    """Raised when the search query text is empty or invalid."""

    def __init__(self, reason: str = "Search query cannot be empty"):
        super().__init__(
            message=reason,
            field="query",
            details={"reason": reason},
        )
        self.code = "INVALID_QUERY"


# =============================================================================
# Rate Limiting
# =============================================================================

class RateLimitedError(WebSearchError):
    """Raised when a client exceeds its request budget for the current window."""

    def __init__(self, client_id: str, limit: int, retry_after: int = 60):
        super().__init__(
            message="Rate limit exceeded. Please try again later.",
            code="RATE_LIMITED",
            details={
                "client_id": client_id,
                "limit_per_minute": limit,
                "retry_after_seconds": retry_after,
            },
        )
        self.client_id = client_id
        self.retry_after = retry_after


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(WebSearchError):
    """Raised when provider configuration is missing or malformed."""

    def __init__(self, message: str, setting: Optional[str] = None):
        super().__init__(
            message=message,
            code="CONFIGURATION_ERROR",
            details={"setting": setting} if setting else None,
        )
        self.setting = setting


# =============================================================================
# Upstream Provider Errors
# =============================================================================

class UpstreamError(WebSearchError):
    """Errors from upstream search providers (network, status, payload)."""

    def __init__(
        self,
        message: str,
        provider: str,
        cause: Optional[BaseException] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message,
            code="UPSTREAM_ERROR",
            details={**(details or {}), "provider": provider},
        )
        self.provider = provider
        self.cause = cause


class UpstreamTimeoutError(UpstreamError):
    """Raised when a provider request exceeds its timeout."""

    def __init__(self, provider: str, timeout_seconds: float, cause: Optional[BaseException] = None):
        super().__init__(
            message=f"{provider} request timed out after {timeout_seconds:g} seconds",
            provider=provider,
            cause=cause,
            details={"timeout_seconds": timeout_seconds},
        )
        self.code = "UPSTREAM_TIMEOUT"
