"""
Domain Models - Pydantic models for ALL I/O boundaries.

This module contains the Pydantic models used throughout the gateway:
- Normalized queries and canonical search results
- Cache and rate limiter bookkeeping
- API request/response schemas for the tool surface

"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# =============================================================================
# Search Models
# =============================================================================

class Query(BaseModel):
    """A normalized search query, immutable once constructed."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(..., min_length=1, description="Search query text")
    requested_count: int = Field(..., ge=1, le=100, description="Effective number of results")

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        """Reject whitespace-only queries."""
        if not v.strip():
            raise ValueError("Search query cannot be empty")
        return v


class SearchResultItem(BaseModel):
    """A single web search hit in the provider-agnostic shape."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(default="", description="Result title")
    url: str = Field(default="", description="Result URL")
    description: str = Field(default="", description="Result snippet/description")
    display_url: str = Field(default="", description="Human-friendly URL shown by the provider")
    source: str = Field(default="", description="Provider tag that produced the result")

    @field_validator("title", "url", "description", "display_url", "source", mode="before")
    @classmethod
    def coerce_to_string(cls, v: Any) -> str:
        """Upstream nulls and non-string scalars become strings, never None."""
        if v is None:
            return ""
        return v if isinstance(v, str) else str(v)


class SearchResult(BaseModel):
    """Canonical search result returned by every provider."""

    model_config = ConfigDict(frozen=True)

    query: str = Field(default="", description="The query that was executed")
    total_results: int = Field(default=0, ge=0, description="Number of results returned")
    results: List[SearchResultItem] = Field(default_factory=list, description="Ordered results")

    @classmethod
    def from_items(cls, query: str, items: List[SearchResultItem]) -> "SearchResult":
        """Build a result whose total matches the number of items."""
        return cls(query=query, total_results=len(items), results=items)

    @classmethod
    def empty(cls, query: Optional[str] = None) -> "SearchResult":
        """An empty result for the given query."""
        return cls(query=query or "", total_results=0, results=[])


# =============================================================================
# Cache / Rate Limiter Models
# =============================================================================

class CacheStats(BaseModel):
    """Point-in-time counters for the result cache."""

    hits: int = Field(default=0, ge=0)
    misses: int = Field(default=0, ge=0)
    evictions: int = Field(default=0, ge=0, description="Entries dropped to respect capacity")
    expirations: int = Field(default=0, ge=0, description="Entries dropped after their TTL")
    coalesced: int = Field(default=0, ge=0, description="Callers that joined an in-flight computation")
    size: int = Field(default=0, ge=0)
    max_entries: int = Field(default=0, ge=0)
    ttl_seconds: float = Field(default=0.0, ge=0.0)

    @property
    def hit_rate(self) -> float:
        """Share of lookups served from the cache."""
        lookups = self.hits + self.misses
        return self.hits / lookups if lookups else 0.0


class RateLimitDecision(BaseModel):
    """Outcome of a rate limiter admission check."""

    model_config = ConfigDict(frozen=True)

    admitted: bool
    client_id: str
    count: int = Field(..., ge=0, description="Requests seen in the current window")
    limit: int = Field(..., ge=1)
    remaining: int = Field(..., ge=0)
    retry_after_seconds: int = Field(default=0, ge=0)


# =============================================================================
# API Request/Response Models
# =============================================================================

class WebSearchRequest(BaseModel):
    """Request schema for the web_search and web_search_json tools."""

    query: str = Field(
        default="",
        description="The search query string. Be specific and use relevant keywords for better results.",
        json_schema_extra={"example": "rust ownership"},
    )
    max_results: Optional[int] = Field(
        default=None,
        description="Maximum number of results to return. Default is 10, maximum is 100.",
    )


class QuickSearchRequest(BaseModel):
    """Request schema for the quick_search tool."""

    query: str = Field(default="", description="The search query")


class ToolCallRequest(BaseModel):
    """Generic tool invocation with free-form arguments."""

    arguments: Dict[str, Any] = Field(default_factory=dict, description="Tool arguments")


class ToolTextResponse(BaseModel):
    """Response schema for tools that produce a text report."""

    tool: str = Field(..., description="Name of the tool that was invoked")
    content: str = Field(..., description="Human-readable tool output")
    is_error: bool = Field(default=False, description="Whether the content describes a failure")
