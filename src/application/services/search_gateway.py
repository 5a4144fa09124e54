"""
Search Gateway - Single entry point for web searches.

Coordinates the rate limiter, the result cache and the configured search
provider:

    client -> limiter (admit/reject) -> cache (hit?) -> provider -> cache -> client
"""

import time
from typing import Callable, Optional

from src.application.ports.search_port import SearchPort
from src.application.services.rate_limiter import FixedWindowRateLimiter
from src.application.services.result_cache import ResultCache, make_cache_key
from src.config.logging import get_logger
from src.domain.exceptions import InvalidQueryError, RateLimitedError, WebSearchError
from src.domain.models import Query, SearchResult

logger = get_logger(__name__)

MAX_RESULT_COUNT = 100


class SearchGateway:
    """
    Orchestrates validation, limiting, caching and provider dispatch.

    Exactly one provider serves every request; there is no failover and
    no retry.
    """

    def __init__(
        self,
        provider: SearchPort,
        cache: ResultCache,
        default_result_count: int = 10,
        rate_limiter: Optional[FixedWindowRateLimiter] = None,
        health_check_interval: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the gateway.

        Args:
            provider: The configured search provider
            cache: Shared result cache
            default_result_count: Count used when the caller gives none
            rate_limiter: Limiter consulted when a client_id is passed to search()
            health_check_interval: Seconds a provider health result is reused (0 disables reuse)
            clock: Monotonic time source (tests inject a fake clock)
        """
        self._provider = provider
        self._cache = cache
        self._default_count = default_result_count
        self._rate_limiter = rate_limiter
        self._health_interval = health_check_interval
        self._clock = clock
        self._last_health: Optional[bool] = None
        self._last_health_at = 0.0

    @property
    def provider(self) -> SearchPort:
        return self._provider

    async def provider_healthy(self) -> bool:
        """
        Provider health, reusing a recent result.

        A real health check is a billable one-result query, so at most one is
        issued per health_check_interval.
        """
        now = self._clock()
        if self._last_health is not None and now - self._last_health_at < self._health_interval:
            return self._last_health

        healthy = await self._provider.health_check()
        self._last_health = healthy
        self._last_health_at = now
        logger.debug("provider_health_checked", provider=self._provider.name, healthy=healthy)
        return healthy

    def resolve_count(self, requested: Optional[int]) -> int:
        """Effective result count for a request, within the provider's range."""
        count = requested if requested is not None and requested > 0 else self._default_count
        return max(1, min(count, MAX_RESULT_COUNT, self._provider.max_results))

    def build_query(self, text: Optional[str], requested: Optional[int] = None) -> Query:
        """
        Validate the text and normalize the count.

        Raises:
            InvalidQueryError: If text is None or blank
        """
        if text is None or not text.strip():
            raise InvalidQueryError()
        return Query(text=text, requested_count=self.resolve_count(requested))

    async def search(
        self,
        text: Optional[str],
        max_results: Optional[int] = None,
        client_id: Optional[str] = None,
    ) -> SearchResult:
        """
        Run a web search.

        Args:
            text: Query text
            max_results: Requested result count (None or <= 0 uses the default)
            client_id: Caller identity; when set, the request is rate limited here

        Returns:
            Canonical search result, possibly served from the cache

        Raises:
            InvalidQueryError: Blank query
            RateLimitedError: Client exceeded its budget
            ConfigurationError: Provider credentials are malformed
            UpstreamError: The provider call failed
        """
        query = self.build_query(text, max_results)

        if client_id is not None and self._rate_limiter is not None:
            decision = self._rate_limiter.try_admit(client_id)
            if not decision.admitted:
                raise RateLimitedError(
                    client_id=client_id,
                    limit=decision.limit,
                    retry_after=decision.retry_after_seconds,
                )

        key = make_cache_key(query.text, query.requested_count)

        async def compute() -> SearchResult:
            return await self._provider.search(query.text, query.requested_count)

        try:
            return await self._cache.get_or_compute(key, compute)
        except WebSearchError as e:
            logger.error(
                "search_failed",
                query=query.text,
                count=query.requested_count,
                provider=self._provider.name,
                error_code=e.code,
                error=e.message,
            )
            raise
