"""
Rate limiting middleware for the tool endpoints.

Requests whose path starts with one of the configured prefixes are
counted per client; everything else passes straight through. Rejected
requests get a 429 with an advisory Retry-After header.
"""

from typing import Awaitable, Callable, Iterable, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse

from src.application.services.rate_limiter import FixedWindowRateLimiter
from src.config.logging import get_logger
from src.domain.exceptions import RateLimitedError

logger = get_logger(__name__)

UNKNOWN_CLIENT = "unknown"


def resolve_client_identity(request: Request) -> str:
    """
    Identify the caller for rate limiting.

    Priority: authenticated principal name, first X-Forwarded-For entry,
    peer address. Never returns an empty value.
    """
    user = request.scope.get("user")
    if user is not None and getattr(user, "is_authenticated", False):
        name = getattr(user, "display_name", "") or getattr(user, "identity", "")
        if name:
            return str(name)

    forwarded_for = request.headers.get("x-forwarded-for", "")
    if forwarded_for.strip():
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first

    if request.client is not None and request.client.host:
        return request.client.host

    return UNKNOWN_CLIENT


class RateLimitMiddleware:
    """
    Callable middleware for request rate limiting.

    Usage with FastAPI:
        app.middleware("http")(RateLimitMiddleware(limiter_factory=get_rate_limiter, paths=["/mcp"]))

    The limiter is resolved per request through limiter_factory so tests can
    swap the singleton.
    """

    def __init__(
        self,
        *,
        limiter_factory: Callable[[], FixedWindowRateLimiter],
        paths: Iterable[str],
    ) -> None:
        self._limiter_factory = limiter_factory
        self._paths = tuple(paths)

    def applies_to(self, path: str) -> bool:
        return any(path.startswith(prefix) for prefix in self._paths)

    async def __call__(
        self,
        request: Request,
        call_next: Callable[[Request], Awaitable[Response]],
    ) -> Response:
        if not self.applies_to(request.url.path):
            return await call_next(request)

        client_id = resolve_client_identity(request)
        limiter = self._limiter_factory()
        decision = limiter.try_admit(client_id)

        if not decision.admitted:
            error = RateLimitedError(
                client_id=client_id,
                limit=decision.limit,
                retry_after=decision.retry_after_seconds,
            )
            logger.warning("request_rate_limited", client_id=client_id, path=request.url.path)
            return JSONResponse(
                status_code=429,
                content=error.to_dict(),
                headers={
                    "Retry-After": str(error.retry_after),
                    "X-RateLimit-Limit": str(decision.limit),
                    "X-RateLimit-Remaining": "0",
                },
            )

        request.state.client_id = client_id
        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(decision.limit)
        response.headers["X-RateLimit-Remaining"] = str(decision.remaining)
        return response


def client_id_of(request: Request) -> Optional[str]:
    """Client identity recorded by the middleware, if it ran."""
    return getattr(request.state, "client_id", None)
