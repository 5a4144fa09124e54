"""
Unit tests for client identity resolution and path matching.
"""

from fastapi import Request

from src.adapters.api.rate_limit import UNKNOWN_CLIENT, RateLimitMiddleware, resolve_client_identity
from src.application.services.rate_limiter import FixedWindowRateLimiter


class StubUser:
    """Minimal authenticated principal."""

    def __init__(self, display_name: str = "", identity: str = "", is_authenticated: bool = True):
        self.display_name = display_name
        self.identity = identity
        self.is_authenticated = is_authenticated


def make_request(headers=None, client=("10.0.0.1", 5555), user=None) -> Request:
    scope = {
        "type": "http",
        "method": "POST",
        "path": "/mcp/tools/web_search",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
        "client": client,
    }
    if user is not None:
        scope["user"] = user
    return Request(scope)


class TestResolveClientIdentity:
    """Identity priority: principal, forwarded-for, peer address."""

    def test_authenticated_principal_wins(self):
        request = make_request(
            headers={"X-Forwarded-For": "203.0.113.9"},
            user=StubUser(display_name="alice"),
        )
        assert resolve_client_identity(request) == "alice"

    def test_principal_identity_used_without_display_name(self):
        request = make_request(user=StubUser(identity="user-42"))
        assert resolve_client_identity(request) == "user-42"

    def test_unauthenticated_user_ignored(self):
        request = make_request(user=StubUser(display_name="alice", is_authenticated=False))
        assert resolve_client_identity(request) == "10.0.0.1"

    def test_first_forwarded_for_entry(self):
        request = make_request(headers={"X-Forwarded-For": " 203.0.113.9 , 10.1.1.1"})
        assert resolve_client_identity(request) == "203.0.113.9"

    def test_blank_forwarded_for_falls_back_to_peer(self):
        request = make_request(headers={"X-Forwarded-For": "  "})
        assert resolve_client_identity(request) == "10.0.0.1"

    def test_unknown_when_nothing_available(self):
        request = make_request(client=None)
        assert resolve_client_identity(request) == UNKNOWN_CLIENT


class TestRateLimitMiddlewarePaths:
    """Only configured prefixes are rate limited."""

    def test_applies_to_prefixes(self):
        middleware = RateLimitMiddleware(
            limiter_factory=FixedWindowRateLimiter,
            paths=["/mcp", "/sse"],
        )

        assert middleware.applies_to("/mcp/tools/web_search")
        assert middleware.applies_to("/sse")
        assert not middleware.applies_to("/health")
        assert not middleware.applies_to("/")
