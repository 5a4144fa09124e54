"""
FastAPI Routes - HTTP tool surface for the Web Search Gateway.

Endpoints:
- GET /mcp/tools - List tool definitions
- POST /mcp/tools/web_search - Formatted search report
- POST /mcp/tools/web_search_json - Structured search result
- POST /mcp/tools/quick_search - Top 3 results report
- POST /mcp/tools/{tool_name}/call - Generic tool invocation
- GET /health - Health check with cache and limiter counters

All endpoints have detailed OpenAPI documentation.
"""

from typing import Any, Dict, List, NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request, status

from src.adapters.api.dependencies import (
    get_rate_limiter,
    get_result_cache,
    get_search_gateway,
    get_web_search_tools,
)
from src.adapters.api.rate_limit import client_id_of
from src.application.services.rate_limiter import FixedWindowRateLimiter
from src.application.services.result_cache import ResultCache
from src.application.services.search_gateway import SearchGateway
from src.config.logging import get_logger
from src.config.settings import get_settings
from src.domain.exceptions import (
    RateLimitedError,
    UpstreamError,
    ValidationError,
    WebSearchError,
)
from src.domain.models import (
    QuickSearchRequest,
    SearchResult,
    ToolCallRequest,
    ToolTextResponse,
    WebSearchRequest,
)
from src.tools.web_search import WebSearchTools

logger = get_logger(__name__)

router = APIRouter()


def _raise_http(error: WebSearchError) -> NoReturn:
    """Map a gateway error onto an HTTP error response."""
    headers = None
    if isinstance(error, ValidationError):
        code = 422
    elif isinstance(error, RateLimitedError):
        code = status.HTTP_429_TOO_MANY_REQUESTS
        headers = {"Retry-After": str(error.retry_after)}
    elif isinstance(error, UpstreamError):
        code = status.HTTP_502_BAD_GATEWAY
    else:
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=error.to_dict(), headers=headers)


def _text_response(tool: str, content: str) -> ToolTextResponse:
    return ToolTextResponse(tool=tool, content=content, is_error=content.startswith("Error"))


# =============================================================================
# Tool Endpoints
# =============================================================================

@router.get(
    "/mcp/tools",
    summary="List Tools",
    description="Tool definitions (name, description, JSON-schema parameters) for LLM function calling.",
)
async def list_tools() -> List[Dict[str, Any]]:
    """List the available search tools."""
    return WebSearchTools.get_tool_definitions()


@router.post(
    "/mcp/tools/web_search",
    response_model=ToolTextResponse,
    summary="Web Search",
    description="""
    Search the web and return a human-readable report.

    Failures (empty query, provider errors) are reported inside `content`
    with `is_error` set, never as HTTP errors.
    """,
    responses={
        200: {
            "description": "Search report",
            "content": {
                "application/json": {
                    "example": {
                        "tool": "web_search",
                        "content": "Search Results for: rust ownership\nFound 2 results:\n\n...",
                        "is_error": False,
                    }
                }
            },
        },
        429: {"description": "Rate limit exceeded"},
    },
)
async def web_search(
    request: WebSearchRequest,
    http_request: Request,
    tools: WebSearchTools = Depends(get_web_search_tools),
) -> ToolTextResponse:
    """Run the web_search tool."""
    logger.info("web_search_request", client_id=client_id_of(http_request))
    content = await tools.web_search(request.query, request.max_results)
    return _text_response("web_search", content)


@router.post(
    "/mcp/tools/web_search_json",
    response_model=SearchResult,
    summary="Web Search (JSON)",
    description="""
    Search the web and return the canonical structured result.

    An empty query returns an empty result. Provider failures map to
    502, configuration problems to 500.
    """,
    responses={
        200: {"description": "Structured search result"},
        429: {"description": "Rate limit exceeded"},
        500: {"description": "Provider misconfigured"},
        502: {"description": "Upstream provider failed"},
    },
)
async def web_search_json(
    request: WebSearchRequest,
    http_request: Request,
    tools: WebSearchTools = Depends(get_web_search_tools),
) -> SearchResult:
    """Run the web_search_json tool."""
    logger.info("web_search_json_request", client_id=client_id_of(http_request))
    try:
        return await tools.web_search_json(request.query, request.max_results)
    except WebSearchError as e:
        _raise_http(e)


@router.post(
    "/mcp/tools/quick_search",
    response_model=ToolTextResponse,
    summary="Quick Search",
    description="Search the web and return a report of the top 3 results.",
    responses={
        200: {"description": "Search report"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def quick_search(
    request: QuickSearchRequest,
    http_request: Request,
    tools: WebSearchTools = Depends(get_web_search_tools),
) -> ToolTextResponse:
    """Run the quick_search tool."""
    logger.info("quick_search_request", client_id=client_id_of(http_request))
    content = await tools.quick_search(request.query)
    return _text_response("quick_search", content)


@router.post(
    "/mcp/tools/{tool_name}/call",
    summary="Call Tool",
    description="Invoke any tool by name with a free-form `arguments` object.",
    responses={
        200: {"description": "Tool output"},
        404: {"description": "Unknown tool"},
        429: {"description": "Rate limit exceeded"},
    },
)
async def call_tool(
    tool_name: str,
    request: ToolCallRequest,
    tools: WebSearchTools = Depends(get_web_search_tools),
) -> Dict[str, Any]:
    """Generic tool dispatch."""
    known = {d["name"] for d in WebSearchTools.get_tool_definitions()}
    if tool_name not in known:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown tool: {tool_name}",
        )

    try:
        output = await tools.execute_from_dict(tool_name, request.arguments)
    except WebSearchError as e:
        _raise_http(e)

    if isinstance(output, SearchResult):
        return output.model_dump()
    return _text_response(tool_name, output).model_dump()


# =============================================================================
# Health Check
# =============================================================================

@router.get(
    "/health",
    summary="Health Check",
    description=(
        "Check the health of the search provider and report cache and limiter counters. "
        "The provider check is a real one-result query, reused for health_check_interval_seconds."
    ),
    responses={
        200: {
            "description": "Service is healthy",
            "content": {
                "application/json": {
                    "example": {
                        "status": "healthy",
                        "version": "1.0.0",
                        "provider": "brave",
                        "components": {"search": "healthy"},
                        "cache": {"hits": 4, "misses": 2, "evictions": 0, "size": 2},
                        "rate_limiter": {"limit_per_minute": 60, "tracked_clients": 1},
                    }
                }
            },
        },
        503: {"description": "Service is unhealthy"},
    },
)
async def health_check(
    gateway: SearchGateway = Depends(get_search_gateway),
    cache: ResultCache = Depends(get_result_cache),
    limiter: FixedWindowRateLimiter = Depends(get_rate_limiter),
) -> Dict[str, Any]:
    """Check service health; the provider result is reused for a short interval."""
    settings = get_settings()

    provider = gateway.provider
    search_healthy = await gateway.provider_healthy()
    components = {"search": "healthy" if search_healthy else "unhealthy"}

    if not search_healthy:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={
                "status": "unhealthy",
                "components": components,
            },
        )

    return {
        "status": "healthy",
        "version": settings.app.version,
        "provider": provider.name,
        "components": components,
        "cache": cache.stats().model_dump(),
        "rate_limiter": {
            "limit_per_minute": limiter.limit,
            "tracked_clients": limiter.tracked_clients(),
        },
    }
