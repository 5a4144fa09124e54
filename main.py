"""
Web Search Gateway

Main FastAPI application entry point.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from src.adapters.api.dependencies import (
    close_search_provider,
    get_rate_limiter,
    get_search_gateway,
)
from src.adapters.api.rate_limit import RateLimitMiddleware
from src.adapters.api.routes import router
from src.config.logging import setup_logging, get_logger
from src.config.settings import get_settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    # Startup
    settings = get_settings()
    setup_logging(
        log_level=settings.app.log_level,
        log_format=settings.app.log_format,
    )
    logger = get_logger(__name__)

    # Fail fast on missing or malformed credentials
    settings.websearch.check_credentials()
    gateway = get_search_gateway()

    logger.info(
        "application_startup",
        app_name=settings.app.name,
        version=settings.app.version,
        provider=gateway.provider.name,
        rate_limit_per_minute=settings.websearch.rate_limit_per_minute,
        cache_expiration_seconds=settings.websearch.cache_expiration_seconds,
    )

    yield

    # Shutdown
    await close_search_provider()
    logger.info("application_shutdown")


settings = get_settings()

app = FastAPI(
    title="Web Search Gateway",
    description="""
## Overview

Uniform web search for LLM agents, backed by one configured provider
(Brave Search, SerpAPI or Google Custom Search).

## Tools

- **web_search**: human-readable report of the results
- **web_search_json**: canonical structured result
- **quick_search**: report of the top 3 results

## Behaviour

- Identical queries are served from an in-memory cache until their TTL elapses
- Requests to `/mcp` and `/sse` are rate limited per client (429 + `Retry-After`)
- Provider responses are normalized to one result shape

## Example Usage

```bash
curl -X POST "http://localhost:8080/mcp/tools/web_search" \\
  -H "Content-Type: application/json" \\
  -d '{"query": "rust ownership", "max_results": 5}'
```
    """,
    version=settings.app.version,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Rate limit the tool endpoints
app.middleware("http")(
    RateLimitMiddleware(
        limiter_factory=get_rate_limiter,
        paths=settings.websearch.rate_limited_paths,
    )
)

# Include API routes
app.include_router(router, tags=["Web Search"])


@app.get("/", include_in_schema=False)
async def root():
    """Root endpoint."""
    return {
        "name": settings.app.name,
        "version": settings.app.version,
        "docs": "/docs",
        "health": "/health",
        "tools": "/mcp/tools",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.app.debug,
        workers=settings.api.workers,
    )
