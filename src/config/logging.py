"""
Structured Logging Configuration using structlog.

Every gateway module logs snake_case events with keyword context (query,
provider, client_id, counts). Output is JSON in production and a colored
console in development. Provider credentials are masked before rendering.
"""

import logging
import sys
from typing import Any, Literal, MutableMapping, Optional, Tuple

import structlog
from structlog.typing import Processor

from src.config.settings import get_settings

# Event keys whose values are provider credentials
SECRET_KEYS = frozenset({"api_key", "key", "cx", "x-subscription-token", "authorization"})
REDACTED = "***"

# Libraries whose debug output would echo request URLs (SerpAPI and Google
# carry the credential in the query string)
QUIET_LOGGERS = ("httpx", "httpcore", "asyncio")


def redact_secrets(
    logger: Any,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """structlog processor masking credential-valued keys, including nested params dicts."""
    for name, value in list(event_dict.items()):
        if name.lower() in SECRET_KEYS and value:
            event_dict[name] = REDACTED
        elif isinstance(value, dict):
            event_dict[name] = {
                k: REDACTED if str(k).lower() in SECRET_KEYS and v else v
                for k, v in value.items()
            }
    return event_dict


def _renderers(fmt: str) -> Tuple[Processor, Processor]:
    """Renderer for structlog events and for foreign (stdlib) records."""
    if fmt == "json":
        return structlog.processors.JSONRenderer(), structlog.processors.JSONRenderer()
    return (
        structlog.dev.ConsoleRenderer(colors=True, exception_formatter=structlog.dev.plain_traceback),
        structlog.dev.ConsoleRenderer(colors=True),
    )


def setup_logging(
    log_level: Optional[str] = None,
    log_format: Optional[Literal["json", "text"]] = None,
) -> None:
    """
    Configure structured logging for the gateway.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override log format (json for production, text for development)
    """
    settings = get_settings()
    level = log_level or settings.app.log_level
    fmt = log_format or settings.app.log_format
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        redact_secrets,
    ]

    event_renderer, record_renderer = _renderers(fmt)
    processors: list[Processor] = list(shared_processors)
    if fmt == "json":
        processors.append(structlog.processors.format_exc_info)
    processors.append(event_renderer)

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # uvicorn access/error records share the same output
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processor=record_renderer,
            foreign_pre_chain=shared_processors,
        )
    )
    root_logger = logging.getLogger()
    root_logger.handlers = [handler]
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """Structured logger for a module (pass __name__)."""
    return structlog.get_logger(name)
