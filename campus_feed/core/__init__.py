# Core infrastructure
from campus_feed.core.context import (
    clear_context,
    get_context,
    get_correlation_id,
    get_request_id,
    set_correlation_id,
    set_request_id,
)
from campus_feed.core.logging import configure_structlog, get_logger
from campus_feed.core.middleware import RequestContextMiddleware


__all__ = [
    "RequestContextMiddleware",
    "clear_context",
    "configure_structlog",
    "get_context",
    "get_correlation_id",
    "get_logger",
    "get_request_id",
    "set_correlation_id",
    "set_request_id",
]
