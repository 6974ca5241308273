"""Logging module with structured logging and request tracking."""

from tipbase.core.logging.middleware import (
    RequestLoggingMiddleware,
    configure_logging,
    get_client_ip,
)


__all__ = [
    "RequestLoggingMiddleware",
    "configure_logging",
    "get_client_ip",
]
