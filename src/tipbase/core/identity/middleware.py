"""Identity and request tracing middleware.

This module provides middleware for:
- Resolving the acting user from the access proxy's e-mail header
- Request tracing with unique IDs

Authentication itself happens at the proxy in front of the service;
the header is trusted as-is.
"""

import re
import uuid

import structlog
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from tipbase.core.constants import IDENTITY_EMAIL_HEADER


logger = structlog.get_logger()

_NAME_SEPARATORS = re.compile(r"[._-]+")


def display_name_from_email(email: str) -> str:
    """Build a display name from the local part of an e-mail address.

    Example:
        >>> display_name_from_email("jane.doe@example.com")
        'Jane Doe'
    """
    local_part = email.split("@", 1)[0]
    words = [w for w in _NAME_SEPARATORS.split(local_part) if w]
    return " ".join(w[:1].upper() + w[1:].lower() for w in words)


def get_identity_name(request: Request) -> str | None:
    """Return the resolved display name for the request, if any."""
    return getattr(request.state, "user_name", None)


class IdentityMiddleware(BaseHTTPMiddleware):
    """Middleware that resolves the acting user for each request.

    Sets request.state.user_name and request.state.user_email when the
    identity header is present, and binds them to the structlog context.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        email = request.headers.get(IDENTITY_EMAIL_HEADER)

        if email:
            name = display_name_from_email(email)
            request.state.user_email = email
            request.state.user_name = name or None

            structlog.contextvars.bind_contextvars(user_name=name)
        else:
            request.state.user_email = None
            request.state.user_name = None

        return await call_next(request)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Middleware that adds a unique request ID to each request.

    The request ID is added to:
    - request.state.request_id
    - Response header X-Request-ID
    - Structlog context
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        request.state.request_id = request_id
        request.state.trace_id = request_id  # Alias for error handler

        structlog.contextvars.bind_contextvars(request_id=request_id)

        response = await call_next(request)

        response.headers["X-Request-ID"] = request_id

        structlog.contextvars.unbind_contextvars("request_id", "user_name")

        return response
