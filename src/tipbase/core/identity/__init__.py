"""Request identity: request ids and the resolved actor name."""

from tipbase.core.identity.middleware import (
    IdentityMiddleware,
    RequestIdMiddleware,
    display_name_from_email,
    get_identity_name,
)


__all__ = [
    "IdentityMiddleware",
    "RequestIdMiddleware",
    "display_name_from_email",
    "get_identity_name",
]
