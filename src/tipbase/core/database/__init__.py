"""Database layer - session management, base models, and mixins."""

from tipbase.core.database.base import Base, IntegerIDMixin, SoftDeleteMixin, TimestampMixin
from tipbase.core.database.session import (
    async_engine,
    async_session_factory,
    configure_sqlite,
    get_db,
)


__all__ = [
    "Base",
    "IntegerIDMixin",
    "SoftDeleteMixin",
    "TimestampMixin",
    "async_engine",
    "async_session_factory",
    "configure_sqlite",
    "get_db",
]
