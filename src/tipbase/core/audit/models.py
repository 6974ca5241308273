"""Audit log database model.

The audit_logs table is append-only: rows are inserted by the audit
store and never updated or deleted afterwards.
"""

from datetime import UTC, datetime
from enum import StrEnum

from sqlalchemy import DateTime, Index, Integer, String, Text, event, func
from sqlalchemy.orm import Mapped, mapped_column

from tipbase.core.constants import ANONYMOUS_AUTHOR, MAX_IPV6_LENGTH, MAX_NAME_LENGTH
from tipbase.core.database.base import Base, IntegerIDMixin


class AuditAction(StrEnum):
    """Kinds of mutation recorded in the audit log."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class EntityType(StrEnum):
    """Kinds of domain object under audit."""

    TIP = "tip"
    COMMENT = "comment"
    ATTACHMENT = "attachment"

    @property
    def label(self) -> str:
        """Capitalized name used in generated display titles."""
        return self.value.capitalize()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class AuditLog(Base, IntegerIDMixin):
    """One recorded mutation of a tip, comment or attachment.

    Attributes:
        action: CREATE, UPDATE or DELETE
        entity_type: tip, comment or attachment
        entity_id: ID of the affected row within its entity type
        author_name: Display name of the actor, "Anonymous" when unknown
        old_data: JSON snapshot before the change (null for CREATE)
        new_data: JSON snapshot after the change (null for DELETE)
        ip_address: Client IP address
        user_agent: Client user agent string
        timestamp: When the event was recorded
    """

    __tablename__ = "audit_logs"
    __table_args__ = (Index("ix_audit_logs_entity", "entity_type", "entity_id"),)

    action: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        index=True,
    )
    entity_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    author_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        default=ANONYMOUS_AUTHOR,
        index=True,
    )

    # Snapshots, stored as JSON text so a corrupt row can be read back
    old_data: Mapped[str | None] = mapped_column(Text, nullable=True)
    new_data: Mapped[str | None] = mapped_column(Text, nullable=True)

    # Request context
    ip_address: Mapped[str | None] = mapped_column(
        String(MAX_IPV6_LENGTH),
        nullable=True,
    )
    user_agent: Mapped[str | None] = mapped_column(Text, nullable=True)

    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return (
            f"<AuditLog(id={self.id}, action={self.action}, "
            f"entity_type={self.entity_type}, entity_id={self.entity_id})>"
        )


class AuditLogImmutableError(Exception):
    """Raised when code attempts to modify a stored audit row."""


@event.listens_for(AuditLog, "before_update")
def _reject_update(_mapper: object, _connection: object, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"Audit log {target.id} cannot be updated")


@event.listens_for(AuditLog, "before_delete")
def _reject_delete(_mapper: object, _connection: object, target: AuditLog) -> None:
    raise AuditLogImmutableError(f"Audit log {target.id} cannot be deleted")
