"""Append-only persistence for audit events.

The store owns its sessions: every append commits in a session of its
own, so an audit write can neither roll back nor be rolled back by the
domain write it describes.
"""

import asyncio
from typing import Annotated, Any

import structlog
from fastapi import Depends, Request
from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tipbase.core.audit.models import AuditAction, AuditLog, EntityType
from tipbase.core.audit.schemas import AuditEvent, AuditFilters, AuditLogEntry
from tipbase.core.audit.snapshot import SnapshotDecodeError, dump_state, load_state
from tipbase.core.constants import ANONYMOUS_AUTHOR


log = structlog.get_logger()


class AuditAppendError(Exception):
    """Raised when an audit event could not be persisted.

    Attributes:
        event: The event that was not recorded
    """

    def __init__(self, event: AuditEvent, message: str = "Failed to append audit event") -> None:
        self.event = event
        super().__init__(message)


class AuditStore:
    """Audit record store backed by the audit_logs table.

    Appends are serialized through a single lock so that concurrent
    requests never interleave writes; reads take no lock.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory
        self._append_lock = asyncio.Lock()

    async def append(self, event: AuditEvent) -> int:
        """Persist an event and return its assigned ID.

        Raises:
            AuditAppendError: If the event could not be stored
        """
        async with self._append_lock:
            try:
                async with self.session_factory() as session:
                    row = AuditLog(
                        action=event.action.value,
                        entity_type=event.entity_type.value,
                        entity_id=event.entity_id,
                        author_name=event.author_name or ANONYMOUS_AUTHOR,
                        old_data=dump_state(event.old_state),
                        new_data=dump_state(event.new_state),
                        ip_address=event.client_address,
                        user_agent=event.client_agent,
                    )
                    session.add(row)
                    await session.flush()
                    audit_id = row.id
                    await session.commit()
                    return audit_id
            except Exception as exc:
                raise AuditAppendError(event, f"Failed to append audit event: {exc}") from exc

    # ============================================================
    # Listings
    # ============================================================

    async def list_by_entity(self, entity_type: EntityType, entity_id: int) -> list[AuditLogEntry]:
        """All events for one entity, newest first."""
        stmt = select(AuditLog).where(
            AuditLog.entity_type == entity_type.value,
            AuditLog.entity_id == entity_id,
        )
        return await self._fetch(_newest_first(stmt))

    async def list_by_action(
        self, action: AuditAction, limit: int, offset: int = 0
    ) -> list[AuditLogEntry]:
        stmt = select(AuditLog).where(AuditLog.action == action.value)
        return await self._fetch(_newest_first(stmt).limit(limit).offset(offset))

    async def list_by_author(
        self, pattern: str, limit: int, offset: int = 0
    ) -> list[AuditLogEntry]:
        """Events whose author name contains pattern (case-sensitive)."""
        stmt = select(AuditLog).where(AuditLog.author_name.contains(pattern, autoescape=True))
        return await self._fetch(_newest_first(stmt).limit(limit).offset(offset))

    async def list_all(self, limit: int, offset: int = 0) -> list[AuditLogEntry]:
        return await self._fetch(_newest_first(select(AuditLog)).limit(limit).offset(offset))

    async def list_logs(self, filters: AuditFilters) -> list[AuditLogEntry]:
        """List events applying exactly one filter dimension.

        Entity scope wins over action, action over author, and author
        over the unfiltered listing. Entity-scoped listings ignore
        limit and offset.
        """
        if filters.entity_type is not None and filters.entity_id is not None:
            return await self.list_by_entity(filters.entity_type, filters.entity_id)
        if filters.action is not None:
            return await self.list_by_action(filters.action, filters.limit, filters.offset)
        if filters.author_name:
            return await self.list_by_author(filters.author_name, filters.limit, filters.offset)
        return await self.list_all(filters.limit, filters.offset)

    async def recent(self, n: int) -> list[AuditLogEntry]:
        """The n most recent events across all entity types."""
        return await self.list_all(limit=n)

    # ============================================================
    # Aggregates
    # ============================================================

    async def count(self) -> int:
        async with self.session_factory() as session:
            result = await session.execute(select(func.count()).select_from(AuditLog))
            return result.scalar_one()

    async def count_by_action(self) -> dict[AuditAction, int]:
        """Event counts per action, largest first."""
        rows = await self._grouped_counts(AuditLog.action)
        return {AuditAction(key): total for key, total in rows if key in _ACTIONS}

    async def count_by_entity_type(self) -> dict[EntityType, int]:
        """Event counts per entity type, largest first."""
        rows = await self._grouped_counts(AuditLog.entity_type)
        return {EntityType(key): total for key, total in rows if key in _ENTITY_TYPES}

    async def _grouped_counts(self, column: Any) -> list[tuple[str, int]]:
        total = func.count().label("count")
        stmt = select(column, total).group_by(column).order_by(total.desc(), column)
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            return [(key, count) for key, count in result.all()]

    async def _fetch(self, stmt: Select[Any]) -> list[AuditLogEntry]:
        async with self.session_factory() as session:
            result = await session.execute(stmt)
            entries = (_to_entry(row) for row in result.scalars().all())
            return [entry for entry in entries if entry is not None]


_ACTIONS = frozenset(AuditAction)
_ENTITY_TYPES = frozenset(EntityType)


def _newest_first(stmt: Select[Any]) -> Select[Any]:
    # id breaks ties between events recorded within the same clock tick
    return stmt.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc())


def _to_entry(row: AuditLog) -> AuditLogEntry | None:
    """Decode a stored row.

    A corrupt snapshot nulls both states. A row whose action or entity
    type is not a known member is skipped.
    """
    if row.action not in _ACTIONS or row.entity_type not in _ENTITY_TYPES:
        log.warning(
            "audit_row_unrecognized",
            audit_log_id=row.id,
            action=row.action,
            entity_type=row.entity_type,
        )
        return None

    try:
        old_data = load_state(row.old_data)
        new_data = load_state(row.new_data)
    except SnapshotDecodeError as exc:
        log.warning("audit_snapshot_parse_failed", audit_log_id=row.id, error=str(exc))
        old_data = new_data = None

    return AuditLogEntry(
        id=row.id,
        action=AuditAction(row.action),
        entity_type=EntityType(row.entity_type),
        entity_id=row.entity_id,
        author_name=row.author_name or ANONYMOUS_AUTHOR,
        old_data=old_data,
        new_data=new_data,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        timestamp=row.timestamp,
    )


def get_audit_store(request: Request) -> AuditStore:
    """Dependency returning the application's audit store."""
    return request.app.state.audit_store


AuditStoreDep = Annotated[AuditStore, Depends(get_audit_store)]
