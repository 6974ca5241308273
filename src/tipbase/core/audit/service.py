"""Read-side service over the audit store.

Store failures surface as ServiceUnavailableError; the stats endpoint
never returns a partial aggregate.
"""

from typing import Annotated

import structlog
from fastapi import Depends
from sqlalchemy.exc import SQLAlchemyError

from tipbase.config import settings
from tipbase.core.audit.models import EntityType
from tipbase.core.audit.schemas import (
    ActionCount,
    AuditEntityLogsResponse,
    AuditFilters,
    AuditLogListResponse,
    AuditStatsResponse,
    EntityTypeCount,
    Pagination,
    RecentActivity,
)
from tipbase.core.audit.store import AuditStoreDep
from tipbase.core.errors import ServiceUnavailableError


log = structlog.get_logger()


class AuditQueryService:
    """Listing and aggregation over recorded audit events."""

    def __init__(self, store: AuditStoreDep) -> None:
        self.store = store

    async def list_logs(self, filters: AuditFilters) -> AuditLogListResponse:
        """List events for the single filter dimension that applies.

        Raises:
            ServiceUnavailableError: If the store cannot be read
        """
        try:
            logs = await self.store.list_logs(filters)
        except SQLAlchemyError as exc:
            log.exception("audit_logs_retrieve_failed", error=str(exc))
            raise ServiceUnavailableError("Failed to retrieve audit logs") from exc

        return AuditLogListResponse(
            logs=logs,
            pagination=Pagination(
                limit=filters.limit,
                offset=filters.offset,
                has_more=len(logs) == filters.limit,
            ),
        )

    async def entity_logs(self, entity_type: EntityType, entity_id: int) -> AuditEntityLogsResponse:
        """Full history of one entity, newest first."""
        try:
            logs = await self.store.list_by_entity(entity_type, entity_id)
        except SQLAlchemyError as exc:
            log.exception(
                "audit_entity_logs_retrieve_failed",
                entity_type=entity_type.value,
                entity_id=entity_id,
                error=str(exc),
            )
            raise ServiceUnavailableError("Failed to retrieve entity audit logs") from exc

        return AuditEntityLogsResponse(logs=logs)

    async def stats(self) -> AuditStatsResponse:
        """Totals per action and entity type plus the latest activity."""
        try:
            total = await self.store.count()
            by_action = await self.store.count_by_action()
            by_entity_type = await self.store.count_by_entity_type()
            recent = await self.store.recent(settings.audit_recent_activity)
        except SQLAlchemyError as exc:
            log.exception("audit_stats_retrieve_failed", error=str(exc))
            raise ServiceUnavailableError("Failed to retrieve audit statistics") from exc

        return AuditStatsResponse(
            total_logs=total,
            logs_by_action=[
                ActionCount(action=action, count=count) for action, count in by_action.items()
            ],
            logs_by_entity_type=[
                EntityTypeCount(entity_type=entity_type, count=count)
                for entity_type, count in by_entity_type.items()
            ],
            recent_activity=[
                RecentActivity(
                    action=entry.action,
                    entity_type=entry.entity_type,
                    author_name=entry.author_name,
                    timestamp=entry.timestamp,
                )
                for entry in recent
            ],
        )


AuditQuerySvc = Annotated[AuditQueryService, Depends(AuditQueryService)]
