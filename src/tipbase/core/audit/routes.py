"""Audit log API routes (read-only)."""

from typing import Annotated

from fastapi import APIRouter, Query

from tipbase.config import settings
from tipbase.core.audit.models import AuditAction, EntityType
from tipbase.core.audit.schemas import (
    AuditEntityLogsResponse,
    AuditFilters,
    AuditLogListResponse,
    AuditStatsResponse,
)
from tipbase.core.audit.service import AuditQuerySvc


router = APIRouter(prefix="/audit-logs", tags=["audit"])


@router.get(
    "",
    response_model=AuditLogListResponse,
    summary="List audit logs",
    description=(
        "List recorded changes, newest first. Only one filter applies per "
        "request: entityType+entityId, then action, then authorName."
    ),
)
async def list_audit_logs(
    service: AuditQuerySvc,
    limit: Annotated[int | None, Query(ge=1, description="Page size")] = None,
    offset: Annotated[int, Query(ge=0, description="Records to skip")] = 0,
    action: Annotated[AuditAction | None, Query()] = None,
    entity_type: Annotated[EntityType | None, Query(alias="entityType")] = None,
    entity_id: Annotated[int | None, Query(alias="entityId")] = None,
    author_name: Annotated[str | None, Query(alias="authorName")] = None,
) -> AuditLogListResponse:
    """List audit logs with optional filtering."""
    page_size = min(limit or settings.audit_default_limit, settings.audit_max_limit)
    filters = AuditFilters(
        limit=page_size,
        offset=offset,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        author_name=author_name,
    )
    return await service.list_logs(filters)


@router.get(
    "/stats",
    response_model=AuditStatsResponse,
    summary="Audit statistics",
    description="Totals by action and entity type plus the most recent activity.",
)
async def audit_stats(service: AuditQuerySvc) -> AuditStatsResponse:
    """Get audit statistics."""
    return await service.stats()


@router.get(
    "/{entity_type}/{entity_id}",
    response_model=AuditEntityLogsResponse,
    summary="Entity history",
    description="Every recorded change of one tip, comment or attachment, newest first.",
)
async def entity_audit_logs(
    entity_type: EntityType,
    entity_id: int,
    service: AuditQuerySvc,
) -> AuditEntityLogsResponse:
    """Get audit logs for a specific entity."""
    return await service.entity_logs(entity_type, entity_id)
