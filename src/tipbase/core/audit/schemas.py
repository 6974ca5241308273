"""Pydantic schemas for audit records and the audit query API."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from tipbase.core.audit.models import AuditAction, EntityType
from tipbase.core.constants import ANONYMOUS_AUTHOR, DEFAULT_AUDIT_LIMIT


# ============================================================
# Write side
# ============================================================


@dataclass(frozen=True)
class AuditEvent:
    """An audit record ready to be appended to the store.

    CREATE carries only new_state, DELETE only old_state, UPDATE both.
    """

    action: AuditAction
    entity_type: EntityType
    entity_id: int
    author_name: str = ANONYMOUS_AUTHOR
    old_state: dict[str, Any] | None = None
    new_state: dict[str, Any] | None = None
    client_address: str | None = None
    client_agent: str | None = None

    def __post_init__(self) -> None:
        if self.action is AuditAction.CREATE and self.old_state is not None:
            raise ValueError("CREATE events cannot carry an old state")
        if self.action is AuditAction.DELETE and self.new_state is not None:
            raise ValueError("DELETE events cannot carry a new state")
        if self.action is not AuditAction.CREATE and self.old_state is None:
            raise ValueError(f"{self.action} events require an old state")
        if self.action is not AuditAction.DELETE and self.new_state is None:
            raise ValueError(f"{self.action} events require a new state")
        if not self.author_name:
            object.__setattr__(self, "author_name", ANONYMOUS_AUTHOR)


# ============================================================
# Read side
# ============================================================


@dataclass(frozen=True)
class AuditFilters:
    """Listing filters. Only one dimension is applied per query.

    Precedence: entity (type and id together), then action, then
    author, then the unfiltered listing.
    """

    limit: int = DEFAULT_AUDIT_LIMIT
    offset: int = 0
    action: AuditAction | None = None
    entity_type: EntityType | None = None
    entity_id: int | None = None
    author_name: str | None = None


class AuditLogEntry(BaseModel):
    """A stored audit record with its snapshots decoded."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    action: AuditAction
    entity_type: EntityType
    entity_id: int
    author_name: str
    old_data: dict[str, Any] | None = None
    new_data: dict[str, Any] | None = None
    ip_address: str | None = None
    user_agent: str | None = None
    timestamp: datetime


class Pagination(BaseModel):
    """Limit/offset pagination block.

    has_more is advisory: it is true whenever a full page came back,
    even if that page happened to be the last one.
    """

    model_config = ConfigDict(populate_by_name=True)

    limit: int
    offset: int
    has_more: bool = Field(alias="hasMore")


class AuditLogListResponse(BaseModel):
    """Paginated audit log listing."""

    logs: list[AuditLogEntry]
    pagination: Pagination


class AuditEntityLogsResponse(BaseModel):
    """Full history of one entity, newest first."""

    logs: list[AuditLogEntry]


class ActionCount(BaseModel):
    action: AuditAction
    count: int


class EntityTypeCount(BaseModel):
    entity_type: EntityType
    count: int


class RecentActivity(BaseModel):
    action: AuditAction
    entity_type: EntityType
    author_name: str
    timestamp: datetime


class AuditStatsResponse(BaseModel):
    """Aggregate view over the whole audit log."""

    model_config = ConfigDict(populate_by_name=True)

    total_logs: int = Field(alias="totalLogs")
    logs_by_action: list[ActionCount] = Field(alias="logsByAction")
    logs_by_entity_type: list[EntityTypeCount] = Field(alias="logsByEntityType")
    recent_activity: list[RecentActivity] = Field(alias="recentActivity")
