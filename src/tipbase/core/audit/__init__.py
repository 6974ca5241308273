"""Change tracking for tips, comments and attachments.

Provides:
- AuditLog model and the append-only AuditStore
- describe_changes, the field-level diff used for updates
- AuditInterceptor and the @audited route decorator
- AuditQueryService and the read-only audit API router
"""

from tipbase.core.audit.diff import describe_changes, describe_entity_changes
from tipbase.core.audit.interceptor import (
    AuditInterceptor,
    AuditOperation,
    Auditor,
    audited,
    display_title,
)
from tipbase.core.audit.lookup import EntityLookup, register_entity_lookup
from tipbase.core.audit.models import AuditAction, AuditLog, EntityType
from tipbase.core.audit.routes import router
from tipbase.core.audit.schemas import AuditEvent, AuditFilters, AuditLogEntry
from tipbase.core.audit.service import AuditQueryService
from tipbase.core.audit.store import AuditAppendError, AuditStore, get_audit_store


__all__ = [
    "AuditAction",
    "AuditAppendError",
    "AuditEvent",
    "AuditFilters",
    "AuditInterceptor",
    "AuditLog",
    "AuditLogEntry",
    "AuditOperation",
    "AuditQueryService",
    "AuditStore",
    "Auditor",
    "EntityLookup",
    "EntityType",
    "audited",
    "describe_changes",
    "describe_entity_changes",
    "display_title",
    "get_audit_store",
    "register_entity_lookup",
    "router",
]
