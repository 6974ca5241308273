"""Mutation interceptor: records audit events for successful writes.

Routes opt in with the @audited decorator, naming the operation they
perform. The decorator runs a three-stage pipeline around the route:

    prior state lookup -> route handler -> interceptor.record(result)

Only a handler that returns normally is audited. Handlers that raise
(NotFoundError, BadRequestError, ...) leave no trace in the audit log.
Nothing that happens inside the audit path is allowed to change the
route's response.
"""

import asyncio
from collections.abc import Awaitable, Callable, Mapping
from enum import Enum
from functools import wraps
from typing import Annotated, Any, ParamSpec, TypeVar

import structlog
from fastapi import Depends, Request
from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from tipbase.config import settings
from tipbase.core.audit.diff import describe_entity_changes
from tipbase.core.audit.lookup import EntityLookup, SessionEntityLookup
from tipbase.core.audit.models import AuditAction, EntityType
from tipbase.core.audit.schemas import AuditEvent
from tipbase.core.audit.snapshot import take_snapshot
from tipbase.core.audit.store import AuditAppendError, AuditStore, AuditStoreDep
from tipbase.core.constants import (
    ANONYMOUS_AUTHOR,
    AUTHOR_BODY_FIELD,
    AUTHOR_HEADER,
    AUTHOR_QUERY_PARAM,
    CHANGES_KEY,
    DISPLAY_TITLE_KEY,
)
from tipbase.core.database import get_db
from tipbase.core.identity import get_identity_name
from tipbase.core.logging import get_client_ip


log = structlog.get_logger()

P = ParamSpec("P")
R = TypeVar("R")


class AuditOperation(Enum):
    """The closed set of audited operations."""

    TIP_CREATE = (AuditAction.CREATE, EntityType.TIP)
    TIP_UPDATE = (AuditAction.UPDATE, EntityType.TIP)
    TIP_DELETE = (AuditAction.DELETE, EntityType.TIP)
    ATTACHMENT_CREATE = (AuditAction.CREATE, EntityType.ATTACHMENT)
    ATTACHMENT_DELETE = (AuditAction.DELETE, EntityType.ATTACHMENT)
    COMMENT_CREATE = (AuditAction.CREATE, EntityType.COMMENT)
    COMMENT_UPDATE = (AuditAction.UPDATE, EntityType.COMMENT)
    COMMENT_DELETE = (AuditAction.DELETE, EntityType.COMMENT)

    @property
    def action(self) -> AuditAction:
        return self.value[0]

    @property
    def entity_type(self) -> EntityType:
        return self.value[1]


_TITLE_FIELDS = {
    EntityType.TIP: "title",
    EntityType.COMMENT: "author_name",
    EntityType.ATTACHMENT: "original_name",
}


def display_title(
    entity_type: EntityType,
    entity_id: int,
    *states: Mapping[str, Any] | None,
    author_name: str = ANONYMOUS_AUTHOR,
) -> str:
    """Compute the human-readable label stored with each snapshot.

    Tips use their title and attachments their original file name, taken
    from the first state that has one, else "<Entity> #<id>". Comments
    are labelled "Comment by <author>".
    """
    field = _TITLE_FIELDS[entity_type]
    title = next((s[field] for s in states if s and s.get(field)), None)
    if entity_type is EntityType.COMMENT:
        return f"Comment by {title or author_name}"
    return title or f"{entity_type.label} #{entity_id}"


def resolve_author(request: Request) -> str:
    """Resolve the actor from the query string, header or identity.

    A body-level author_name takes precedence over all of these and is
    applied by the decorator once the body has been parsed. Blank
    values are skipped.
    """
    candidates = (
        request.query_params.get(AUTHOR_QUERY_PARAM),
        request.headers.get(AUTHOR_HEADER),
        get_identity_name(request),
    )
    for candidate in candidates:
        if candidate and candidate.strip():
            return candidate.strip()
    return ANONYMOUS_AUTHOR


class AuditInterceptor:
    """Request-scoped recorder of audit events.

    Args:
        store: Where events are appended
        lookup: Source of prior state for updates and deletes
        enabled: When False, nothing is looked up or recorded
        author_name: Actor resolved from the request
        client_address: Client IP address
        client_agent: Client user agent
    """

    def __init__(
        self,
        store: AuditStore,
        lookup: EntityLookup,
        *,
        enabled: bool = True,
        author_name: str = ANONYMOUS_AUTHOR,
        client_address: str | None = None,
        client_agent: str | None = None,
    ) -> None:
        self.store = store
        self.lookup = lookup
        self.enabled = enabled
        self.author_name = author_name or ANONYMOUS_AUTHOR
        self.client_address = client_address
        self.client_agent = client_agent

    async def capture_prior(
        self, operation: AuditOperation, entity_id: int | None
    ) -> dict[str, Any] | None:
        """Snapshot the entity an update or delete is about to touch.

        Returns None for creates, for unknown ids and when the lookup
        fails; the request goes ahead either way.
        """
        if not self.enabled or operation.action is AuditAction.CREATE or entity_id is None:
            return None

        try:
            prior = await self.lookup.fetch_by_id(operation.entity_type, entity_id)
        except Exception as exc:
            log.warning(
                "audit_prior_state_lookup_failed",
                entity_type=operation.entity_type.value,
                entity_id=entity_id,
                error=str(exc),
            )
            return None

        if prior is None:
            log.debug(
                "audit_prior_state_missing",
                entity_type=operation.entity_type.value,
                entity_id=entity_id,
            )
        return prior

    async def record(
        self,
        operation: AuditOperation,
        result: Any,
        *,
        entity_id: int | None = None,
        prior_state: dict[str, Any] | None = None,
        author_name: str | None = None,
    ) -> list[int]:
        """Append the events describing a completed operation.

        Args:
            operation: What the handler did
            result: The handler's success payload
            entity_id: ID from the request path, for updates and deletes
            prior_state: Snapshot taken by capture_prior
            author_name: Author given in the request body, if any

        Returns:
            IDs of the events that were stored
        """
        if not self.enabled:
            return []

        author = author_name or self.author_name
        try:
            events = self.build_events(operation, result, entity_id, prior_state, author)
        except Exception:
            log.exception(
                "audit_event_build_failed",
                action=operation.action.value,
                entity_type=operation.entity_type.value,
                entity_id=entity_id,
                author_name=author,
            )
            return []

        recorded = []
        for event in events:
            audit_id = await self._submit(event)
            if audit_id is not None:
                recorded.append(audit_id)
        return recorded

    def build_events(
        self,
        operation: AuditOperation,
        result: Any,
        entity_id: int | None,
        prior_state: dict[str, Any] | None,
        author_name: str,
    ) -> list[AuditEvent]:
        """Turn a handler result into one event per affected entity."""
        action = operation.action
        entity_type = operation.entity_type
        payload = take_snapshot(result) if result is not None else None

        if action is AuditAction.CREATE:
            # One upload call may create several attachments
            items = (payload or {}).get("attachments")
            if entity_type is EntityType.ATTACHMENT and isinstance(items, list):
                created = items
            else:
                created = [payload] if payload else []
            return [
                self._event(
                    action,
                    entity_type,
                    int(item["id"]),
                    author_name,
                    new_state=self._with_title(entity_type, int(item["id"]), author_name, item),
                )
                for item in created
                if item and item.get("id") is not None
            ]

        target_id = entity_id if entity_id is not None else (payload or {}).get("id")
        if target_id is None:
            log.warning(
                "audit_entity_id_missing",
                action=action.value,
                entity_type=entity_type.value,
            )
            return []
        target_id = int(target_id)

        if action is AuditAction.DELETE:
            old_state = self._with_title(entity_type, target_id, author_name, prior_state, payload)
            return [self._event(action, entity_type, target_id, author_name, old_state=old_state)]

        new_state = {
            **(payload or {}),
            DISPLAY_TITLE_KEY: display_title(
                entity_type, target_id, payload, prior_state, author_name=author_name
            ),
        }
        changes = describe_entity_changes(entity_type, prior_state, payload)
        if changes is not None:
            new_state[CHANGES_KEY] = changes
        old_state = self._with_title(entity_type, target_id, author_name, prior_state, payload)
        return [
            self._event(
                action, entity_type, target_id, author_name, old_state=old_state, new_state=new_state
            )
        ]

    def _with_title(
        self,
        entity_type: EntityType,
        entity_id: int,
        author_name: str,
        state: Mapping[str, Any] | None,
        *fallbacks: Mapping[str, Any] | None,
    ) -> dict[str, Any]:
        """Copy state and label it; fallbacks only supply the title."""
        return {
            **(state or {}),
            DISPLAY_TITLE_KEY: display_title(
                entity_type, entity_id, state, *fallbacks, author_name=author_name
            ),
        }

    def _event(
        self,
        action: AuditAction,
        entity_type: EntityType,
        entity_id: int,
        author_name: str,
        old_state: dict[str, Any] | None = None,
        new_state: dict[str, Any] | None = None,
    ) -> AuditEvent:
        return AuditEvent(
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            author_name=author_name,
            old_state=old_state,
            new_state=new_state,
            client_address=self.client_address,
            client_agent=self.client_agent,
        )

    async def _submit(self, event: AuditEvent) -> int | None:
        # Shielded so a client disconnect cannot cancel a started append
        try:
            audit_id = await asyncio.shield(self.store.append(event))
        except AuditAppendError as exc:
            log.error(
                "audit_append_failed",
                action=event.action.value,
                entity_type=event.entity_type.value,
                entity_id=event.entity_id,
                author_name=event.author_name,
                error=str(exc.__cause__ or exc),
            )
            return None

        log.info(
            "audit_event_recorded",
            audit_log_id=audit_id,
            action=event.action.value,
            entity_type=event.entity_type.value,
            entity_id=event.entity_id,
            author_name=event.author_name,
        )
        return audit_id


def _body_author(args: tuple[Any, ...], kwargs: dict[str, Any]) -> str | None:
    """Find an author_name supplied in the parsed request body or form."""
    value = kwargs.get(AUTHOR_BODY_FIELD)
    if isinstance(value, str) and value.strip():
        return value.strip()
    for arg in (*args, *kwargs.values()):
        if isinstance(arg, BaseModel):
            candidate = getattr(arg, AUTHOR_BODY_FIELD, None)
            if isinstance(candidate, str) and candidate.strip():
                return candidate.strip()
    return None


def _find_interceptor(args: tuple[Any, ...], kwargs: dict[str, Any]) -> AuditInterceptor | None:
    for arg in (*args, *kwargs.values()):
        if isinstance(arg, AuditInterceptor):
            return arg
    return None


def audited(
    operation: AuditOperation,
    id_param: str | None = None,
) -> Callable[[Callable[P, Awaitable[R]]], Callable[P, Awaitable[R]]]:
    """Decorator that records an audit event when a route succeeds.

    The route must take an Auditor dependency. For updates and deletes,
    id_param names the path parameter holding the entity ID.

    Usage:
        @router.put("/{tip_id}")
        @audited(AuditOperation.TIP_UPDATE, id_param="tip_id")
        async def update_tip(tip_id: int, data: TipUpdate, audit: Auditor):
            ...
    """

    def decorator(func: Callable[P, Awaitable[R]]) -> Callable[P, Awaitable[R]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            interceptor = _find_interceptor(args, kwargs)
            if interceptor is None:
                log.warning("audit_interceptor_missing", endpoint=func.__name__)
                return await func(*args, **kwargs)

            raw_id = kwargs.get(id_param) if id_param else None
            entity_id = int(raw_id) if raw_id is not None else None

            prior_state = await interceptor.capture_prior(operation, entity_id)

            result = await func(*args, **kwargs)

            await interceptor.record(
                operation,
                result,
                entity_id=entity_id,
                prior_state=prior_state,
                author_name=_body_author(args, kwargs),
            )
            return result

        return wrapper

    return decorator


async def get_audit_interceptor(
    request: Request,
    store: AuditStoreDep,
    db: Annotated[AsyncSession, Depends(get_db)],
) -> AuditInterceptor:
    """Dependency that builds the interceptor for the current request."""
    return AuditInterceptor(
        store=store,
        lookup=SessionEntityLookup(db),
        enabled=settings.audit_enabled,
        author_name=resolve_author(request),
        client_address=get_client_ip(request),
        client_agent=request.headers.get("User-Agent"),
    )


Auditor = Annotated[AuditInterceptor, Depends(get_audit_interceptor)]
