"""Prior-state lookup for audited entities.

Feature modules register a fetcher per entity type; the interceptor
uses them to snapshot an entity before it is updated or deleted.
"""

from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from tipbase.core.audit.models import EntityType
from tipbase.core.audit.snapshot import take_snapshot


Fetcher = Callable[[AsyncSession, int], Awaitable[Any]]

_fetchers: dict[EntityType, Fetcher] = {}


class EntityLookup(Protocol):
    """Fetches the current state of an audited entity."""

    async def fetch_by_id(self, entity_type: EntityType, entity_id: int) -> dict[str, Any] | None:
        """Return a snapshot of the entity, or None if it does not exist."""
        ...


def register_entity_lookup(entity_type: EntityType) -> Callable[[Fetcher], Fetcher]:
    """Register a fetcher used for prior-state snapshots.

    Example:
        @register_entity_lookup(EntityType.TIP)
        async def fetch_tip(session: AsyncSession, tip_id: int) -> Tip | None:
            ...
    """

    def decorator(func: Fetcher) -> Fetcher:
        _fetchers[entity_type] = func
        return func

    return decorator


class SessionEntityLookup:
    """EntityLookup over the request's database session."""

    def __init__(
        self,
        session: AsyncSession,
        fetchers: dict[EntityType, Fetcher] | None = None,
    ) -> None:
        self.session = session
        self.fetchers = _fetchers if fetchers is None else fetchers

    async def fetch_by_id(self, entity_type: EntityType, entity_id: int) -> dict[str, Any] | None:
        fetcher = self.fetchers.get(entity_type)
        if fetcher is None:
            return None
        return take_snapshot(await fetcher(self.session, entity_id))
