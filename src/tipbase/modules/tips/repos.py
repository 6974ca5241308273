"""Tip repository for database operations."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from tipbase.api.dependencies import DBSession
from tipbase.core.audit import EntityType, register_entity_lookup
from tipbase.modules.tips.models import Tip


class TipRepository:
    """Repository for Tip database operations.

    Only active tips are visible; deleted tips stay in the table with
    is_active unset. Writes are committed immediately so the audit
    store, which uses its own connection, sees them.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def list_active(self, query: str | None = None) -> list[Tip]:
        """List active tips, most recently updated first.

        Args:
            query: Optional case-insensitive substring matched against
                the text fields and the author name
        """
        stmt = select(Tip).where(Tip.is_active.is_(True))
        if query:
            stmt = stmt.where(
                or_(
                    *(
                        column.icontains(query, autoescape=True)
                        for column in (
                            Tip.title,
                            Tip.category,
                            Tip.problem,
                            Tip.solution,
                            Tip.location,
                            Tip.author_name,
                        )
                    )
                )
            )
        stmt = stmt.order_by(Tip.updated_at.desc(), Tip.id.desc())
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active(self, tip_id: int) -> Tip | None:
        return await fetch_tip(self.session, tip_id)

    async def create(self, tip: Tip) -> Tip:
        """Insert a tip and return it with server defaults loaded."""
        self.session.add(tip)
        await self.session.commit()
        await self.session.refresh(tip)
        return tip

    async def save(self, tip: Tip) -> Tip:
        """Commit pending changes to a tip and reload it."""
        await self.session.commit()
        await self.session.refresh(tip)
        return tip


@register_entity_lookup(EntityType.TIP)
async def fetch_tip(session: AsyncSession, tip_id: int) -> Tip | None:
    """Load an active tip by ID."""
    stmt = select(Tip).where(Tip.id == tip_id, Tip.is_active.is_(True))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


TipRepo = Annotated[TipRepository, Depends(TipRepository)]
