"""Comment repository for database operations."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from tipbase.api.dependencies import DBSession
from tipbase.core.audit import EntityType, register_entity_lookup
from tipbase.modules.comments.models import Comment


class CommentRepository:
    """Repository for Comment database operations.

    Deleted comments keep their row with is_active unset.
    """

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def list_for_tip(self, tip_id: int) -> list[Comment]:
        """Active comments on a tip in creation order."""
        stmt = (
            select(Comment)
            .where(Comment.tip_id == tip_id, Comment.is_active.is_(True))
            .order_by(Comment.created_at, Comment.id)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_active(self, comment_id: int) -> Comment | None:
        return await fetch_comment(self.session, comment_id)

    async def count_replies(self, comment_id: int) -> int:
        stmt = (
            select(func.count())
            .select_from(Comment)
            .where(Comment.parent_id == comment_id, Comment.is_active.is_(True))
        )
        result = await self.session.execute(stmt)
        return result.scalar_one()

    async def create(self, comment: Comment) -> Comment:
        self.session.add(comment)
        await self.session.commit()
        await self.session.refresh(comment)
        return comment

    async def save(self, comment: Comment) -> Comment:
        await self.session.commit()
        await self.session.refresh(comment)
        return comment


@register_entity_lookup(EntityType.COMMENT)
async def fetch_comment(session: AsyncSession, comment_id: int) -> Comment | None:
    """Load an active comment by ID."""
    stmt = select(Comment).where(Comment.id == comment_id, Comment.is_active.is_(True))
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


CommentRepo = Annotated[CommentRepository, Depends(CommentRepository)]
