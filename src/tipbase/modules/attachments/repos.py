"""Attachment repository for database operations."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy import select

from tipbase.api.dependencies import DBSession
from tipbase.modules.attachments.models import Attachment


class AttachmentRepository:
    """Repository for Attachment database operations."""

    def __init__(self, session: DBSession) -> None:
        self.session = session

    async def list_for_tip(self, tip_id: int) -> list[Attachment]:
        """Attachments of a tip, newest first."""
        stmt = (
            select(Attachment)
            .where(Attachment.tip_id == tip_id)
            .order_by(Attachment.created_at.desc(), Attachment.id.desc())
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_by_id(self, attachment_id: int) -> Attachment | None:
        return await self.session.get(Attachment, attachment_id)

    async def create_many(self, attachments: list[Attachment]) -> list[Attachment]:
        """Insert a batch of attachments in one transaction."""
        self.session.add_all(attachments)
        await self.session.commit()
        for attachment in attachments:
            await self.session.refresh(attachment)
        return attachments

    async def delete(self, attachment: Attachment) -> None:
        await self.session.delete(attachment)
        await self.session.commit()


AttachmentRepo = Annotated[AttachmentRepository, Depends(AttachmentRepository)]
