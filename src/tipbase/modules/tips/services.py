"""Tip service for business logic."""

from typing import Annotated

from fastapi import Depends

from tipbase.core.constants import ANONYMOUS_AUTHOR
from tipbase.core.errors import NotFoundError
from tipbase.modules.tips.models import Tip
from tipbase.modules.tips.repos import TipRepo
from tipbase.modules.tips.schemas import TipCreate, TipUpdate


class TipService:
    """Service for tip CRUD operations."""

    def __init__(self, repo: TipRepo) -> None:
        self.repo = repo

    async def list_tips(self, query: str | None = None) -> list[Tip]:
        return await self.repo.list_active(query)

    async def get_tip(self, tip_id: int) -> Tip:
        """Get an active tip.

        Raises:
            NotFoundError: If the tip does not exist or was deleted
        """
        tip = await self.repo.get_active(tip_id)
        if tip is None:
            raise NotFoundError("Tip not found", resource="tip", resource_id=str(tip_id))
        return tip

    async def create_tip(self, data: TipCreate, identity_name: str | None = None) -> Tip:
        """Create a tip.

        The author is the authenticated user when there is one, otherwise
        the name given in the request, otherwise Anonymous.
        """
        tip = Tip(
            title=data.title,
            category=data.category,
            problem=data.problem,
            solution=data.solution,
            location=data.location,
            additional_details=data.additional_details,
            author_name=identity_name or data.author_name or ANONYMOUS_AUTHOR,
        )
        return await self.repo.create(tip)

    async def update_tip(self, tip_id: int, data: TipUpdate) -> Tip:
        """Replace a tip's content, keeping the author unless a new one is given.

        Raises:
            NotFoundError: If the tip does not exist or was deleted
        """
        tip = await self.get_tip(tip_id)

        tip.title = data.title
        tip.category = data.category
        tip.problem = data.problem
        tip.solution = data.solution
        tip.location = data.location
        tip.additional_details = data.additional_details
        if data.author_name:
            tip.author_name = data.author_name

        return await self.repo.save(tip)

    async def delete_tip(self, tip_id: int) -> Tip:
        """Soft-delete a tip and return it as it was.

        Raises:
            NotFoundError: If the tip does not exist or was deleted
        """
        tip = await self.get_tip(tip_id)
        tip.is_active = False
        return await self.repo.save(tip)


TipSvc = Annotated[TipService, Depends(TipService)]
