"""Comment service for business logic."""

from typing import Annotated

from fastapi import Depends

from tipbase.core.errors import BadRequestError, ForbiddenError, NotFoundError, UnauthorizedError
from tipbase.modules.comments.models import Comment
from tipbase.modules.comments.repos import CommentRepo
from tipbase.modules.comments.schemas import CommentCreate, CommentResponse, CommentUpdate
from tipbase.modules.tips.services import TipSvc


def build_thread(comments: list[Comment]) -> list[CommentResponse]:
    """Nest replies under their parents.

    Input order is preserved at every level. A reply whose parent is not
    in the list is dropped.
    """
    nodes = {c.id: CommentResponse.model_validate(c) for c in comments}
    roots: list[CommentResponse] = []

    for comment in comments:
        node = nodes[comment.id]
        if comment.parent_id is None:
            roots.append(node)
        elif comment.parent_id in nodes:
            nodes[comment.parent_id].replies.append(node)

    return roots


class CommentService:
    """Service for comment operations.

    Writing requires an authenticated identity, and only the author of
    a comment may change or remove it.
    """

    def __init__(self, repo: CommentRepo, tips: TipSvc) -> None:
        self.repo = repo
        self.tips = tips

    async def list_thread(self, tip_id: int) -> list[CommentResponse]:
        comments = await self.repo.list_for_tip(tip_id)
        return build_thread(comments)

    async def create_comment(
        self, tip_id: int, data: CommentCreate, identity_name: str | None
    ) -> Comment:
        """Post a comment on a tip.

        Raises:
            UnauthorizedError: If there is no authenticated identity
            NotFoundError: If the tip does not exist
            BadRequestError: If parent_id is not a comment on the same tip
        """
        if not identity_name:
            raise UnauthorizedError("Authentication required to comment")

        await self.tips.get_tip(tip_id)

        if data.parent_id is not None:
            parent = await self.repo.get_active(data.parent_id)
            if parent is None or parent.tip_id != tip_id:
                raise BadRequestError(
                    "Parent comment not found on this tip",
                    details={"parent_id": data.parent_id},
                )

        comment = Comment(
            tip_id=tip_id,
            author_name=identity_name,
            content=data.content,
            parent_id=data.parent_id,
        )
        return await self.repo.create(comment)

    async def update_comment(
        self, comment_id: int, data: CommentUpdate, identity_name: str | None
    ) -> Comment:
        """Edit the text of one's own comment."""
        comment = await self._get_owned(comment_id, identity_name, "edit")
        comment.content = data.content
        return await self.repo.save(comment)

    async def delete_comment(self, comment_id: int, identity_name: str | None) -> Comment:
        """Soft-delete one's own comment.

        Raises:
            BadRequestError: If the comment still has active replies
        """
        comment = await self._get_owned(comment_id, identity_name, "delete")

        if await self.repo.count_replies(comment_id) > 0:
            raise BadRequestError("Cannot delete a comment that has replies")

        comment.is_active = False
        return await self.repo.save(comment)

    async def _get_owned(self, comment_id: int, identity_name: str | None, verb: str) -> Comment:
        if not identity_name:
            raise UnauthorizedError("Authentication required")

        comment = await self.repo.get_active(comment_id)
        if comment is None:
            raise NotFoundError(
                "Comment not found", resource="comment", resource_id=str(comment_id)
            )

        if comment.author_name != identity_name:
            raise ForbiddenError(f"You can only {verb} your own comments")

        return comment


CommentSvc = Annotated[CommentService, Depends(CommentService)]
