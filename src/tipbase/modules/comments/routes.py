"""Comment API routes."""

from typing import Annotated

from fastapi import Depends, status

from tipbase.core.audit import AuditOperation, Auditor, audited
from tipbase.core.identity import get_identity_name
from tipbase.modules.comments import router, tip_comments_router
from tipbase.modules.comments.schemas import (
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    MessageResponse,
)
from tipbase.modules.comments.services import CommentSvc


IdentityName = Annotated[str | None, Depends(get_identity_name)]


# ============================================================
# Comments under a tip
# ============================================================


@tip_comments_router.get(
    "",
    response_model=list[CommentResponse],
    summary="List comments",
    description="Active comments on a tip, threaded by reply.",
)
async def list_comments(tip_id: int, service: CommentSvc) -> list[CommentResponse]:
    """List the comment thread of a tip."""
    return await service.list_thread(tip_id)


@tip_comments_router.post(
    "",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Post comment",
    description="Post a comment or a reply. Requires an authenticated identity.",
)
@audited(AuditOperation.COMMENT_CREATE)
async def create_comment(
    tip_id: int,
    data: CommentCreate,
    service: CommentSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
    identity_name: IdentityName,
) -> CommentResponse:
    """Create a comment."""
    comment = await service.create_comment(tip_id, data, identity_name)
    return CommentResponse.model_validate(comment)


# ============================================================
# Single comment
# ============================================================


@router.put(
    "/{comment_id}",
    response_model=CommentResponse,
    summary="Edit comment",
    description="Edit one's own comment.",
)
@audited(AuditOperation.COMMENT_UPDATE, id_param="comment_id")
async def update_comment(
    comment_id: int,
    data: CommentUpdate,
    service: CommentSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
    identity_name: IdentityName,
) -> CommentResponse:
    """Edit a comment."""
    comment = await service.update_comment(comment_id, data, identity_name)
    return CommentResponse.model_validate(comment)


@router.delete(
    "/{comment_id}",
    response_model=MessageResponse,
    summary="Delete comment",
    description="Delete one's own comment. Comments with replies cannot be deleted.",
)
@audited(AuditOperation.COMMENT_DELETE, id_param="comment_id")
async def delete_comment(
    comment_id: int,
    service: CommentSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
    identity_name: IdentityName,
) -> MessageResponse:
    """Delete a comment."""
    await service.delete_comment(comment_id, identity_name)
    return MessageResponse(message="Comment deleted successfully")
