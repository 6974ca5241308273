"""Attachment API routes."""

from typing import Annotated

from fastapi import Depends, File, Form, UploadFile, status

from tipbase.core.audit import AuditOperation, Auditor, audited
from tipbase.core.identity import get_identity_name
from tipbase.modules.attachments import router, tip_attachments_router
from tipbase.modules.attachments.schemas import (
    AttachmentResponse,
    AttachmentUploadResponse,
    MessageResponse,
)
from tipbase.modules.attachments.services import AttachmentSvc


IdentityName = Annotated[str | None, Depends(get_identity_name)]


@tip_attachments_router.post(
    "",
    response_model=AttachmentUploadResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload attachments",
    description="Upload up to five files to a tip as multipart field 'attachments'.",
)
@audited(AuditOperation.ATTACHMENT_CREATE)
async def upload_attachments(
    tip_id: int,
    service: AttachmentSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
    identity_name: IdentityName,
    attachments: Annotated[list[UploadFile], File(description="Files to attach")],
    author_name: Annotated[str | None, Form()] = None,
) -> AttachmentUploadResponse:
    """Upload attachments."""
    saved = await service.upload(tip_id, attachments, author_name or identity_name)
    return AttachmentUploadResponse(
        message=f"Successfully uploaded {len(saved)} file(s)",
        attachments=[AttachmentResponse.model_validate(a) for a in saved],
    )


@tip_attachments_router.get(
    "",
    response_model=list[AttachmentResponse],
    summary="List attachments",
    description="Attachments of a tip, newest first.",
)
async def list_attachments(tip_id: int, service: AttachmentSvc) -> list[AttachmentResponse]:
    """List attachments."""
    attachments = await service.list_attachments(tip_id)
    return [AttachmentResponse.model_validate(a) for a in attachments]


@router.delete(
    "/{attachment_id}",
    response_model=MessageResponse,
    summary="Delete attachment",
    description="Remove an attachment and its stored file.",
)
@audited(AuditOperation.ATTACHMENT_DELETE, id_param="attachment_id")
async def delete_attachment(
    attachment_id: int,
    service: AttachmentSvc,
    audit: Auditor,  # noqa: ARG001 - read by @audited
) -> MessageResponse:
    """Delete an attachment."""
    await service.delete(attachment_id)
    return MessageResponse(message="Attachment deleted successfully")
