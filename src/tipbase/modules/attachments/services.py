"""Attachment service for upload validation and storage."""

from dataclasses import dataclass
from pathlib import Path
from typing import Annotated

import structlog
from fastapi import Depends, UploadFile

from tipbase.config import settings
from tipbase.core.constants import ALLOWED_EXTENSIONS, ALLOWED_MIME_TYPES, ANONYMOUS_AUTHOR
from tipbase.core.errors import BadRequestError, NotFoundError
from tipbase.modules.attachments.models import Attachment
from tipbase.modules.attachments.repos import AttachmentRepo
from tipbase.modules.attachments.storage import Storage
from tipbase.modules.tips.services import TipSvc


logger = structlog.get_logger()


@dataclass(frozen=True)
class UploadedFile:
    """A validated upload held in memory until it is stored."""

    original_name: str
    mime_type: str
    data: bytes


class AttachmentService:
    """Service for attachment uploads, listing and removal.

    A batch is validated in full before anything is written, so one bad
    file rejects the whole upload.
    """

    def __init__(self, repo: AttachmentRepo, storage: Storage, tips: TipSvc) -> None:
        self.repo = repo
        self.storage = storage
        self.tips = tips

    async def list_attachments(self, tip_id: int) -> list[Attachment]:
        return await self.repo.list_for_tip(tip_id)

    async def upload(
        self,
        tip_id: int,
        files: list[UploadFile],
        uploaded_by: str | None = None,
    ) -> list[Attachment]:
        """Validate, store and record a batch of uploaded files.

        Raises:
            NotFoundError: If the tip does not exist
            BadRequestError: If no files were sent, too many were sent, or
                any file is too large or of a disallowed type
        """
        await self.tips.get_tip(tip_id)

        if not files:
            raise BadRequestError("No files uploaded")
        if len(files) > settings.max_upload_files:
            raise BadRequestError(
                f"At most {settings.max_upload_files} files can be uploaded at once",
                details={"files": len(files)},
            )

        validated = [await self._validate(upload) for upload in files]

        stored: list[str] = []
        try:
            for item in validated:
                stored.append(await self.storage.save(item.data, item.original_name))
            attachments = [
                Attachment(
                    tip_id=tip_id,
                    filename=filename,
                    original_name=item.original_name,
                    mime_type=item.mime_type,
                    size=len(item.data),
                    uploaded_by=uploaded_by or ANONYMOUS_AUTHOR,
                )
                for filename, item in zip(stored, validated, strict=True)
            ]
            return await self.repo.create_many(attachments)
        except Exception:
            # Leave no orphaned files behind a failed batch
            for filename in stored:
                await self.storage.remove(filename)
            raise

    async def delete(self, attachment_id: int) -> Attachment:
        """Remove an attachment row and its stored file.

        Raises:
            NotFoundError: If the attachment does not exist
        """
        attachment = await self.repo.get_by_id(attachment_id)
        if attachment is None:
            raise NotFoundError(
                "Attachment not found",
                resource="attachment",
                resource_id=str(attachment_id),
            )

        await self.repo.delete(attachment)
        await self.storage.remove(attachment.filename)
        logger.info(
            "attachment_deleted",
            attachment_id=attachment_id,
            tip_id=attachment.tip_id,
            filename=attachment.filename,
        )
        return attachment

    async def _validate(self, upload: UploadFile) -> UploadedFile:
        original_name = Path(upload.filename or "").name
        mime_type = upload.content_type or ""
        extension = Path(original_name).suffix.lower()

        if mime_type not in ALLOWED_MIME_TYPES:
            raise BadRequestError(
                f"File type {mime_type or 'unknown'} is not allowed",
                details={"filename": original_name},
            )
        if extension not in ALLOWED_EXTENSIONS:
            raise BadRequestError(
                f"File extension {extension or '(none)'} is not allowed",
                details={"filename": original_name},
            )

        data = await upload.read(settings.max_upload_size + 1)
        if len(data) > settings.max_upload_size:
            raise BadRequestError(
                f"File {original_name} exceeds the {settings.max_upload_size} byte limit",
                details={"filename": original_name},
            )

        return UploadedFile(original_name=original_name, mime_type=mime_type, data=data)


AttachmentSvc = Annotated[AttachmentService, Depends(AttachmentService)]
