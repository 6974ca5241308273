"""Pydantic schemas for attachment operations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class AttachmentResponse(BaseModel):
    """Schema for attachment response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tip_id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    uploaded_by: str
    created_at: datetime


class AttachmentUploadResponse(BaseModel):
    """Result of one upload call, which may store several files."""

    message: str
    attachments: list[AttachmentResponse]


class MessageResponse(BaseModel):
    message: str
