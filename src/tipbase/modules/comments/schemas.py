"""Pydantic schemas for comment operations."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommentContent(BaseModel):
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def strip_content(cls, v: str) -> str:
        """Trim surrounding whitespace; blank comments are rejected."""
        v = v.strip()
        if not v:
            raise ValueError("Comment content is required")
        return v


class CommentCreate(CommentContent):
    """Schema for posting a comment or a reply."""

    parent_id: int | None = None


class CommentUpdate(CommentContent):
    """Schema for editing a comment's text."""


class CommentResponse(BaseModel):
    """A comment with its replies nested beneath it."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    tip_id: int
    author_name: str
    content: str
    parent_id: int | None
    created_at: datetime
    updated_at: datetime
    replies: list["CommentResponse"] = Field(default_factory=list)


class MessageResponse(BaseModel):
    message: str
