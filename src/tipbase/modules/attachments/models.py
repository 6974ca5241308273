"""Attachment database model."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from tipbase.core.constants import (
    ANONYMOUS_AUTHOR,
    MAX_FILENAME_LENGTH,
    MAX_MIME_TYPE_LENGTH,
    MAX_NAME_LENGTH,
)
from tipbase.core.database.base import Base, IntegerIDMixin


class Attachment(Base, IntegerIDMixin):
    """A file stored on disk and attached to a tip.

    Attributes:
        tip_id: The tip the file belongs to
        filename: Generated name of the stored file
        original_name: Name of the file as uploaded
        mime_type: Content type reported by the client
        size: Size in bytes
        uploaded_by: Display name of the uploader
    """

    __tablename__ = "attachments"

    tip_id: Mapped[int] = mapped_column(
        ForeignKey("tips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filename: Mapped[str] = mapped_column(
        String(MAX_FILENAME_LENGTH),
        nullable=False,
        unique=True,
    )
    original_name: Mapped[str] = mapped_column(
        String(MAX_FILENAME_LENGTH),
        nullable=False,
    )
    mime_type: Mapped[str] = mapped_column(
        String(MAX_MIME_TYPE_LENGTH),
        nullable=False,
    )
    size: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    uploaded_by: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        default=ANONYMOUS_AUTHOR,
        server_default=ANONYMOUS_AUTHOR,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<Attachment {self.id} {self.original_name!r} on tip {self.tip_id}>"
