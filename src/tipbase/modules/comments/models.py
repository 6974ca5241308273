"""Comment database model."""

from sqlalchemy import ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tipbase.core.constants import MAX_NAME_LENGTH
from tipbase.core.database.base import Base, IntegerIDMixin, SoftDeleteMixin, TimestampMixin


class Comment(Base, IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """A comment on a tip, optionally replying to another comment.

    Attributes:
        tip_id: The tip under discussion
        author_name: Display name of the authenticated author
        content: Comment text
        parent_id: Comment being replied to, None for top-level comments
    """

    __tablename__ = "comments"

    tip_id: Mapped[int] = mapped_column(
        ForeignKey("tips.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    author_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    parent_id: Mapped[int | None] = mapped_column(
        ForeignKey("comments.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Comment {self.id} on tip {self.tip_id} by {self.author_name!r}>"
