"""Tip database model."""

from sqlalchemy import String, Text
from sqlalchemy.orm import Mapped, mapped_column

from tipbase.core.constants import (
    ANONYMOUS_AUTHOR,
    MAX_CATEGORY_LENGTH,
    MAX_NAME_LENGTH,
    MAX_TITLE_LENGTH,
)
from tipbase.core.database.base import Base, IntegerIDMixin, SoftDeleteMixin, TimestampMixin


class Tip(Base, IntegerIDMixin, TimestampMixin, SoftDeleteMixin):
    """A knowledge-base entry describing a problem and its solution.

    Attributes:
        title: Short summary shown in listings
        category: Free-form grouping, e.g. "Hardware"
        problem: What went wrong
        solution: How it was fixed
        location: Where the problem occurs, if relevant
        additional_details: Anything else worth knowing
        author_name: Display name of whoever wrote the tip
    """

    __tablename__ = "tips"

    title: Mapped[str] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=False,
    )
    category: Mapped[str] = mapped_column(
        String(MAX_CATEGORY_LENGTH),
        nullable=False,
        index=True,
    )
    problem: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    solution: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    location: Mapped[str | None] = mapped_column(
        String(MAX_TITLE_LENGTH),
        nullable=True,
    )
    additional_details: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
    )
    author_name: Mapped[str] = mapped_column(
        String(MAX_NAME_LENGTH),
        nullable=False,
        default=ANONYMOUS_AUTHOR,
        server_default=ANONYMOUS_AUTHOR,
    )

    def __repr__(self) -> str:
        return f"<Tip {self.id} {self.title!r}>"
