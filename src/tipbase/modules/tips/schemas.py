"""Pydantic schemas for tip operations."""

from datetime import datetime

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from tipbase.core.constants import MAX_CATEGORY_LENGTH, MAX_NAME_LENGTH, MAX_TITLE_LENGTH


def _blank_to_none(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


class TipBase(BaseModel):
    """Fields shared by tip create and update requests."""

    title: str = Field(..., min_length=1, max_length=MAX_TITLE_LENGTH)
    category: str = Field(..., min_length=1, max_length=MAX_CATEGORY_LENGTH)
    problem: str = Field(..., min_length=1)
    # Older clients still send the solution as chatgpt_answer
    solution: str = Field(
        ...,
        min_length=1,
        validation_alias=AliasChoices("solution", "chatgpt_answer"),
    )
    location: str | None = Field(None, max_length=MAX_TITLE_LENGTH)
    additional_details: str | None = None
    author_name: str | None = Field(None, max_length=MAX_NAME_LENGTH)

    @field_validator("location", "additional_details", "author_name")
    @classmethod
    def empty_as_missing(cls, v: str | None) -> str | None:
        """Treat blank optional fields as not provided."""
        return _blank_to_none(v)


class TipCreate(TipBase):
    """Schema for creating a tip."""


class TipUpdate(TipBase):
    """Schema for replacing a tip's content.

    author_name is kept from the stored tip when omitted.
    """


class TipResponse(BaseModel):
    """Schema for tip response."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    category: str
    problem: str
    solution: str
    location: str | None
    additional_details: str | None
    author_name: str
    created_at: datetime
    updated_at: datetime
