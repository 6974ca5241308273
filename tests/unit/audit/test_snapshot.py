"""Tests for snapshot capture and storage encoding."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from uuid import uuid4

import pytest
from pydantic import BaseModel

from tipbase.core.audit.snapshot import (
    SnapshotDecodeError,
    dump_state,
    load_state,
    serialize_value,
    take_snapshot,
)
from tipbase.modules.tips.models import Tip


class Colour(Enum):
    RED = "red"


class Sample(BaseModel):
    id: int
    created_at: datetime


class TestSerializeValue:
    """Tests for serialize_value."""

    def test_primitives_pass_through(self):
        assert serialize_value(None) is None
        assert serialize_value("hello") == "hello"
        assert serialize_value(42) == 42
        assert serialize_value(True) is True

    def test_uuid_and_decimal_become_strings(self):
        value = uuid4()
        assert serialize_value(value) == str(value)
        assert serialize_value(Decimal("1.50")) == "1.50"

    def test_datetime_iso_format(self):
        assert serialize_value(datetime(2024, 1, 15, 10, 30)) == "2024-01-15T10:30:00"

    def test_enum_uses_value(self):
        assert serialize_value(Colour.RED) == "red"

    def test_nested_containers(self):
        """Verify dicts and lists are serialized recursively."""
        result = serialize_value({"when": [datetime(2024, 1, 1)], 1: (Colour.RED,)})
        assert result == {"when": ["2024-01-01T00:00:00"], "1": ["red"]}


class TestTakeSnapshot:
    """Tests for take_snapshot."""

    def test_none(self):
        assert take_snapshot(None) is None

    def test_pydantic_model(self):
        snapshot = take_snapshot(Sample(id=1, created_at=datetime(2024, 1, 1, tzinfo=UTC)))
        assert snapshot == {"id": 1, "created_at": "2024-01-01T00:00:00Z"}

    def test_mapping(self):
        assert take_snapshot({"id": 3, "title": "x"}) == {"id": 3, "title": "x"}

    def test_orm_instance_uses_column_attributes(self):
        """Verify every mapped column is captured under its attribute name."""
        tip = Tip(
            id=5,
            title="Fix printer jam",
            category="Hardware",
            problem="Paper stuck",
            solution="Open tray B",
            author_name="Alice",
            is_active=True,
        )

        snapshot = take_snapshot(tip)

        assert snapshot["id"] == 5
        assert snapshot["title"] == "Fix printer jam"
        assert snapshot["location"] is None
        assert snapshot["is_active"] is True
        assert "additional_details" in snapshot

    def test_unsupported_object(self):
        with pytest.raises(TypeError):
            take_snapshot(object())


class TestStateEncoding:
    """Tests for dump_state and load_state."""

    def test_dump_none(self):
        assert dump_state(None) is None

    def test_dump_keeps_unicode(self):
        assert dump_state({"summary": "a → b"}) == '{"summary": "a → b"}'

    def test_load_round_trip(self):
        state = {"title": "Fix printer jam", "_displayTitle": "Fix printer jam"}
        assert load_state(dump_state(state)) == state

    @pytest.mark.parametrize("raw", [None, ""])
    def test_load_empty(self, raw):
        assert load_state(raw) is None

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]", '"text"'])
    def test_load_rejects_non_objects(self, raw):
        """Verify corrupt or non-object text raises SnapshotDecodeError."""
        with pytest.raises(SnapshotDecodeError):
            load_state(raw)
