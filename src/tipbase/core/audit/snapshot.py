"""Entity snapshots for the audit log.

Converts ORM rows, Pydantic models and plain mappings into flat,
JSON-compatible dicts, and moves those dicts in and out of the text
columns of the audit_logs table.
"""

import json
from collections.abc import Mapping
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import UUID

from pydantic import BaseModel
from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable


class SnapshotDecodeError(ValueError):
    """Raised when stored snapshot text is not a JSON object."""


def serialize_value(value: Any) -> Any:
    """Serialize a value to JSON-compatible primitives.

    Recursively converts non-JSON-serializable types to their
    string or primitive representations.
    """
    if value is None or isinstance(value, str | int | float | bool):
        return value

    result: Any
    if isinstance(value, UUID):
        result = str(value)
    elif isinstance(value, datetime | date):
        result = value.isoformat()
    elif isinstance(value, Decimal):
        result = str(value)
    elif isinstance(value, Enum):
        result = value.value
    elif isinstance(value, BaseModel):
        result = value.model_dump(mode="json")
    elif isinstance(value, Mapping):
        result = {str(k): serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list | tuple | set | frozenset):
        result = [serialize_value(item) for item in value]
    else:
        result = str(value)

    return result


def take_snapshot(obj: Any) -> dict[str, Any] | None:
    """Capture the current state of an entity as a flat dict.

    Args:
        obj: SQLAlchemy model instance, Pydantic model, or mapping

    Returns:
        JSON-compatible dict of the entity's fields, or None for None
    """
    if obj is None:
        return None
    if isinstance(obj, BaseModel):
        return obj.model_dump(mode="json")
    if isinstance(obj, Mapping):
        return {str(k): serialize_value(v) for k, v in obj.items()}

    try:
        mapper = inspect(obj).mapper
    except NoInspectionAvailable as exc:
        raise TypeError(f"Cannot snapshot {type(obj).__name__}") from exc

    return {
        attr.key: serialize_value(getattr(obj, attr.key))
        for attr in mapper.column_attrs
    }


def dump_state(state: Mapping[str, Any] | None) -> str | None:
    """Encode a snapshot for storage."""
    if state is None:
        return None
    return json.dumps(serialize_value(state), ensure_ascii=False)


def load_state(raw: str | None) -> dict[str, Any] | None:
    """Decode a stored snapshot.

    Raises:
        SnapshotDecodeError: If the text is not valid JSON or not an object
    """
    if raw is None or raw == "":
        return None
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise SnapshotDecodeError(str(exc)) from exc
    if not isinstance(data, dict):
        raise SnapshotDecodeError(f"Expected a JSON object, got {type(data).__name__}")
    return data
