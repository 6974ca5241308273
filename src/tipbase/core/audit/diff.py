"""Human-readable change descriptions for audited updates.

Only a fixed set of flat fields is compared per entity type. Absent
values compare equal to empty strings, and long values are shortened
for display after the comparison.
"""

from collections.abc import Mapping, Sequence
from typing import Any

from tipbase.core.audit.models import EntityType
from tipbase.core.constants import CHANGE_VALUE_MAX_LENGTH, NO_CHANGES_SENTINEL


TIP_FIELDS = ("title", "category", "problem", "solution", "location", "additional_details")
COMMENT_FIELDS = ("content",)
ATTACHMENT_FIELDS = ("original_name",)

COMPARABLE_FIELDS: dict[EntityType, tuple[str, ...]] = {
    EntityType.TIP: TIP_FIELDS,
    EntityType.COMMENT: COMMENT_FIELDS,
    EntityType.ATTACHMENT: ATTACHMENT_FIELDS,
}

ELLIPSIS = "..."


def field_label(name: str) -> str:
    """Turn a field name into a label, e.g. additional_details -> Additional Details."""
    words = name.replace("_", " ").replace("-", " ").split()
    return " ".join(word[:1].upper() + word[1:] for word in words)


def normalize(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def truncate(value: str, max_length: int = CHANGE_VALUE_MAX_LENGTH) -> str:
    if len(value) > max_length:
        return value[:max_length] + ELLIPSIS
    return value


def describe_changes(
    before: Mapping[str, Any] | None,
    after: Mapping[str, Any] | None,
    fields: Sequence[str] = TIP_FIELDS,
) -> str | None:
    """Describe which fields differ between two snapshots.

    Args:
        before: State before the update
        after: State after the update
        fields: Field names to compare, in output order

    Returns:
        '<Label>: "<old>" → "<new>"' entries joined with "; ",
        NO_CHANGES_SENTINEL when nothing differs, or None when either
        snapshot is missing.

    Example:
        >>> describe_changes({"category": "Hardware"}, {"category": "Printers"})
        'Category: "Hardware" → "Printers"'
    """
    if before is None or after is None:
        return None

    changes = []
    for field in fields:
        old_value = normalize(before.get(field))
        new_value = normalize(after.get(field))
        if old_value != new_value:
            changes.append(
                f'{field_label(field)}: "{truncate(old_value)}" → "{truncate(new_value)}"'
            )

    return "; ".join(changes) if changes else NO_CHANGES_SENTINEL


def describe_entity_changes(
    entity_type: EntityType,
    before: Mapping[str, Any] | None,
    after: Mapping[str, Any] | None,
) -> str | None:
    """describe_changes over the comparable fields of an entity type."""
    return describe_changes(before, after, COMPARABLE_FIELDS[entity_type])
