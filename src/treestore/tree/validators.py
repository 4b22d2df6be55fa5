"""Input validation helpers for TreeStore operations."""

from __future__ import annotations

from typing import Any, Iterable, Optional

from treestore.errors import ValidationError
from treestore.models import OrderItem


def validate_non_empty(value: Any, what: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{what} must be a non-empty string")
    return value


def validate_optional_id(value: Any, what: str) -> Optional[str]:
    """None (or "") selects the root level; anything else must be a string id."""
    if value is None or value == "":
        return None
    return validate_non_empty(value, what)


def validate_order_items(items: Iterable[Any]) -> list[OrderItem]:
    """
    Normalize a reorder batch and reject malformed entries.

    Gaps and duplicates in the requested values are allowed (the store
    re-packs them); negative, boolean and non-integer values are not.
    """
    if items is None or isinstance(items, (str, bytes)):
        raise ValidationError("items must be a list of {id, order} entries")

    result: list[OrderItem] = []
    for index, raw in enumerate(items):
        try:
            item = OrderItem.from_value(raw)
        except TypeError as exc:
            raise ValidationError(
                "Invalid reorder entry",
                details={"index": index},
                cause=exc,
            ) from exc

        if not isinstance(item.id, str) or not item.id:
            raise ValidationError("Reorder entry is missing 'id'", details={"index": index})
        if isinstance(item.order, bool) or not isinstance(item.order, int):
            raise ValidationError(
                "Reorder entry 'order' must be an integer",
                details={"index": index, "id": item.id},
            )
        if item.order < 0:
            raise ValidationError(
                "Reorder entry 'order' must be non-negative",
                details={"index": index, "id": item.id},
            )
        result.append(item)
    return result
