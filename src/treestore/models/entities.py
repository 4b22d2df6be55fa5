"""Data model for folders, files and reorder requests."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional


@dataclass(slots=True)
class FolderInfo:
    """
    A folder in the hierarchy.

    Notes:
        - parent_id None means a root-level folder (the tree is a forest).
        - order is dense (0..N-1) among folders sharing parent_id.
    """

    id: str
    name: str
    parent_id: Optional[str]
    order: int


@dataclass(slots=True)
class FileInfo:
    """
    File metadata. The byte payload lives behind `location`, which the store
    never interprets (a path under a content root or an absolute URL).
    """

    id: str
    name: str
    folder_id: str
    location: str
    uploaded_at: datetime
    order: int
    remark: str = ""


@dataclass(slots=True, frozen=True)
class OrderItem:
    """One (id, new order) assignment of a reorder batch."""

    id: str
    order: int

    @classmethod
    def from_value(cls, value: Any) -> OrderItem:
        """
        Build from an OrderItem, a {"id", "order"} mapping or an (id, order) pair.

        Type checks on the fields are left to the tree validators so that the
        caller gets a single ValidationError path.
        """
        if isinstance(value, OrderItem):
            return value
        if isinstance(value, Mapping):
            return cls(id=value.get("id"), order=value.get("order"))  # type: ignore[arg-type]
        if isinstance(value, (tuple, list)) and len(value) == 2:
            return cls(id=value[0], order=value[1])
        raise TypeError(f"Cannot build OrderItem from {type(value).__name__}")
