"""Pure tree algorithms over a StoreSnapshot (no I/O)."""

from __future__ import annotations

from .ordering import (
    apply_file_reorder,
    apply_folder_reorder,
    file_siblings,
    folder_siblings,
    repack,
    repack_file_group,
    repack_folder_group,
)
from .traversal import collect_subtree_ids, find_orphan_files
from .validators import validate_non_empty, validate_optional_id, validate_order_items

__all__ = [
    "folder_siblings",
    "file_siblings",
    "repack",
    "repack_folder_group",
    "repack_file_group",
    "apply_folder_reorder",
    "apply_file_reorder",
    "collect_subtree_ids",
    "find_orphan_files",
    "validate_non_empty",
    "validate_optional_id",
    "validate_order_items",
]
