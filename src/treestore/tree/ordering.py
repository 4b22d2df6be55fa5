"""Sibling order maintenance (dense 0..N-1 sequences)."""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

from treestore.models import FileInfo, FolderInfo, OrderItem, StoreSnapshot


def folder_siblings(snapshot: StoreSnapshot, parent_id: Optional[str]) -> list[FolderInfo]:
    """Folders under parent_id, sorted by (order, id)."""
    folders = [f for f in snapshot.folders if f.parent_id == parent_id]
    folders.sort(key=lambda f: (f.order, f.id))
    return folders


def file_siblings(snapshot: StoreSnapshot, folder_id: str) -> list[FileInfo]:
    """Files in folder_id, sorted by (order, id)."""
    files = [f for f in snapshot.files if f.folder_id == folder_id]
    files.sort(key=lambda f: (f.order, f.id))
    return files


def repack(items: Sequence[FolderInfo | FileInfo]) -> bool:
    """
    Renumber already-sorted siblings to 0..N-1 in place.

    Returns True if any order value changed.
    """
    changed = False
    for index, item in enumerate(items):
        if item.order != index:
            item.order = index
            changed = True
    return changed


def repack_folder_group(snapshot: StoreSnapshot, parent_id: Optional[str]) -> bool:
    return repack(folder_siblings(snapshot, parent_id))


def repack_file_group(snapshot: StoreSnapshot, folder_id: str) -> bool:
    return repack(file_siblings(snapshot, folder_id))


def apply_folder_reorder(snapshot: StoreSnapshot, items: Iterable[OrderItem]) -> bool:
    """
    Apply (id, order) assignments to folders, then re-pack every touched group.

    Unknown ids are ignored. Returns True if anything was assigned.
    """
    by_id = {f.id: f for f in snapshot.folders}
    touched = _assign(by_id, items)
    if not touched:
        return False

    groups = {by_id[folder_id].parent_id for folder_id in touched}
    for parent_id in groups:
        group = [f for f in snapshot.folders if f.parent_id == parent_id]
        repack(_sort_reordered(group, touched))
    return True


def apply_file_reorder(snapshot: StoreSnapshot, items: Iterable[OrderItem]) -> bool:
    """Same as apply_folder_reorder, for files grouped by folder_id."""
    by_id = {f.id: f for f in snapshot.files}
    touched = _assign(by_id, items)
    if not touched:
        return False

    groups = {by_id[file_id].folder_id for file_id in touched}
    for folder_id in groups:
        group = [f for f in snapshot.files if f.folder_id == folder_id]
        repack(_sort_reordered(group, touched))
    return True


def _assign(by_id: dict, items: Iterable[OrderItem]) -> dict[str, int]:
    """Set requested orders; return {id: previous order} for the ids found."""
    previous: dict[str, int] = {}
    for item in items:
        target = by_id.get(item.id)
        if target is None:
            continue
        previous.setdefault(item.id, target.order)
        target.order = item.order
    return previous


def _sort_reordered(group: list, previous: dict[str, int]) -> list:
    # Ties: explicitly reordered items first, then by prior position.
    def key(item) -> tuple[int, int, int, str]:
        moved = item.id in previous
        prior = previous[item.id] if moved else item.order
        return (item.order, 0 if moved else 1, prior, item.id)

    return sorted(group, key=key)
