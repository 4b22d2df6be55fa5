"""Reachability over the flat parent_id relation."""

from __future__ import annotations

from collections import deque

from treestore.models import FileInfo, StoreSnapshot


def collect_subtree_ids(snapshot: StoreSnapshot, root_folder_id: str) -> set[str]:
    """
    Collect root_folder_id and every folder reachable below it (BFS).

    Only ids present in the snapshot are collected and no id is expanded
    twice, so cyclic parent_id chains terminate. Returns an empty set when
    root_folder_id is not in the snapshot.
    """
    children_by_parent: dict[str, list[str]] = {}
    known: set[str] = set()
    for folder in snapshot.folders:
        known.add(folder.id)
        if folder.parent_id is not None:
            children_by_parent.setdefault(folder.parent_id, []).append(folder.id)

    if root_folder_id not in known:
        return set()

    visited: set[str] = set()
    q: deque[str] = deque([root_folder_id])

    while q:
        cur = q.popleft()
        if cur in visited:
            continue
        visited.add(cur)

        for child_id in children_by_parent.get(cur, []):
            if child_id not in visited:
                q.append(child_id)

    return visited


def find_orphan_files(snapshot: StoreSnapshot) -> list[FileInfo]:
    """Return files whose folder_id does not name an existing folder."""
    folder_ids = {folder.id for folder in snapshot.folders}
    return [info for info in snapshot.files if info.folder_id not in folder_ids]
