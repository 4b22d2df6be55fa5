"""In-process backend, for tests and embedding."""

from __future__ import annotations

import threading
from typing import Optional

from treestore.errors import ConcurrencyConflictError
from treestore.models import LoadedSnapshot, StoreSnapshot

from .base import SnapshotBackend


class MemoryBackend(SnapshotBackend):
    """
    Keeps the encoded snapshot in memory; the version is a save counter.

    Storing the encoded form means every load hands out fresh objects, the
    same as a real substrate would.
    """

    name = "memory"

    def __init__(self, snapshot: Optional[StoreSnapshot] = None) -> None:
        self._lock = threading.Lock()
        self._document = (snapshot or StoreSnapshot.empty()).to_json(indent=None)
        self._version = 0
        self.save_count = 0

    def load(self) -> LoadedSnapshot:
        with self._lock:
            document, version = self._document, self._version
        return LoadedSnapshot(snapshot=StoreSnapshot.from_json(document), version=str(version))

    def save(
        self,
        snapshot: StoreSnapshot,
        *,
        expected_version: Optional[str] = None,
    ) -> str:
        document = snapshot.to_json(indent=None)
        with self._lock:
            if expected_version is not None and expected_version != str(self._version):
                raise ConcurrencyConflictError(
                    "Snapshot changed since it was loaded",
                    details={"expected": expected_version, "actual": str(self._version)},
                )
            self._document = document
            self._version += 1
            self.save_count += 1
            return str(self._version)
