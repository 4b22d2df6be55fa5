"""Local Snapshot backend: one JSON document on disk."""

from __future__ import annotations

import contextlib
import hashlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Iterator, Optional

from filelock import FileLock, Timeout

from treestore.errors import BackendUnavailableError, ConcurrencyConflictError
from treestore.models import LoadedSnapshot, StoreSnapshot

from .base import SnapshotBackend

logger = logging.getLogger(__name__)


class LocalSnapshotBackend(SnapshotBackend):
    """
    Snapshot stored as a single JSON file.

    Notes:
        - A missing file is initialized with an empty snapshot on first load.
        - Writes go to a temp file in the same directory, are fsynced, then
          renamed over the target, so readers never see a truncated document.
        - The version token is the SHA-256 of the file bytes. The compare and
          the rename happen under an exclusive lock on `<path>.lock`, so
          conditional saves are exact across backend instances and processes
          sharing the file.
    """

    name = "local"

    def __init__(
        self,
        path: str | os.PathLike[str],
        *,
        lock_timeout_sec: float = 10.0,
    ) -> None:
        self._path = Path(path)
        self._lock_timeout_sec = lock_timeout_sec
        self._file_lock = FileLock(f"{self._path}.lock", timeout=lock_timeout_sec)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def lock_path(self) -> Path:
        return Path(self._file_lock.lock_file)

    def load(self) -> LoadedSnapshot:
        raw = self._read_bytes()
        if raw is None:
            with self._locked():
                raw = self._read_bytes()
                if raw is None:
                    logger.info("Initializing empty snapshot at %s", self._path)
                    raw = StoreSnapshot.empty().to_json().encode("utf-8")
                    self._write_bytes(raw)

        snapshot = StoreSnapshot.from_json(raw)
        version = _digest(raw)
        logger.debug(
            "Loaded %d folders, %d files from %s (version %s)",
            len(snapshot.folders),
            len(snapshot.files),
            self._path,
            version[:12],
        )
        return LoadedSnapshot(snapshot=snapshot, version=version)

    def save(
        self,
        snapshot: StoreSnapshot,
        *,
        expected_version: Optional[str] = None,
    ) -> str:
        data = snapshot.to_json().encode("utf-8")
        with self._locked():
            if expected_version is not None:
                raw = self._read_bytes()
                current = _digest(raw) if raw is not None else ""
                if current != expected_version:
                    raise ConcurrencyConflictError(
                        "Snapshot changed since it was loaded",
                        details={"path": str(self._path)},
                    )
            self._write_bytes(data)

        version = _digest(data)
        logger.debug("Saved snapshot to %s (version %s)", self._path, version[:12])
        return version

    # ----------------------------
    # Internals
    # ----------------------------
    @contextlib.contextmanager
    def _locked(self) -> Iterator[None]:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._file_lock.acquire()
        except Timeout as exc:
            raise BackendUnavailableError(
                "Timed out waiting for snapshot lock",
                details={"lock_file": self._file_lock.lock_file, "timeout_sec": self._lock_timeout_sec},
                cause=exc,
            ) from exc
        except OSError as exc:
            raise BackendUnavailableError(
                "Failed to lock snapshot file",
                details={"lock_file": self._file_lock.lock_file},
                cause=exc,
            ) from exc

        try:
            yield
        finally:
            self._file_lock.release()

    def _read_bytes(self) -> Optional[bytes]:
        try:
            return self._path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise BackendUnavailableError(
                "Failed to read snapshot file",
                details={"path": str(self._path)},
                cause=exc,
            ) from exc

    def _write_bytes(self, data: bytes) -> None:
        parent = self._path.parent
        try:
            parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
            )
        except OSError as exc:
            raise BackendUnavailableError(
                "Failed to create temp file for snapshot",
                details={"path": str(self._path)},
                cause=exc,
            ) from exc

        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise BackendUnavailableError(
                "Failed to write snapshot file",
                details={"path": str(self._path)},
                cause=exc,
            ) from exc


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()
