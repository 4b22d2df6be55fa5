"""TreeStore: folder/file metadata over a whole-snapshot backend."""

from __future__ import annotations

import logging
import threading
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, TypeVar

from treestore.backends import SnapshotBackend
from treestore.errors import (
    ConcurrencyConflictError,
    NotFoundError,
    OperationCancelledError,
    ValidationError,
)
from treestore.models import (
    DeleteResult,
    FileInfo,
    FolderInfo,
    StoreSnapshot,
)
from treestore.tree import (
    apply_file_reorder,
    apply_folder_reorder,
    collect_subtree_ids,
    file_siblings,
    find_orphan_files,
    folder_siblings,
    repack,
    repack_file_group,
    repack_folder_group,
    validate_non_empty,
    validate_optional_id,
    validate_order_items,
)
from treestore.util.ids import new_file_id, new_folder_id
from treestore.util.time import normalize_dt, now_utc

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TreeStore:
    """
    Folder hierarchy and file metadata with dense sibling ordering.

    Every mutation is load -> mutate -> save against the backend. Lost
    updates are prevented two ways:
        - a per-store lock serializes mutations issued through this object;
        - saves are conditional on the version that was loaded, and the
          whole cycle is retried on ConcurrencyConflictError (this covers
          writers in other processes sharing the same backend).

    Reads take no lock and load a fresh snapshot on every call.
    """

    def __init__(
        self,
        backend: SnapshotBackend,
        *,
        conflict_retries: int = 5,
        id_factory: Optional[Callable[[], str]] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        if conflict_retries < 0:
            raise ValueError("conflict_retries must be >= 0")
        self._backend = backend
        self._conflict_retries = conflict_retries
        self._id_factory = id_factory
        self._clock = clock or now_utc
        self._lock = threading.Lock()

    @property
    def backend(self) -> SnapshotBackend:
        return self._backend

    # ----------------------------
    # Read APIs
    # ----------------------------
    def list_folders(self, parent_id: Optional[str] = None) -> list[FolderInfo]:
        """Folders under parent_id (None = root level), ascending by order."""
        parent_id = validate_optional_id(parent_id, "parent_id")
        return folder_siblings(self._load(), parent_id)

    def list_files(self, folder_id: str) -> list[FileInfo]:
        """Files in folder_id, ascending by order."""
        validate_non_empty(folder_id, "folder_id")
        return file_siblings(self._load(), folder_id)

    def get_folder(self, folder_id: str) -> FolderInfo:
        validate_non_empty(folder_id, "folder_id")
        folder = self._load().find_folder(folder_id)
        if folder is None:
            raise NotFoundError("Folder does not exist", details={"folder_id": folder_id})
        return folder

    def get_file(self, file_id: str) -> FileInfo:
        validate_non_empty(file_id, "file_id")
        info = self._load().find_file(file_id)
        if info is None:
            raise NotFoundError("File does not exist", details={"file_id": file_id})
        return info

    # ----------------------------
    # Mutation APIs
    # ----------------------------
    def create_folder(
        self,
        name: str,
        parent_id: Optional[str] = None,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> FolderInfo:
        """
        Append a new folder after its siblings.

        Raises:
            ValidationError: if name is empty.
            NotFoundError: if parent_id names a folder that does not exist.
        """
        name = validate_non_empty(name, "name")
        parent_id = validate_optional_id(parent_id, "parent_id")

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, FolderInfo]:
            if parent_id is not None and snapshot.find_folder(parent_id) is None:
                raise NotFoundError("Parent folder does not exist", details={"parent_id": parent_id})

            siblings = folder_siblings(snapshot, parent_id)
            repack(siblings)
            folder = FolderInfo(
                id=(self._id_factory or new_folder_id)(),
                name=name,
                parent_id=parent_id,
                order=len(siblings),
            )
            snapshot.folders.append(folder)
            return True, folder

        folder = self._mutate("create_folder", mutate, cancel)
        logger.info("Created folder %s (%r) under %s at %d", folder.id, name, parent_id, folder.order)
        return folder

    def create_file(
        self,
        name: str,
        folder_id: str,
        location: str,
        remark: str = "",
        *,
        uploaded_at: Optional[datetime] = None,
        cancel: Optional[threading.Event] = None,
    ) -> FileInfo:
        """
        Record a file whose bytes are already stored at `location`.

        Raises:
            ValidationError: if name, folder_id or location is empty, or
                uploaded_at is naive.
            NotFoundError: if folder_id names a folder that does not exist.
        """
        name = validate_non_empty(name, "name")
        folder_id = validate_non_empty(folder_id, "folder_id")
        location = validate_non_empty(location, "location")
        remark = remark or ""
        try:
            stamp = normalize_dt(uploaded_at) if uploaded_at is not None else self._clock()
        except (TypeError, ValueError) as exc:
            raise ValidationError("uploaded_at must be a timezone-aware datetime", cause=exc) from exc

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, FileInfo]:
            if snapshot.find_folder(folder_id) is None:
                raise NotFoundError("Folder does not exist", details={"folder_id": folder_id})

            siblings = file_siblings(snapshot, folder_id)
            repack(siblings)
            info = FileInfo(
                id=(self._id_factory or new_file_id)(),
                name=name,
                folder_id=folder_id,
                location=location,
                uploaded_at=stamp,
                order=len(siblings),
                remark=remark,
            )
            snapshot.files.append(info)
            return True, info

        info = self._mutate("create_file", mutate, cancel)
        logger.info("Created file %s (%r) in %s at %d", info.id, name, folder_id, info.order)
        return info

    def delete_folder(
        self,
        folder_id: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> DeleteResult:
        """
        Delete a folder, every folder below it and every file they contain.

        Files whose folder no longer exists are reaped in the same save.
        Deleting an unknown id is a successful no-op. Payload cleanup for
        the returned files is the caller's job.
        """
        folder_id = validate_non_empty(folder_id, "folder_id")

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, DeleteResult]:
            target = snapshot.find_folder(folder_id)
            if target is None:
                return False, DeleteResult()

            doomed = collect_subtree_ids(snapshot, folder_id)
            snapshot.folders = [f for f in snapshot.folders if f.id not in doomed]

            orphans = find_orphan_files(snapshot)
            orphan_ids = {info.id for info in orphans}
            snapshot.files = [f for f in snapshot.files if f.id not in orphan_ids]

            if target.parent_id not in doomed:
                repack_folder_group(snapshot, target.parent_id)

            return True, DeleteResult(folder_ids=_ordered(doomed, folder_id), files=orphans)

        result = self._mutate("delete_folder", mutate, cancel)
        if result.deleted:
            logger.info(
                "Deleted folder %s: %d folders, %d files removed",
                folder_id,
                len(result.folder_ids),
                len(result.files),
            )
        else:
            logger.debug("delete_folder: %s not found, nothing to do", folder_id)
        return result

    def delete_file(
        self,
        file_id: str,
        *,
        cancel: Optional[threading.Event] = None,
    ) -> DeleteResult:
        """Delete one file record and close the gap in its folder's order."""
        file_id = validate_non_empty(file_id, "file_id")

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, DeleteResult]:
            target = snapshot.find_file(file_id)
            if target is None:
                return False, DeleteResult()

            snapshot.files = [f for f in snapshot.files if f.id != file_id]
            repack_file_group(snapshot, target.folder_id)
            return True, DeleteResult(files=[target])

        result = self._mutate("delete_file", mutate, cancel)
        if result.deleted:
            logger.info("Deleted file %s", file_id)
        else:
            logger.debug("delete_file: %s not found, nothing to do", file_id)
        return result

    def reorder_folders(
        self,
        items: Iterable[Any],
        *,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """
        Apply (id, order) assignments to folders.

        Unknown ids are ignored. Each touched sibling group is re-packed to
        0..N-1, so gaps and duplicates in the request are tolerated.
        """
        order_items = validate_order_items(items)

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, None]:
            return apply_folder_reorder(snapshot, order_items), None

        self._mutate("reorder_folders", mutate, cancel)
        logger.info("Reordered folders (%d items)", len(order_items))

    def reorder_files(
        self,
        items: Iterable[Any],
        *,
        cancel: Optional[threading.Event] = None,
    ) -> None:
        """Same as reorder_folders, for files within their folders."""
        order_items = validate_order_items(items)

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, None]:
            return apply_file_reorder(snapshot, order_items), None

        self._mutate("reorder_files", mutate, cancel)
        logger.info("Reordered files (%d items)", len(order_items))

    def reset(self, *, cancel: Optional[threading.Event] = None) -> None:
        """Replace the stored snapshot with an empty one."""

        def mutate(snapshot: StoreSnapshot) -> tuple[bool, None]:
            snapshot.folders = []
            snapshot.files = []
            return True, None

        self._mutate("reset", mutate, cancel)
        logger.info("Reset store")

    # ----------------------------
    # Internals
    # ----------------------------
    def _load(self) -> StoreSnapshot:
        return self._backend.load().snapshot

    def _mutate(
        self,
        op_name: str,
        mutation: Callable[[StoreSnapshot], tuple[bool, T]],
        cancel: Optional[threading.Event],
    ) -> T:
        attempts = self._conflict_retries + 1
        last_conflict: Optional[ConcurrencyConflictError] = None

        for attempt in range(1, attempts + 1):
            _check_cancel(cancel, op_name)
            with self._lock:
                loaded = self._backend.load()
                changed, result = mutation(loaded.snapshot)
                if not changed:
                    return result

                _check_cancel(cancel, op_name)
                try:
                    self._backend.save(loaded.snapshot, expected_version=loaded.version)
                except ConcurrencyConflictError as exc:
                    last_conflict = exc
                    logger.warning(
                        "%s: snapshot changed concurrently (attempt %d/%d)",
                        op_name,
                        attempt,
                        attempts,
                    )
                    continue
            return result

        raise ConcurrencyConflictError(
            f"{op_name} gave up after {attempts} conflicting attempts",
            details={"operation": op_name, "attempts": attempts},
            cause=last_conflict,
        ) from last_conflict


def _check_cancel(cancel: Optional[threading.Event], op_name: str) -> None:
    if cancel is not None and cancel.is_set():
        raise OperationCancelledError(
            f"{op_name} was cancelled before saving",
            details={"operation": op_name},
        )


def _ordered(ids: set[str], first: str) -> list[str]:
    return [first] + sorted(i for i in ids if i != first)
