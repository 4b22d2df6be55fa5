"""treestore public API."""

from __future__ import annotations

from treestore.auth import AuthInfo
from treestore.backends import (
    DriveBackend,
    KeyValueBackend,
    LocalSnapshotBackend,
    MemoryBackend,
    RetryPolicy,
    SnapshotBackend,
)
from treestore.config import StoreSettings, get_settings
from treestore.errors import (
    AuthError,
    BackendError,
    BackendUnavailableError,
    ConcurrencyConflictError,
    HttpErrorInfo,
    NotFoundError,
    OperationCancelledError,
    SnapshotFormatError,
    TreeStoreError,
    ValidationError,
    map_http_error,
)
from treestore.factory import create_backend, open_store
from treestore.models import (
    DeleteResult,
    FileInfo,
    FolderInfo,
    LoadedSnapshot,
    OrderItem,
    StoreSnapshot,
)
from treestore.payload import PayloadStore, discard_payloads
from treestore.store import TreeStore

__all__ = [
    # High-level
    "TreeStore",
    "open_store",
    "create_backend",
    "StoreSettings",
    "get_settings",
    # Backends
    "SnapshotBackend",
    "LocalSnapshotBackend",
    "KeyValueBackend",
    "DriveBackend",
    "MemoryBackend",
    "RetryPolicy",
    "AuthInfo",
    # Models
    "FolderInfo",
    "FileInfo",
    "OrderItem",
    "DeleteResult",
    "StoreSnapshot",
    "LoadedSnapshot",
    # Payload cleanup
    "PayloadStore",
    "discard_payloads",
    # Errors
    "TreeStoreError",
    "ValidationError",
    "NotFoundError",
    "OperationCancelledError",
    "ConcurrencyConflictError",
    "BackendError",
    "BackendUnavailableError",
    "AuthError",
    "SnapshotFormatError",
    "HttpErrorInfo",
    "map_http_error",
]
