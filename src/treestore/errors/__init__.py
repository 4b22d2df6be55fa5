"""Public error exports for treestore."""

from __future__ import annotations

from .exceptions import (
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

__all__ = [
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
