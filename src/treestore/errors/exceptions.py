"""Exception hierarchy and HTTP error mapping for treestore."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


class TreeStoreError(Exception):
    """
    Base exception for treestore.

    Attributes:
        details: Optional structured information (e.g., ids, HTTP status).
        cause: Optional original exception that triggered this error.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.details = details or {}
        self.cause = cause


class ValidationError(TreeStoreError):
    """Raised when caller input violates a precondition. Never retried."""


class NotFoundError(TreeStoreError):
    """Raised when a referenced folder/file id is not in the current snapshot."""


class OperationCancelledError(TreeStoreError):
    """Raised when the caller cancelled a mutation before it was saved."""


class ConcurrencyConflictError(TreeStoreError):
    """Raised when the stored snapshot changed between load and save."""


class BackendError(TreeStoreError):
    """Raised for non-retryable persistence backend failures."""


class BackendUnavailableError(BackendError):
    """Raised when load/save fails on I/O, network or timeout (retryable)."""


class AuthError(BackendError):
    """Raised when the backend rejects our credentials (HTTP 401/403)."""


class SnapshotFormatError(BackendError):
    """Raised when the persisted snapshot cannot be decoded."""


@dataclass(frozen=True)
class HttpErrorInfo:
    """Lightweight HTTP error information for mapping to treestore exceptions."""

    status_code: int
    reason: str | None = None
    message: str | None = None
    details: dict[str, Any] | None = None


def map_http_error(
    info: HttpErrorInfo,
    *,
    cause: Optional[BaseException] = None,
) -> TreeStoreError:
    """
    Map an HTTP error from a remote backend to a treestore exception.

    Policy:
        - 401/403 -> AuthError
        - 409/412 -> ConcurrencyConflictError
        - 429 -> BackendUnavailableError
        - 5xx -> BackendUnavailableError
        - otherwise (incl. 404) -> BackendError
    """
    details: dict[str, Any] = {
        "status_code": info.status_code,
        "reason": info.reason,
    }
    if info.details:
        details.update(info.details)

    message = info.message or f"HTTP error {info.status_code}"

    if info.status_code in (401, 403):
        return AuthError(message, details=details, cause=cause)
    if info.status_code in (409, 412):
        return ConcurrencyConflictError(message, details=details, cause=cause)
    if info.status_code == 429:
        return BackendUnavailableError(message, details=details, cause=cause)
    if 500 <= info.status_code <= 599:
        return BackendUnavailableError(message, details=details, cause=cause)

    return BackendError(message, details=details, cause=cause)
