"""Google Drive backend: the snapshot as one JSON file in a Drive folder."""

from __future__ import annotations

import io
import json
import logging
from typing import Any, Callable, Optional, Sequence, TypeVar

import httplib2
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseUpload

from treestore.auth import DEFAULT_SCOPES, AuthInfo, build_drive_service
from treestore.errors import (
    BackendError,
    BackendUnavailableError,
    ConcurrencyConflictError,
    HttpErrorInfo,
    SnapshotFormatError,
    TreeStoreError,
    map_http_error,
)
from treestore.models import LoadedSnapshot, StoreSnapshot

from ._retry import RetryPolicy, call_with_retry
from .base import SnapshotBackend

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_FILE_NAME = "store_data.json"
FILE_FIELDS: str = "id,name,version,modifiedTime"
JSON_MIME: str = "application/json"


class DriveBackend(SnapshotBackend):
    """
    Snapshot stored as `<file_name>` inside one Drive folder.

    Notes:
        - The Drive `service` object is NOT exposed.
        - Single writer process only. The version token is Drive's per-file
          `version` counter, but Drive has no conditional update: a
          conditional save re-reads the version right before uploading, and
          only the TreeStore lock keeps that check and the upload together.
          Writers in separate processes can still overwrite each other.
        - A missing file loads as an empty snapshot with version "".
    """

    name = "drive"

    def __init__(
        self,
        service: Any,
        folder_id: str,
        *,
        file_name: str = DEFAULT_FILE_NAME,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> None:
        if not folder_id:
            raise ValueError("DriveBackend requires folder_id")
        self._service = service
        self._folder_id = folder_id
        self._file_name = file_name
        self._retry_policy = retry_policy or RetryPolicy()

    @classmethod
    def from_auth_info(
        cls,
        auth_info: AuthInfo,
        folder_id: str,
        *,
        file_name: str = DEFAULT_FILE_NAME,
        scopes: Optional[Sequence[str]] = None,
        timeout_sec: float = 10.0,
        retry_policy: Optional[RetryPolicy] = None,
    ) -> "DriveBackend":
        use_scopes = list(scopes) if scopes is not None else list(DEFAULT_SCOPES)
        service = build_drive_service(auth_info, use_scopes, timeout_sec=timeout_sec)
        return cls(service, folder_id, file_name=file_name, retry_policy=retry_policy)

    def load(self) -> LoadedSnapshot:
        meta = self._find_file()
        if meta is None:
            logger.debug("%s not found in folder %s, starting empty", self._file_name, self._folder_id)
            return LoadedSnapshot(snapshot=StoreSnapshot.empty(), version="")

        req = self._service.files().get_media(fileId=meta["id"], supportsAllDrives=True)
        content = self._execute(req.execute)
        if not isinstance(content, (bytes, bytearray, str)):
            raise SnapshotFormatError("Drive returned no snapshot content", details={"file_id": meta["id"]})

        snapshot = StoreSnapshot.from_json(content)
        version = _version_of(meta)
        logger.debug(
            "Loaded %d folders, %d files from Drive file %s (version %s)",
            len(snapshot.folders),
            len(snapshot.files),
            meta["id"],
            version,
        )
        return LoadedSnapshot(snapshot=snapshot, version=version)

    def save(
        self,
        snapshot: StoreSnapshot,
        *,
        expected_version: Optional[str] = None,
    ) -> str:
        meta = self._find_file()
        current = _version_of(meta) if meta is not None else ""
        if expected_version is not None and current != expected_version:
            raise ConcurrencyConflictError(
                "Snapshot changed since it was loaded",
                details={"expected": expected_version, "actual": current},
            )

        data = snapshot.to_json().encode("utf-8")
        media = MediaIoBaseUpload(io.BytesIO(data), mimetype=JSON_MIME, resumable=False)

        if meta is None:
            body = {"name": self._file_name, "parents": [self._folder_id], "mimeType": JSON_MIME}
            req = self._service.files().create(
                body=body,
                media_body=media,
                fields=FILE_FIELDS,
                supportsAllDrives=True,
            )
        else:
            req = self._service.files().update(
                fileId=meta["id"],
                media_body=media,
                fields=FILE_FIELDS,
                supportsAllDrives=True,
            )

        result = self._execute(req.execute)
        version = _version_of(result)
        logger.debug("Saved snapshot to Drive file %s (version %s)", result.get("id"), version)
        return version

    # ----------------------------
    # Internals
    # ----------------------------
    def _find_file(self) -> Optional[dict[str, Any]]:
        q = (
            f"name = '{_escape_query(self._file_name)}' "
            f"and '{_escape_query(self._folder_id)}' in parents "
            "and trashed = false"
        )
        req = self._service.files().list(
            q=q,
            fields=f"files({FILE_FIELDS})",
            pageSize=10,
            supportsAllDrives=True,
            includeItemsFromAllDrives=True,
        )
        data = self._execute(req.execute)
        files = data.get("files", []) or []
        if not files:
            return None
        if len(files) > 1:
            logger.warning(
                "Found %d files named %s in folder %s; using %s",
                len(files),
                self._file_name,
                self._folder_id,
                files[0].get("id"),
            )
        return files[0]

    def _execute(self, func: Callable[[], T]) -> T:
        return call_with_retry(
            func,
            policy=self._retry_policy,
            map_exception=_map_exception,
            what="Drive request",
        )


def _version_of(meta: Optional[dict[str, Any]]) -> str:
    if not meta:
        return ""
    version = meta.get("version")
    return str(version) if version is not None else ""


def _escape_query(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _map_exception(exc: Exception) -> TreeStoreError:
    if isinstance(exc, HttpError):
        return map_http_error(_http_error_to_info(exc), cause=exc)

    if isinstance(exc, (OSError, TimeoutError, httplib2.HttpLib2Error)):
        return BackendUnavailableError("Drive network error", cause=exc)

    return BackendError("Drive API error", cause=exc)


def _http_error_to_info(exc: HttpError) -> HttpErrorInfo:
    status_code = getattr(getattr(exc, "resp", None), "status", None)
    reason = getattr(getattr(exc, "resp", None), "reason", None)

    message = None
    details: dict[str, Any] = {}

    content = getattr(exc, "content", None)
    if isinstance(content, (bytes, bytearray)):
        try:
            payload = json.loads(content.decode("utf-8"))
        except ValueError:
            payload = None
        err = payload.get("error", {}) if isinstance(payload, dict) else {}
        if isinstance(err, dict):
            message = err.get("message") or None
            errors = err.get("errors") or []
            if errors and isinstance(errors, list) and isinstance(errors[0], dict):
                details["domain"] = errors[0].get("domain")
                if isinstance(errors[0].get("reason"), str):
                    reason = errors[0]["reason"]

    if not isinstance(status_code, int):
        status_code = 0

    return HttpErrorInfo(
        status_code=status_code,
        reason=reason if isinstance(reason, str) else None,
        message=message,
        details=details or None,
    )
