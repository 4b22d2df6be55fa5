"""Remote Keyed Store backend: one key in a Redis-compatible REST store."""

from __future__ import annotations

import hashlib
import logging
from typing import Any, Optional

import httpx

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

DEFAULT_KEY = "store_data"

# Compare-and-set on the SHA-1 of the stored value. A value that already
# equals the new document counts as success so a retried write is idempotent.
_CAS_SCRIPT = """
local current = redis.call('GET', KEYS[1])
local version = ''
if current then version = redis.sha1hex(current) end
if version == redis.sha1hex(ARGV[2]) then return 1 end
if version ~= ARGV[1] then return 0 end
redis.call('SET', KEYS[1], ARGV[2])
return 1
"""


class KeyValueBackend(SnapshotBackend):
    """
    Snapshot stored as a JSON string under one well-known key.

    Talks to the REST command endpoint of Upstash / Vercel KV: each call is
    `POST <url>` with a JSON command array and a bearer token, answered by
    `{"result": ...}` or `{"error": "..."}`.

    Notes:
        - A missing key loads as an empty snapshot with version "".
        - The version token is the SHA-1 hex of the stored string, which the
          server can recompute inside an atomic EVAL for conditional saves.
    """

    name = "kv"

    def __init__(
        self,
        url: str,
        token: str,
        *,
        key: str = DEFAULT_KEY,
        timeout_sec: float = 10.0,
        retry_policy: Optional[RetryPolicy] = None,
        client: Optional[httpx.Client] = None,
    ) -> None:
        if not url or not token:
            raise ValueError("KeyValueBackend requires url and token")
        self._url = url.rstrip("/")
        self._token = token
        self._key = key
        self._timeout_sec = timeout_sec
        self._retry_policy = retry_policy or RetryPolicy()
        self._client = client

    @property
    def key(self) -> str:
        return self._key

    def load(self) -> LoadedSnapshot:
        raw = self._command(["GET", self._key])
        if raw is None:
            logger.debug("Key %r is empty, starting from an empty snapshot", self._key)
            return LoadedSnapshot(snapshot=StoreSnapshot.empty(), version="")
        if not isinstance(raw, str):
            raise SnapshotFormatError(
                "Stored snapshot is not a string",
                details={"key": self._key, "type": type(raw).__name__},
            )

        snapshot = StoreSnapshot.from_json(raw)
        logger.debug(
            "Loaded %d folders, %d files from key %r",
            len(snapshot.folders),
            len(snapshot.files),
            self._key,
        )
        return LoadedSnapshot(snapshot=snapshot, version=_sha1(raw))

    def save(
        self,
        snapshot: StoreSnapshot,
        *,
        expected_version: Optional[str] = None,
    ) -> str:
        document = snapshot.to_json(indent=None)

        if expected_version is None:
            self._command(["SET", self._key, document])
        else:
            applied = self._command(
                ["EVAL", _CAS_SCRIPT, "1", self._key, expected_version, document]
            )
            if applied != 1:
                raise ConcurrencyConflictError(
                    "Snapshot changed since it was loaded",
                    details={"key": self._key},
                )

        logger.debug("Saved snapshot to key %r", self._key)
        return _sha1(document)

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    # ----------------------------
    # Internals
    # ----------------------------
    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(
                base_url=self._url,
                headers={"Authorization": f"Bearer {self._token}"},
                timeout=httpx.Timeout(self._timeout_sec, connect=min(self._timeout_sec, 5.0)),
            )
        return self._client

    def _command(self, command: list[str]) -> Any:
        def send() -> Any:
            response = self._get_client().post("/", json=command)
            payload = _decode_payload(response)

            if response.status_code >= 400:
                message = payload.get("error") if isinstance(payload, dict) else None
                raise map_http_error(
                    HttpErrorInfo(
                        status_code=response.status_code,
                        reason=response.reason_phrase,
                        message=message if isinstance(message, str) else None,
                        details={"command": command[0]},
                    )
                )

            if not isinstance(payload, dict):
                raise BackendError("Unexpected KV response", details={"command": command[0]})
            if "error" in payload:
                raise BackendError(str(payload["error"]), details={"command": command[0]})
            return payload.get("result")

        return call_with_retry(
            send,
            policy=self._retry_policy,
            map_exception=_map_exception,
            what=f"KV {command[0]}",
        )


def _decode_payload(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _map_exception(exc: Exception) -> TreeStoreError:
    if isinstance(exc, httpx.TimeoutException):
        return BackendUnavailableError("KV request timed out", cause=exc)
    if isinstance(exc, httpx.TransportError):
        return BackendUnavailableError("KV network error", cause=exc)
    return BackendError("KV request failed", cause=exc)


def _sha1(document: str) -> str:
    return hashlib.sha1(document.encode("utf-8")).hexdigest()
