"""Build the configured backend and TreeStore."""

from __future__ import annotations

import logging
from typing import Optional

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
from treestore.store import TreeStore

logger = logging.getLogger(__name__)


def create_backend(settings: StoreSettings) -> SnapshotBackend:
    kind = settings.resolved_backend
    retry_policy = RetryPolicy(max_retries=settings.max_retries)

    if kind == "local":
        backend: SnapshotBackend = LocalSnapshotBackend(settings.data_file)
    elif kind == "kv":
        backend = KeyValueBackend(
            settings.kv_url,  # type: ignore[arg-type]
            settings.kv_token,  # type: ignore[arg-type]
            key=settings.kv_key,
            timeout_sec=settings.timeout_sec,
            retry_policy=retry_policy,
        )
    elif kind == "drive":
        auth_info = AuthInfo(
            kind=settings.drive_credentials_kind,
            data={"credentials_file": settings.drive_credentials_file},
        )
        backend = DriveBackend.from_auth_info(
            auth_info,
            settings.drive_folder_id,  # type: ignore[arg-type]
            file_name=settings.drive_file_name,
            timeout_sec=settings.timeout_sec,
            retry_policy=retry_policy,
        )
    elif kind == "memory":
        backend = MemoryBackend()
    else:
        raise ValueError(f"Unknown backend: {kind}")

    logger.info("Using %s snapshot backend", backend.name)
    return backend


def open_store(settings: Optional[StoreSettings] = None) -> TreeStore:
    """Create a TreeStore on the backend chosen by settings (default: environment)."""
    settings = settings or get_settings()
    return TreeStore(create_backend(settings), conflict_retries=settings.conflict_retries)
