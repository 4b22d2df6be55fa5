"""Persistence backends for treestore."""

from __future__ import annotations

from ._retry import RetryPolicy
from .base import SnapshotBackend
from .drive import DriveBackend
from .kv import KeyValueBackend
from .local import LocalSnapshotBackend
from .memory import MemoryBackend

__all__ = [
    "SnapshotBackend",
    "RetryPolicy",
    "LocalSnapshotBackend",
    "KeyValueBackend",
    "DriveBackend",
    "MemoryBackend",
]
