"""Public model exports for treestore."""

from __future__ import annotations

from .entities import FileInfo, FolderInfo, OrderItem
from .results import DeleteResult
from .snapshot import LoadedSnapshot, StoreSnapshot, file_to_dict, folder_to_dict

__all__ = [
    "FolderInfo",
    "FileInfo",
    "OrderItem",
    "DeleteResult",
    "StoreSnapshot",
    "LoadedSnapshot",
    "folder_to_dict",
    "file_to_dict",
]
