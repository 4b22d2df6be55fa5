"""Snapshot model and its JSON document codec."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from treestore.errors import SnapshotFormatError
from treestore.util.time import parse_rfc3339, to_rfc3339

from .entities import FileInfo, FolderInfo


@dataclass(slots=True)
class StoreSnapshot:
    """
    The complete set of folders and files, the unit of load/save.

    Document layout:
        {"folders": [{"id", "name", "parentId", "order"}],
         "files": [{"id", "name", "folderId", "remark", "location",
                    "uploadedAt", "order"}]}
    """

    folders: list[FolderInfo] = field(default_factory=list)
    files: list[FileInfo] = field(default_factory=list)

    @classmethod
    def empty(cls) -> StoreSnapshot:
        return cls()

    # ----------------------------
    # Lookups
    # ----------------------------
    def find_folder(self, folder_id: str) -> Optional[FolderInfo]:
        for folder in self.folders:
            if folder.id == folder_id:
                return folder
        return None

    def find_file(self, file_id: str) -> Optional[FileInfo]:
        for info in self.files:
            if info.id == file_id:
                return info
        return None

    # ----------------------------
    # Codec
    # ----------------------------
    def to_dict(self) -> dict[str, Any]:
        return {
            "folders": [folder_to_dict(f) for f in self.folders],
            "files": [file_to_dict(f) for f in self.files],
        }

    def to_json(self, *, indent: Optional[int] = 2) -> str:
        """Encode as JSON; indent=None gives the compact form used over the wire."""
        if indent is None:
            return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: Any) -> StoreSnapshot:
        """
        Decode a snapshot document.

        Also reads documents written before `location`/`uploadedAt` were
        named so (`path`/`uploadDate`) and files stored without `order`;
        those are appended after their siblings in document order.
        """
        if not isinstance(data, dict):
            raise SnapshotFormatError("Snapshot document must be a JSON object")

        raw_folders = data.get("folders", [])
        raw_files = data.get("files", [])
        if not isinstance(raw_folders, list) or not isinstance(raw_files, list):
            raise SnapshotFormatError("'folders' and 'files' must be lists")

        folders = [_folder_from_dict(item) for item in raw_folders]

        files: list[FileInfo] = []
        unordered: list[FileInfo] = []
        next_order: dict[str, int] = {}
        for item in raw_files:
            info, has_order = _file_from_dict(item)
            files.append(info)
            if not has_order:
                unordered.append(info)
                continue
            current = next_order.get(info.folder_id, 0)
            next_order[info.folder_id] = max(current, info.order + 1)

        for info in unordered:
            info.order = next_order.get(info.folder_id, 0)
            next_order[info.folder_id] = info.order + 1

        return cls(folders=folders, files=files)

    @classmethod
    def from_json(cls, text: str | bytes) -> StoreSnapshot:
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise SnapshotFormatError("Snapshot is not valid JSON", cause=exc) from exc
        return cls.from_dict(data)


@dataclass(slots=True)
class LoadedSnapshot:
    """A snapshot together with the backend version token it was read at."""

    snapshot: StoreSnapshot
    version: str


def folder_to_dict(folder: FolderInfo) -> dict[str, Any]:
    return {
        "id": folder.id,
        "name": folder.name,
        "parentId": folder.parent_id,
        "order": folder.order,
    }


def file_to_dict(info: FileInfo) -> dict[str, Any]:
    return {
        "id": info.id,
        "name": info.name,
        "folderId": info.folder_id,
        "remark": info.remark,
        "location": info.location,
        "uploadedAt": to_rfc3339(info.uploaded_at),
        "order": info.order,
    }


def _folder_from_dict(item: Any) -> FolderInfo:
    if not isinstance(item, dict):
        raise SnapshotFormatError("Folder entry must be an object")

    folder_id = _require_str(item, "id", "folder")
    parent_id = item.get("parentId")
    if parent_id is not None and not isinstance(parent_id, str):
        raise SnapshotFormatError(
            "Folder parentId must be a string or null",
            details={"id": folder_id},
        )

    return FolderInfo(
        id=folder_id,
        name=_optional_str(item, "name"),
        parent_id=parent_id or None,
        order=_require_order(item, folder_id),
    )


def _file_from_dict(item: Any) -> tuple[FileInfo, bool]:
    if not isinstance(item, dict):
        raise SnapshotFormatError("File entry must be an object")

    file_id = _require_str(item, "id", "file")
    folder_id = _require_str(item, "folderId", "file")

    location = item.get("location", item.get("path", ""))
    if not isinstance(location, str):
        raise SnapshotFormatError("File location must be a string", details={"id": file_id})

    raw_uploaded = item.get("uploadedAt", item.get("uploadDate"))
    try:
        uploaded_at = parse_rfc3339(raw_uploaded)
    except (TypeError, ValueError) as exc:
        raise SnapshotFormatError(
            "File uploadedAt must be an RFC3339 timestamp",
            details={"id": file_id},
            cause=exc,
        ) from exc

    has_order = item.get("order") is not None
    info = FileInfo(
        id=file_id,
        name=_optional_str(item, "name"),
        folder_id=folder_id,
        location=location,
        uploaded_at=uploaded_at,
        order=_require_order(item, file_id) if has_order else 0,
        remark=_optional_str(item, "remark"),
    )
    return info, has_order


def _require_str(item: dict[str, Any], key: str, what: str) -> str:
    value = item.get(key)
    if not isinstance(value, str) or not value:
        raise SnapshotFormatError(f"{what.capitalize()} entry is missing '{key}'")
    return value


def _optional_str(item: dict[str, Any], key: str) -> str:
    value = item.get(key)
    return value if isinstance(value, str) else ""


def _require_order(item: dict[str, Any], entity_id: str) -> int:
    value = item.get("order")
    if isinstance(value, bool) or not isinstance(value, int):
        raise SnapshotFormatError("order must be an integer", details={"id": entity_id})
    return value
