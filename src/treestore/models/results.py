"""Result models for delete operations."""

from __future__ import annotations

from dataclasses import dataclass, field

from .entities import FileInfo


@dataclass(slots=True)
class DeleteResult:
    """
    What a delete removed from the snapshot.

    `files` carries full records so the caller can clean up payloads by
    location after the metadata is gone.
    """

    folder_ids: list[str] = field(default_factory=list)
    files: list[FileInfo] = field(default_factory=list)

    @property
    def deleted(self) -> bool:
        return bool(self.folder_ids or self.files)
