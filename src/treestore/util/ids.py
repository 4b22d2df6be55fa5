from __future__ import annotations

import uuid


def new_uuid() -> str:
    """Generate a UUID4 string."""
    return str(uuid.uuid4())


def new_folder_id() -> str:
    """Generate a new FolderInfo id."""
    return new_uuid()


def new_file_id() -> str:
    """Generate a new FileInfo id."""
    return new_uuid()
