"""Best-effort cleanup of byte payloads behind deleted file records."""

from __future__ import annotations

import logging
from typing import Iterable, Protocol

from treestore.models import FileInfo

logger = logging.getLogger(__name__)


class PayloadStore(Protocol):
    """The external byte store that handed out each FileInfo.location."""

    def delete(self, location: str) -> None:
        """Delete the bytes at location. May raise on failure."""


def discard_payloads(store: PayloadStore, files: Iterable[FileInfo]) -> list[FileInfo]:
    """
    Delete the payload of every file in `files`.

    Metadata is already gone by the time this runs, so a failed delete only
    leaves an unreferenced payload behind. Failures are logged and returned,
    never raised.
    """
    failed: list[FileInfo] = []
    for info in files:
        if not info.location:
            continue
        try:
            store.delete(info.location)
        except Exception as exc:
            logger.warning(
                "Failed to delete payload for file %s at %s: %s",
                info.id,
                info.location,
                exc,
            )
            failed.append(info)
    return failed
