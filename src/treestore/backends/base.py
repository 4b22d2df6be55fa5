"""Persistence backend contract: whole-snapshot load/save."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from treestore.models import LoadedSnapshot, StoreSnapshot


class SnapshotBackend(ABC):
    """
    Abstract persistence substrate for a StoreSnapshot.

    There are no partial writes: `load` returns the whole collection and
    `save` replaces it. Every load carries an opaque version token; a save
    given `expected_version` only succeeds if the stored version still
    matches, otherwise it raises ConcurrencyConflictError and writes nothing.
    """

    name: str = "backend"

    @abstractmethod
    def load(self) -> LoadedSnapshot:
        """
        Load the full snapshot.

        :return: The snapshot and the version it was read at. A substrate
            that holds nothing yet yields an empty snapshot.
        :raises BackendUnavailableError: on I/O, network or timeout failures.
        """

    @abstractmethod
    def save(
        self,
        snapshot: StoreSnapshot,
        *,
        expected_version: Optional[str] = None,
    ) -> str:
        """
        Replace the stored snapshot.

        :param snapshot: The complete snapshot to persist.
        :param expected_version: Version returned by the `load` this save is
            based on, or None for an unconditional write.
        :return: The new version token.
        :raises ConcurrencyConflictError: if expected_version is stale.
        :raises BackendUnavailableError: on I/O, network or timeout failures.
        """

    def close(self) -> None:
        """Release network clients or other resources. Default: nothing to do."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} name={self.name!r}>"
