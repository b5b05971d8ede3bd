"""In-memory storage backend.

Holds cache documents in process memory.  Besides the ``StorageBackend``
interface it counts writes and keeps a revision number per key, so callers
can tell whether a load cycle actually persisted anything.

Classes
-------
- InMemoryBackend  — revisioned, dict-backed ephemeral storage
"""
from __future__ import annotations

from dataclasses import dataclass

from spec_registry.storage.base import StorageBackend


@dataclass
class _Revision:
    payload: str
    number: int


class InMemoryBackend(StorageBackend):
    """Ephemeral storage for embedding and tests.

    Parameters
    ----------
    initial_data:
        Documents to start with, keyed by cache key.  Each starts at
        revision 1 and does not count as a write.
    """

    def __init__(self, initial_data: dict[str, str] | None = None) -> None:
        self._documents: dict[str, _Revision] = {
            key: _Revision(payload, 1) for key, payload in (initial_data or {}).items()
        }
        self._writes = 0

    @property
    def writes(self) -> int:
        """Number of ``set`` calls since construction."""
        return self._writes

    def revision(self, key: str) -> int:
        """Return how many times ``key`` has been written, 0 when absent."""
        document = self._documents.get(key)
        return document.number if document is not None else 0

    # ------------------------------------------------------------------
    # StorageBackend interface
    # ------------------------------------------------------------------

    def set(self, key: str, payload: str) -> None:
        self._writes += 1
        self._documents[key] = _Revision(payload, self.revision(key) + 1)

    def get(self, key: str) -> str:
        """Return the latest payload for ``key``.

        Raises
        ------
        KeyError
            If ``key`` was never written or has been deleted.
        """
        document = self._documents.get(key)
        if document is None:
            raise KeyError(f"No cached document under {key!r}.")
        return document.payload

    def keys(self) -> list[str]:
        return list(self._documents)

    def delete(self, key: str) -> None:
        """Drop ``key`` together with its revision history.

        Raises
        ------
        KeyError
            If ``key`` is absent.
        """
        if self._documents.pop(key, None) is None:
            raise KeyError(f"No cached document under {key!r}.")

    def exists(self, key: str) -> bool:
        return key in self._documents

    def __repr__(self) -> str:
        return f"InMemoryBackend(keys={len(self._documents)}, writes={self._writes})"
