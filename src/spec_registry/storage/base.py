"""Abstract base class for cache storage backends.

The cached registry is one encoded document stored under a single key.
Backends exchange raw UTF-8 strings and never interpret them.

Classes
-------
- StorageError    — the backing store cannot be read or written
- StorageBackend  — abstract base for all backends
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class StorageError(RuntimeError):
    """Raised when the backing store itself is unreadable or unwritable.

    A missing key is not a storage error; backends raise ``KeyError`` for
    that.

    Parameters
    ----------
    key:
        Key being accessed.
    reason:
        Description of the underlying failure.
    """

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Storage failure for key {key!r}: {reason}")


class StorageBackend(ABC):
    """Key/value store for encoded cache documents.

    Backend implementations must be safe for sequential (single-threaded)
    use.  Writes are last-writer-wins; no cross-process coordination is
    attempted.
    """

    @abstractmethod
    def set(self, key: str, payload: str) -> None:
        """Persist ``payload`` under ``key``, overwriting any previous value.

        Parameters
        ----------
        key:
            Storage key.
        payload:
            UTF-8 string to persist (typically JSON).

        Raises
        ------
        StorageError
            If the store cannot be written.
        """

    @abstractmethod
    def get(self, key: str) -> str:
        """Return the payload stored under ``key``.

        Parameters
        ----------
        key:
            Storage key.

        Returns
        -------
        str
            The previously stored payload.

        Raises
        ------
        KeyError
            If nothing is stored under ``key``.
        StorageError
            If the store exists but cannot be read.
        """

    @abstractmethod
    def keys(self) -> list[str]:
        """Return all stored keys.  Order is implementation-defined."""

    @abstractmethod
    def delete(self, key: str) -> None:
        """Remove the entry for ``key``.

        Raises
        ------
        KeyError
            If nothing is stored under ``key``.
        """

    @abstractmethod
    def exists(self, key: str) -> bool:
        """Return True if an entry for ``key`` exists."""
