"""Storage backend subpackage.

All backends implement the ``StorageBackend`` ABC: a key/value store that
holds the encoded cache document.

Public surface
--------------
- StorageBackend    — abstract base class
- StorageError      — the backing store cannot be read or written
- FilesystemBackend — one JSON file per key
- SQLiteBackend     — rows in a local SQLite database
- InMemoryBackend   — in-process dict (useful for testing)
"""
from __future__ import annotations

from spec_registry.storage.base import StorageBackend, StorageError
from spec_registry.storage.filesystem import FilesystemBackend
from spec_registry.storage.memory import InMemoryBackend
from spec_registry.storage.sqlite import SQLiteBackend

__all__ = [
    "FilesystemBackend",
    "InMemoryBackend",
    "SQLiteBackend",
    "StorageBackend",
    "StorageError",
]
