"""Filesystem storage backend.

Persists each key as an individual JSON file under a configurable
directory.  Defaults to ``~/.spec-registry/cache/``.

Classes
-------
- FilesystemBackend  — one file per key
"""
from __future__ import annotations

import os
from pathlib import Path

from spec_registry.storage.base import StorageBackend, StorageError

_DEFAULT_STORAGE_DIR: Path = Path.home() / ".spec-registry" / "cache"
_FILE_EXTENSION = ".json"


class FilesystemBackend(StorageBackend):
    """Stores payloads as individual files.

    Each key is stored as ``<storage_dir>/<key>.json``.  Writes go to a
    temporary file that is then renamed over the target, so readers never
    observe a half-written document.

    Parameters
    ----------
    storage_dir:
        Root directory for cache files.  Created on first write if absent.
    """

    def __init__(self, storage_dir: str | Path | None = None) -> None:
        self._storage_dir: Path = (
            Path(storage_dir) if storage_dir is not None else _DEFAULT_STORAGE_DIR
        )

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _ensure_dir(self) -> None:
        """Create the storage directory tree if it does not already exist."""
        self._storage_dir.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        """Return the file path for ``key``."""
        # Guard against path traversal attacks.
        safe_name = os.path.basename(key)
        return self._storage_dir / f"{safe_name}{_FILE_EXTENSION}"

    # ------------------------------------------------------------------
    # StorageBackend interface
    # ------------------------------------------------------------------

    def set(self, key: str, payload: str) -> None:
        """Write ``payload`` to ``<storage_dir>/<key>.json``.

        Parameters
        ----------
        key:
            Storage key.
        payload:
            UTF-8 string to write.
        """
        path = self._path_for(key)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            self._ensure_dir()
            tmp_path.write_text(payload, encoding="utf-8")
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StorageError(key, str(exc)) from exc

    def get(self, key: str) -> str:
        """Read and return the payload for ``key``.

        Raises
        ------
        KeyError
            If the file does not exist.
        StorageError
            If the file cannot be read or is not valid UTF-8.
        """
        path = self._path_for(key)
        if not path.exists():
            raise KeyError(f"Key {key!r} not found at {path}")
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(key, str(exc)) from exc

    def keys(self) -> list[str]:
        """Return all keys present in the storage directory.

        Returns
        -------
        list[str]
            Keys derived from file names.  Empty list if the directory does
            not yet exist.
        """
        if not self._storage_dir.exists():
            return []
        return [
            path.name[: -len(_FILE_EXTENSION)]
            for path in self._storage_dir.glob(f"*{_FILE_EXTENSION}")
            if path.is_file() and not path.name.startswith(".")
        ]

    def delete(self, key: str) -> None:
        """Remove the file for ``key``.

        Raises
        ------
        KeyError
            If the file does not exist.
        """
        path = self._path_for(key)
        if not path.exists():
            raise KeyError(f"Key {key!r} not found at {path}")
        try:
            path.unlink()
        except OSError as exc:
            raise StorageError(key, str(exc)) from exc

    def exists(self, key: str) -> bool:
        """Return True if the file for ``key`` exists."""
        return self._path_for(key).exists()

    def __repr__(self) -> str:
        return f"FilesystemBackend(storage_dir={str(self._storage_dir)!r})"
