"""Persisted cache models.

Classes
-------
- CachedSpecModule  — serializable projection of one ``SpecModule``
- GlobalState       — the whole cached document
"""
from __future__ import annotations

import hashlib
import json
from typing import Any, ClassVar

from pydantic import BaseModel, Field


class CachedSpecModule(BaseModel):
    """A spec module with hooks replaced by markers and runtime state removed.

    Parameters
    ----------
    modname:
        Logical module name.
    modpath:
        Filesystem path of the module source.
    token:
        Freshness token of the source when the module was executed.
    plugins:
        Plugin name to persisted fields.  Never contains callables or
        volatile fields.
    funs:
        Hook field name to the names of plugins that defined a callable
        for it.
    """

    modname: str
    modpath: str
    token: str = ""
    plugins: dict[str, dict[str, Any]] = Field(default_factory=dict)
    funs: dict[str, list[str]] = Field(default_factory=dict)

    model_config = {"frozen": False}


class GlobalState(BaseModel):
    """Complete cached snapshot of a registry load.

    Parameters
    ----------
    schema_version:
        Document schema version.
    fingerprint:
        Fingerprint of the configuration active when the cache was written.
    specs:
        Cached modules keyed by logical name, in load order.
    loaders:
        Trigger index owned by the activation layer.  Stored and restored
        verbatim.
    checksum:
        SHA-256 of the document's canonical JSON (excluding this field).
    """

    SCHEMA_VERSION: ClassVar[str] = "1.0"

    schema_version: str = "1.0"
    fingerprint: str = ""
    specs: dict[str, CachedSpecModule] = Field(default_factory=dict)
    loaders: Any = None
    checksum: str = ""

    model_config = {"frozen": False}

    def _canonical_dict(self) -> dict[str, object]:
        data = self.model_dump()
        data.pop("checksum", None)
        return data

    def compute_checksum(self) -> str:
        """Compute, store, and return the SHA-256 checksum of this document."""
        canonical_json = json.dumps(self._canonical_dict(), sort_keys=True, default=str)
        digest = hashlib.sha256(canonical_json.encode()).hexdigest()
        self.checksum = digest
        return digest
