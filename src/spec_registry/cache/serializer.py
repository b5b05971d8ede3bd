"""Encoding and decoding of the cached state document.

The document is JSON with an embedded schema version and checksum.  Every
problem found while decoding surfaces as ``CacheDecodeError`` so callers
can treat it uniformly as a cache miss.

Classes
-------
- CacheDecodeError  — the cached document cannot be trusted
- StateSerializer   — ``GlobalState`` to and from JSON
"""
from __future__ import annotations

import json

from pydantic import ValidationError

from spec_registry.cache.state import GlobalState

_SUPPORTED_SCHEMA_VERSIONS: frozenset[str] = frozenset({"1.0"})


class CacheDecodeError(ValueError):
    """Raised when a cached document is corrupt, outdated, or mismatched.

    Parameters
    ----------
    reason:
        Why the document was rejected.
    """

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Cached state rejected: {reason}")


class StateSerializer:
    """Serialize and deserialize ``GlobalState`` documents.

    Parameters
    ----------
    validate_checksum:
        When True (default), ``from_json`` verifies the embedded SHA-256
        checksum.
    """

    def __init__(self, validate_checksum: bool = True) -> None:
        self.validate_checksum = validate_checksum

    def to_json(self, state: GlobalState) -> str:
        """Serialise ``state`` to a JSON string with a fresh checksum.

        Values that JSON cannot represent are stored as their ``str()``.
        """
        state.compute_checksum()
        return json.dumps(state.model_dump(), default=str)

    def from_json(self, raw: str) -> GlobalState:
        """Deserialize a ``GlobalState`` from a JSON string.

        Raises
        ------
        CacheDecodeError
            If ``raw`` is not valid JSON, uses an unsupported schema
            version, fails validation, or fails the checksum.
        """
        try:
            data = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            raise CacheDecodeError(f"invalid JSON ({exc})") from exc
        if not isinstance(data, dict):
            raise CacheDecodeError("document is not a JSON object")

        version = str(data.get("schema_version", ""))
        if version not in _SUPPORTED_SCHEMA_VERSIONS:
            raise CacheDecodeError(f"unsupported schema version {version!r}")

        try:
            state = GlobalState.model_validate(data)
        except ValidationError as exc:
            raise CacheDecodeError(f"schema validation failed ({exc.error_count()} error(s))") from exc

        if self.validate_checksum:
            stored = state.checksum
            computed = state.compute_checksum()
            if stored != computed:
                raise CacheDecodeError(
                    f"checksum mismatch: stored={stored!r} computed={computed!r}"
                )
        return state
