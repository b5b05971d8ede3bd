"""Plugin registry subpackage.

Public surface
--------------
- Registry     — name-keyed mapping of merged plugin records
- derive_name  — registry name for an identifier
- merge_specs  — fold per-module registries into one global registry
"""
from __future__ import annotations

from spec_registry.registry.merge import merge_specs
from spec_registry.registry.registry import Registry, derive_name

__all__ = ["Registry", "derive_name", "merge_specs"]
