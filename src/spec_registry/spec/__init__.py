"""Spec normalization subpackage.

Turns authored plugin spec trees into flat, name-keyed ``PluginRecord``
entries.

Public surface
--------------
- PluginRecord         — canonical plugin definition
- SpecValidationError  — raised for unusable spec entries
- classify             — raw node to ``Identifier`` / ``Sequence`` / ``Fields``
- normalize            — flatten a spec tree into a ``Registry``

``SpecModule`` lives in ``spec_registry.spec.module`` and is not imported
here because it depends on the registry subpackage.
"""
from __future__ import annotations

from spec_registry.spec.errors import SpecValidationError
from spec_registry.spec.nodes import Fields, Identifier, Sequence, classify
from spec_registry.spec.normalizer import normalize
from spec_registry.spec.plugin import HOOK_FIELDS, VOLATILE_FIELDS, PluginRecord

__all__ = [
    "HOOK_FIELDS",
    "VOLATILE_FIELDS",
    "Fields",
    "Identifier",
    "PluginRecord",
    "Sequence",
    "SpecValidationError",
    "classify",
    "normalize",
]
