"""State cache subpackage.

Public surface
--------------
- StateCache          — strip, save, load, and revive spec modules
- StateSerializer     — ``GlobalState`` to and from JSON
- CacheDecodeError    — cached document cannot be trusted
- CachedSpecModule    — persisted projection of one spec module
- GlobalState         — the whole cached document
- DeferredHook        — lazily resolved hook on a revived plugin
- ReloadHandle        — memoized per-module reload
- HookResolutionError — deferred hook missing after reload
"""
from __future__ import annotations

from spec_registry.cache.hooks import DeferredHook, HookResolutionError, ReloadHandle
from spec_registry.cache.serializer import CacheDecodeError, StateSerializer
from spec_registry.cache.state import CachedSpecModule, GlobalState
from spec_registry.cache.store import StateCache

__all__ = [
    "CacheDecodeError",
    "CachedSpecModule",
    "DeferredHook",
    "GlobalState",
    "HookResolutionError",
    "ReloadHandle",
    "StateCache",
    "StateSerializer",
]
