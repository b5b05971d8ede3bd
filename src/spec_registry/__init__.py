"""spec-registry — Declarative plugin spec resolution with a persistent cache.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import spec_registry
>>> spec_registry.__version__
'0.1.0'
"""
from __future__ import annotations

# Configuration
from spec_registry.config import LocalPluginsConfig, RegistryConfig, load_config

# Spec normalization
from spec_registry.spec.errors import SpecValidationError
from spec_registry.spec.nodes import Fields, Identifier, Sequence, classify
from spec_registry.spec.normalizer import normalize
from spec_registry.spec.plugin import HOOK_FIELDS, VOLATILE_FIELDS, PluginRecord

# Registry and modules
from spec_registry.registry.registry import Registry, derive_name
from spec_registry.registry.merge import merge_specs
from spec_registry.spec.module import SpecModule

# Module sources
from spec_registry.sources.base import ModuleDiscovery, ModuleExecutionError, ModuleExecutor
from spec_registry.sources.filesystem import DirectoryDiscovery, FileExecutor
from spec_registry.sources.memory import InMemoryExecutor, StaticDiscovery

# Storage backends
from spec_registry.storage.base import StorageBackend, StorageError
from spec_registry.storage.memory import InMemoryBackend
from spec_registry.storage.filesystem import FilesystemBackend
from spec_registry.storage.sqlite import SQLiteBackend

# State cache
from spec_registry.cache.hooks import DeferredHook, HookResolutionError, ReloadHandle
from spec_registry.cache.serializer import CacheDecodeError, StateSerializer
from spec_registry.cache.state import CachedSpecModule, GlobalState
from spec_registry.cache.store import StateCache

# Install state
from spec_registry.install.scanner import InstallRecord, InstallScanner

# Orchestration
from spec_registry.notify import IdleNotifier
from spec_registry.manager import PluginManager

__version__: str = "0.1.0"

__all__ = [
    "__version__",
    # Configuration
    "LocalPluginsConfig",
    "RegistryConfig",
    "load_config",
    # Spec normalization
    "Fields",
    "HOOK_FIELDS",
    "Identifier",
    "PluginRecord",
    "Sequence",
    "SpecValidationError",
    "VOLATILE_FIELDS",
    "classify",
    "normalize",
    # Registry and modules
    "Registry",
    "SpecModule",
    "derive_name",
    "merge_specs",
    # Module sources
    "DirectoryDiscovery",
    "FileExecutor",
    "InMemoryExecutor",
    "ModuleDiscovery",
    "ModuleExecutionError",
    "ModuleExecutor",
    "StaticDiscovery",
    # Storage
    "FilesystemBackend",
    "InMemoryBackend",
    "SQLiteBackend",
    "StorageBackend",
    "StorageError",
    # State cache
    "CacheDecodeError",
    "CachedSpecModule",
    "DeferredHook",
    "GlobalState",
    "HookResolutionError",
    "ReloadHandle",
    "StateCache",
    "StateSerializer",
    # Install state
    "InstallRecord",
    "InstallScanner",
    # Orchestration
    "IdleNotifier",
    "PluginManager",
]
