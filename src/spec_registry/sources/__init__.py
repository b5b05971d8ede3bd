"""Spec module sources.

Public surface
--------------
- ModuleDiscovery       — abstract base for module enumeration
- ModuleExecutor        — abstract base for module execution
- ModuleExecutionError  — raised when a module cannot be executed
- DirectoryDiscovery    — root file plus sibling directory on disk
- FileExecutor          — Python and YAML spec files
- StaticDiscovery       — fixed module list
- InMemoryExecutor      — dict-backed specs (useful for testing)
"""
from __future__ import annotations

from spec_registry.sources.base import ModuleDiscovery, ModuleExecutionError, ModuleExecutor
from spec_registry.sources.filesystem import DirectoryDiscovery, FileExecutor
from spec_registry.sources.memory import InMemoryExecutor, StaticDiscovery

__all__ = [
    "DirectoryDiscovery",
    "FileExecutor",
    "InMemoryExecutor",
    "ModuleDiscovery",
    "ModuleExecutionError",
    "ModuleExecutor",
    "StaticDiscovery",
]
