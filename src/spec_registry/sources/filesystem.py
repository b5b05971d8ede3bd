"""Filesystem-backed module discovery and execution.

Spec modules are Python files that bind a module-level ``spec`` value, or
YAML documents whose top-level value is the spec.

Layout expected under ``spec_root``::

    plugins.py            # root module, may also be plugins.yaml
    plugins/
        editing.py        # -> "plugins.editing"
        ui.yaml           # -> "plugins.ui"

Classes
-------
- DirectoryDiscovery  — root file first, then the sibling directory
- FileExecutor        — runs ``.py`` files via ``runpy``, reads YAML files
"""
from __future__ import annotations

import logging
import runpy
from pathlib import Path

import yaml

from spec_registry.sources.base import ModuleDiscovery, ModuleExecutionError, ModuleExecutor

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES: tuple[str, ...] = (".py", ".yaml", ".yml")
SPEC_GLOBAL = "spec"


class DirectoryDiscovery(ModuleDiscovery):
    """Finds the root spec file and the modules in its sibling directory.

    Sibling modules are returned sorted by file name.  Files whose name
    starts with ``_`` or ``.`` are ignored.

    Parameters
    ----------
    spec_root:
        Directory containing ``<root_module>.<ext>`` and ``<root_module>/``.
    root_module:
        Logical name of the root module.
    """

    def __init__(self, spec_root: str | Path, root_module: str = "plugins") -> None:
        self._spec_root = Path(spec_root)
        self._root_module = root_module

    def discover(self) -> list[tuple[str, str]]:
        """Return ``(modname, modpath)`` pairs, root module first."""
        modules: list[tuple[str, str]] = []
        for suffix in SUPPORTED_SUFFIXES:
            root_file = self._spec_root / f"{self._root_module}{suffix}"
            if root_file.is_file():
                modules.append((self._root_module, str(root_file)))
                break

        directory = self._spec_root / self._root_module
        if directory.is_dir():
            for path in sorted(directory.iterdir(), key=lambda p: p.name):
                if not path.is_file() or path.suffix not in SUPPORTED_SUFFIXES:
                    continue
                if path.name.startswith(("_", ".")):
                    continue
                modules.append((f"{self._root_module}.{path.stem}", str(path)))

        logger.debug("DirectoryDiscovery: found %d module(s) under %s", len(modules), self._spec_root)
        return modules

    def __repr__(self) -> str:
        return f"DirectoryDiscovery(spec_root={str(self._spec_root)!r}, root_module={self._root_module!r})"


class FileExecutor(ModuleExecutor):
    """Executes spec files from disk.

    Python files are run in a fresh namespace and must bind ``spec``.
    YAML files are parsed with ``yaml.safe_load``.  Freshness tokens combine
    modification time and size.
    """

    def execute(self, modname: str, modpath: str) -> object:
        """Run or parse ``modpath`` and return its spec value.

        Raises
        ------
        ModuleExecutionError
            If the file is unreadable, unsupported, fails while running, or
            does not bind ``spec``.
        """
        path = Path(modpath)
        if path.suffix == ".py":
            return self._execute_python(modname, path)
        if path.suffix in (".yaml", ".yml"):
            return self._execute_yaml(modname, path)
        raise ModuleExecutionError(modname, f"unsupported file type {path.suffix!r}")

    def freshness(self, modname: str, modpath: str) -> str:
        """Return ``"<mtime_ns>:<size>"`` or ``""`` when the file is gone."""
        try:
            stat = Path(modpath).stat()
        except OSError:
            return ""
        return f"{stat.st_mtime_ns}:{stat.st_size}"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _execute_python(self, modname: str, path: Path) -> object:
        try:
            namespace = runpy.run_path(str(path), run_name=modname)
        except Exception as exc:  # noqa: BLE001
            raise ModuleExecutionError(modname, f"{type(exc).__name__}: {exc}") from exc
        if SPEC_GLOBAL not in namespace:
            raise ModuleExecutionError(modname, f"{path} does not define {SPEC_GLOBAL!r}")
        return namespace[SPEC_GLOBAL]

    def _execute_yaml(self, modname: str, path: Path) -> object:
        try:
            raw = path.read_text(encoding="utf-8")
            data = yaml.safe_load(raw)
        except (OSError, yaml.YAMLError) as exc:
            raise ModuleExecutionError(modname, str(exc)) from exc
        return data if data is not None else []

    def __repr__(self) -> str:
        return "FileExecutor()"
