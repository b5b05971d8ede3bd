"""Reconciliation of declared plugins with install directories.

Plugins live under ``<package_path>/opt/<name>`` or
``<package_path>/start/<name>``.  The scanner records which declared
plugins are present and, on request, which on-disk entries no declared
plugin claims.

Classes
-------
- InstallRecord   — one on-disk entry found during a scan
- InstallScanner  — sets ``dir``/``installed`` and finds orphans
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from spec_registry.config import RegistryConfig
from spec_registry.registry.registry import Registry

logger = logging.getLogger(__name__)

CATEGORIES: tuple[str, ...] = ("opt", "start")


@dataclass
class InstallRecord:
    """An install directory entry.

    Parameters
    ----------
    name:
        Directory name, equal to the plugin name it would belong to.
    category:
        ``"opt"`` or ``"start"``.
    dir:
        Full path of the entry.
    present:
        Whether the entry exists on disk.  Always True for scan results.
    """

    name: str
    category: str
    dir: str
    present: bool = True

    @property
    def opt(self) -> bool:
        return self.category == "opt"


class InstallScanner:
    """Reconciles a registry against the install directories.

    Scanning is best effort: entries changed by other processes during a
    scan are not guarded against.

    Parameters
    ----------
    config:
        Supplies ``package_path`` and the default ``opt`` flag.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self._config = config or RegistryConfig()

    def scan(self) -> dict[str, set[str]]:
        """Return the names of directories and symlinks per category.

        Plain files are ignored.  A category root that cannot be listed yields
        an empty set.
        """
        installed: dict[str, set[str]] = {}
        for category in CATEGORIES:
            root = Path(self._config.package_path) / category
            names: set[str] = set()
            try:
                with os.scandir(root) as entries:
                    for entry in entries:
                        if entry.is_symlink() or entry.is_dir(follow_symlinks=False):
                            names.add(entry.name)
            except OSError as exc:
                logger.debug("InstallScanner: cannot list %s: %s", root, exc)
            installed[category] = names
        return installed

    def update_state(self, registry: Registry, check_clean: bool = False) -> list[InstallRecord] | None:
        """Set ``opt``, ``dir`` and ``installed`` on every plugin in ``registry``.

        Parameters
        ----------
        registry:
            The merged registry.  Its records are updated in place.
        check_clean:
            When True, build the list of on-disk entries that no plugin
            claims.

        Returns
        -------
        list[InstallRecord] | None
            Orphaned entries sorted by category then name when
            ``check_clean`` is True, otherwise None.
        """
        installed = self.scan()
        package_path = Path(self._config.package_path)

        for plugin in registry.values():
            if plugin.opt is None:
                plugin.opt = self._config.opt
            category = "opt" if plugin.opt else "start"
            name = str(plugin.name)
            plugin.dir = str(package_path / category / name)
            plugin.installed = name in installed[category]
            installed[category].discard(name)

        if not check_clean:
            return None

        to_clean = [
            InstallRecord(name=name, category=category, dir=str(package_path / category / name))
            for category in CATEGORIES
            for name in sorted(installed[category])
        ]
        if to_clean:
            logger.info("InstallScanner: %d orphaned install(s) found", len(to_clean))
        return to_clean
