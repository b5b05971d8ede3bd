"""Name-keyed plugin registry.

A ``Registry`` is an explicit value created fresh for every load cycle.
It owns the ``add`` contract: identifier validation, uri and name
derivation, local-path overrides, and field-level merging of records that
resolve to the same name.

Classes
-------
- Registry  — ordered mapping of plugin name to ``PluginRecord``

Functions
---------
- derive_name  — registry key for an identifier
"""
from __future__ import annotations

import logging
import re
from collections.abc import Iterator, Mapping
from typing import Any

from spec_registry.config import RegistryConfig
from spec_registry.spec.errors import SpecValidationError
from spec_registry.spec.plugin import PluginRecord

logger = logging.getLogger(__name__)

_NON_ALNUM = re.compile(r"[^0-9A-Za-z]+")
_GIT_SUFFIX = ".git"


def derive_name(identifier: str) -> str:
    """Return the registry name for ``identifier``.

    A trailing ``.git`` is stripped.  When a ``/`` remains, the part after
    the last one is the name; otherwise every run of non-alphanumeric
    characters collapses to a single underscore.

    Parameters
    ----------
    identifier:
        ``owner/repo``-shaped identifier.

    Returns
    -------
    str
        The derived name.

    Examples
    --------
    >>> derive_name("user/repo.git")
    'repo'
    >>> derive_name("a.b-c")
    'a_b_c'
    """
    name = identifier[: -len(_GIT_SUFFIX)] if identifier.endswith(_GIT_SUFFIX) else identifier
    slash = name.rfind("/")
    if slash != -1:
        return name[slash + 1 :]
    return _NON_ALNUM.sub("_", name)


class Registry:
    """Ordered mapping of plugin name to merged ``PluginRecord``.

    Parameters
    ----------
    config:
        Supplies the default host and local-path overrides used by ``add``.
        Defaults to ``RegistryConfig()``.
    """

    def __init__(self, config: RegistryConfig | None = None) -> None:
        self._config = config or RegistryConfig()
        self._plugins: dict[str, PluginRecord] = {}

    # ------------------------------------------------------------------
    # Adding plugins
    # ------------------------------------------------------------------

    def add(self, entry: PluginRecord | Mapping[Any, Any]) -> PluginRecord:
        """Register ``entry``, merging it into any record with the same name.

        Missing ``name`` and ``uri`` fields are derived from the identifier
        before the merge, so they count as fields of the new entry.

        Parameters
        ----------
        entry:
            A record, or an authored mapping with an identifier.

        Returns
        -------
        PluginRecord
            The merged record now stored under the entry's name.

        Raises
        ------
        SpecValidationError
            If the identifier is not a string.
        """
        plugin = entry if isinstance(entry, PluginRecord) else PluginRecord.from_spec(entry)
        if not isinstance(plugin.identifier, str):
            raise SpecValidationError(
                f"Invalid plugin spec {plugin!r}: identifier must be a string."
            )

        if plugin.name is None:
            plugin.name = derive_name(plugin.identifier)

        local_uri = self._local_uri(plugin)
        if local_uri is not None:
            plugin.uri = local_uri
        elif plugin.uri is None:
            host = self._config.default_host.rstrip("/")
            plugin.uri = f"{host}/{plugin.identifier}{_GIT_SUFFIX}"

        return self._store(plugin, warn_on_conflict=True)

    def merge(self, plugin: PluginRecord) -> PluginRecord:
        """Fold an already normalized record into this registry.

        Unlike ``add``, nothing is derived.  A record with a new name is
        stored as-is; otherwise a merged copy replaces the existing record.

        Parameters
        ----------
        plugin:
            A record produced by a previous normalization.

        Returns
        -------
        PluginRecord
            The record now stored under ``plugin.name``.
        """
        return self._store(plugin, warn_on_conflict=False)

    # ------------------------------------------------------------------
    # Mapping interface
    # ------------------------------------------------------------------

    def get(self, name: str) -> PluginRecord | None:
        return self._plugins.get(name)

    def names(self) -> list[str]:
        """Return plugin names in insertion order."""
        return list(self._plugins)

    def values(self) -> list[PluginRecord]:
        return list(self._plugins.values())

    def items(self) -> list[tuple[str, PluginRecord]]:
        return list(self._plugins.items())

    def to_dict(self) -> dict[str, dict[str, Any]]:
        """Return a plain ``name -> present fields`` snapshot."""
        return {name: plugin.present_fields() for name, plugin in self._plugins.items()}

    def __getitem__(self, name: str) -> PluginRecord:
        try:
            return self._plugins[name]
        except KeyError:
            raise KeyError(f"Plugin {name!r} not found in registry.") from None

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def __iter__(self) -> Iterator[str]:
        return iter(self._plugins)

    def __len__(self) -> int:
        return len(self._plugins)

    def __repr__(self) -> str:
        return f"Registry(plugins={len(self._plugins)})"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _local_uri(self, plugin: PluginRecord) -> str | None:
        """Return the local checkout path when the identifier matches a pattern."""
        local = self._config.local
        for pattern in local.patterns:
            if pattern and pattern in plugin.identifier:
                return f"{local.path.rstrip('/')}/{plugin.name}"
        return None

    def _store(self, plugin: PluginRecord, *, warn_on_conflict: bool) -> PluginRecord:
        name = str(plugin.name)
        existing = self._plugins.get(name)
        if existing is None:
            self._plugins[name] = plugin
            return plugin

        if warn_on_conflict and existing.identifier != plugin.identifier:
            logger.warning(
                "Plugin name %r is declared by both %r and %r; the later declaration wins.",
                name,
                existing.identifier,
                plugin.identifier,
            )
        merged = existing.extend(plugin)
        self._plugins[name] = merged
        return merged
