"""Registry state cache.

``StateCache`` persists a stripped projection of freshly loaded spec
modules and revives them on the next run without executing any spec
source.  Hooks are replaced by markers on save and by ``DeferredHook``
objects on revive; volatile runtime fields never reach the store.

Classes
-------
- StateCache  — strip, save, load, and revive cached spec modules
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from spec_registry.cache.hooks import DeferredHook, ModuleLoader, ReloadHandle
from spec_registry.cache.serializer import CacheDecodeError, StateSerializer
from spec_registry.cache.state import CachedSpecModule, GlobalState
from spec_registry.config import RegistryConfig
from spec_registry.registry.registry import Registry
from spec_registry.spec.module import SpecModule
from spec_registry.spec.plugin import VOLATILE_FIELDS, PluginRecord
from spec_registry.storage.base import StorageBackend, StorageError

logger = logging.getLogger(__name__)


class StateCache:
    """Persist and revive spec modules through a ``StorageBackend``.

    The whole state lives under ``config.cache_key``.  ``save`` only writes
    when ``dirty`` is set; the load cycle sets it whenever any module had to
    be recomputed.

    Parameters
    ----------
    backend:
        Key/value store holding the encoded document.
    config:
        Active configuration.  Its fingerprint is stored with the payload
        and checked on load.
    serializer:
        Optional custom serializer.
    """

    def __init__(
        self,
        backend: StorageBackend,
        config: RegistryConfig | None = None,
        serializer: StateSerializer | None = None,
    ) -> None:
        self._backend = backend
        self._config = config or RegistryConfig()
        self._serializer = serializer or StateSerializer()
        self.dirty = False

    # ------------------------------------------------------------------
    # Save
    # ------------------------------------------------------------------

    @staticmethod
    def strip(module: SpecModule) -> CachedSpecModule:
        """Return the persistable projection of ``module``.

        Callable fields are removed and their plugin names recorded in
        ``funs`` under the field name.  Volatile fields are removed
        whatever their value.  ``module`` itself is left untouched.

        Parameters
        ----------
        module:
            A freshly normalized spec module.

        Returns
        -------
        CachedSpecModule
            The projection, free of callables and runtime state.
        """
        plugins: dict[str, dict[str, Any]] = {}
        funs: dict[str, list[str]] = {}
        for name, plugin in module.plugins.items():
            fields: dict[str, Any] = {}
            for key, value in plugin.present_fields().items():
                if callable(value):
                    funs.setdefault(key, []).append(name)
                elif key not in VOLATILE_FIELDS:
                    fields[key] = value
            plugins[name] = fields
        return CachedSpecModule(
            modname=module.modname,
            modpath=module.modpath,
            token=module.token,
            plugins=plugins,
            funs=funs,
        )

    def save(self, specs: Iterable[SpecModule], loaders: Any = None) -> bool:
        """Write the cached state when the cache is dirty.

        Parameters
        ----------
        specs:
            Freshly normalized spec modules, in load order.
        loaders:
            Trigger index to persist verbatim.

        Returns
        -------
        bool
            True if a document was written.  False when the cache was clean
            or the store could not be written; ``dirty`` then stays set.
        """
        if not self.dirty:
            return False

        state = GlobalState(
            fingerprint=self._config.fingerprint(),
            specs={spec.modname: self.strip(spec) for spec in specs},
            loaders=loaders,
        )
        try:
            self._backend.set(self._config.cache_key, self._serializer.to_json(state))
        except StorageError as exc:
            logger.warning("StateCache: could not write cached state: %s", exc.reason)
            return False
        self.dirty = False
        logger.debug("StateCache: saved %d module(s) under %r", len(state.specs), self._config.cache_key)
        return True

    # ------------------------------------------------------------------
    # Load
    # ------------------------------------------------------------------

    def load(self) -> GlobalState | None:
        """Return the cached state, or None when it cannot be trusted.

        A missing document, an unreadable store, any decode failure, and a
        configuration fingerprint mismatch all yield None.  Nothing is
        raised.

        Returns
        -------
        GlobalState | None
        """
        try:
            raw = self._backend.get(self._config.cache_key)
        except KeyError:
            logger.debug("StateCache: no cached state under %r", self._config.cache_key)
            return None
        except StorageError as exc:
            logger.warning("StateCache: ignoring unreadable cached state: %s", exc.reason)
            return None

        try:
            state = self._serializer.from_json(raw)
        except CacheDecodeError as exc:
            logger.warning("StateCache: ignoring cached state: %s", exc.reason)
            return None

        if state.fingerprint != self._config.fingerprint():
            logger.info("StateCache: configuration changed since the cache was written")
            return None
        return state

    def revive(self, cached: CachedSpecModule, loader: ModuleLoader) -> SpecModule:
        """Rebuild a spec module from its cached projection.

        No spec source is executed.  Each hook marker becomes a
        ``DeferredHook``; all of them share one ``ReloadHandle`` so the
        module is reloaded at most once, on the first hook call.

        Parameters
        ----------
        cached:
            The cached projection.
        loader:
            Full module loader used by the deferred hooks.

        Returns
        -------
        SpecModule
            The revived module.

        Raises
        ------
        CacheDecodeError
            If a cached plugin entry is not a valid record.
        """
        module = SpecModule(
            modname=cached.modname,
            modpath=cached.modpath,
            plugins=Registry(self._config),
            token=cached.token,
        )
        for name, fields in cached.plugins.items():
            try:
                plugin = PluginRecord.model_validate(fields)
            except ValidationError as exc:
                raise CacheDecodeError(f"invalid plugin {name!r} in {cached.modname!r}") from exc
            if plugin.name is None:
                plugin.name = name
            module.plugins.merge(plugin)

        handle = ReloadHandle(cached.modname, cached.modpath, loader)
        for field, names in cached.funs.items():
            for name in names:
                plugin = module.plugins.get(name)
                if plugin is None:
                    raise CacheDecodeError(f"hook marker for unknown plugin {name!r} in {cached.modname!r}")
                setattr(plugin, field, DeferredHook(handle, field, name))
        return module

    def clear(self) -> bool:
        """Delete the cached document.  Returns False when nothing was deleted."""
        try:
            self._backend.delete(self._config.cache_key)
        except KeyError:
            return False
        except StorageError as exc:
            logger.warning("StateCache: could not delete cached state: %s", exc.reason)
            return False
        return True

    def __repr__(self) -> str:
        return f"StateCache(backend={self._backend!r}, dirty={self.dirty})"
