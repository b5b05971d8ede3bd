"""Load/save cycle for the plugin registry.

Provides ``PluginManager``, the facade that discovers spec modules,
executes or revives them, merges them into one registry, reconciles the
registry with the install directories, and persists the cache.

Classes
-------
- PluginManager  — orchestrates one load cycle and the following save
"""
from __future__ import annotations

import logging
from typing import Any, Callable

from spec_registry.cache.serializer import CacheDecodeError
from spec_registry.cache.state import GlobalState
from spec_registry.cache.store import StateCache
from spec_registry.config import RegistryConfig
from spec_registry.install.scanner import InstallRecord, InstallScanner
from spec_registry.notify import IdleNotifier
from spec_registry.registry.merge import merge_specs
from spec_registry.registry.registry import Registry
from spec_registry.sources.base import ModuleDiscovery, ModuleExecutionError, ModuleExecutor
from spec_registry.spec.errors import SpecValidationError
from spec_registry.spec.module import SpecModule
from spec_registry.storage.base import StorageBackend

logger = logging.getLogger(__name__)

SpecLoader = Callable[[str, str], SpecModule]


class PluginManager:
    """Resolve the plugin registry, reusing the cache when possible.

    Parameters
    ----------
    config:
        Active configuration.
    discovery:
        Enumerates spec modules, root module first.
    executor:
        Executes spec modules and reports their freshness.
    backend:
        Key/value store for the cache document.
    notifier:
        Receives "Reloading <module>" messages for stale modules.
        Defaults to an ``IdleNotifier`` that logs.
    scanner:
        Install state scanner.  Defaults to one built from ``config``.

    Attributes
    ----------
    plugins:
        Merged registry from the last ``load``.
    loaders:
        Trigger index owned by the activation layer.  Restored from the
        cache when no module was recomputed, and persisted by ``save``.
    errors:
        Module name to failure message for modules excluded from the last
        load.
    to_clean:
        Orphaned installs from the last ``update_state(check_clean=True)``.
    """

    def __init__(
        self,
        config: RegistryConfig,
        discovery: ModuleDiscovery,
        executor: ModuleExecutor,
        backend: StorageBackend,
        *,
        notifier: IdleNotifier | None = None,
        scanner: InstallScanner | None = None,
    ) -> None:
        self._config = config
        self._discovery = discovery
        self._executor = executor
        self.cache = StateCache(backend, config)
        self.notifier = notifier if notifier is not None else IdleNotifier()
        self.scanner = scanner if scanner is not None else InstallScanner(config)

        self.plugins: Registry = Registry(config)
        self.loaders: Any = None
        self.errors: dict[str, str] = {}
        self.to_clean: list[InstallRecord] = []

    # ------------------------------------------------------------------
    # Module loading
    # ------------------------------------------------------------------

    def load_module(self, modname: str, modpath: str) -> SpecModule:
        """Execute and normalize one module through the normal path."""
        return SpecModule.load(modname, modpath, self._executor, self._config)

    def specs(self, loader: SpecLoader | None = None) -> list[SpecModule]:
        """Load every discovered module, in discovery order.

        A module whose execution or normalization fails is logged, recorded
        in ``errors``, and left out.  The other modules are unaffected.

        Parameters
        ----------
        loader:
            Per-module loader.  Defaults to ``load_module``.

        Returns
        -------
        list[SpecModule]
            Successfully loaded modules.
        """
        loader = loader or self.load_module
        self.errors = {}
        specs: list[SpecModule] = []
        for modname, modpath in self._discovery.discover():
            try:
                specs.append(loader(modname, modpath))
            except (ModuleExecutionError, SpecValidationError) as exc:
                logger.error("Failed to load %s: %s", modname, exc)
                self.errors[modname] = str(exc)
        return specs

    # ------------------------------------------------------------------
    # Load cycle
    # ------------------------------------------------------------------

    def load(self) -> Registry:
        """Resolve the registry, reviving cached modules where possible.

        The cache is used only when it decodes cleanly, was written under
        the same configuration fingerprint, and every cached module
        revives; otherwise every module is recomputed.  A module that is
        missing from the cache or whose source is stale is recomputed on
        its own and a reload notice is scheduled.  Any recomputation marks
        the cache dirty; when none was needed the cached trigger index is
        restored.

        Returns
        -------
        Registry
            The merged registry, with install state applied.
        """
        state = self.cache.load()
        revived: dict[str, SpecModule] = {}
        if state is not None:
            try:
                revived = {
                    modname: self.cache.revive(cached, self.load_module)
                    for modname, cached in state.specs.items()
                }
            except CacheDecodeError as exc:
                logger.warning("Discarding cached state: %s", exc.reason)
                state = None
        dirty = state is None

        def _cached_loader(modname: str, modpath: str) -> SpecModule:
            nonlocal dirty
            module = revived.get(modname)
            if module is None or self._executor.is_stale(modname, modpath, module.token):
                dirty = True
                self.notifier.schedule(f"Reloading {modname}")
                return self.load_module(modname, modpath)
            return module

        specs = self.specs(_cached_loader if state is not None else None)
        if state is not None and self._module_set_changed(state, specs):
            dirty = True

        self.plugins = merge_specs(specs, self._config)
        self.update_state()

        if dirty:
            self.cache.dirty = True
        elif state is not None:
            self.loaders = state.loaders

        logger.debug(
            "PluginManager: loaded %d plugin(s) from %d module(s) (dirty=%s)",
            len(self.plugins),
            len(specs),
            dirty,
        )
        return self.plugins

    def update_state(self, check_clean: bool = False) -> list[InstallRecord] | None:
        """Apply install state to ``plugins``; see ``InstallScanner.update_state``."""
        to_clean = self.scanner.update_state(self.plugins, check_clean=check_clean)
        if to_clean is not None:
            self.to_clean = to_clean
        return to_clean

    def save(self) -> bool:
        """Persist the cache when the last load marked it dirty.

        Every module is executed again so that the cache holds freshly
        normalized records rather than the runtime-mutated ones.

        Returns
        -------
        bool
            True if a document was written.
        """
        if not self.cache.dirty:
            return False
        return self.cache.save(self.specs(), self.loaders)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _module_set_changed(state: GlobalState, specs: list[SpecModule]) -> bool:
        return set(state.specs) != {spec.modname for spec in specs}

    def __repr__(self) -> str:
        return f"PluginManager(plugins={len(self.plugins)}, dirty={self.cache.dirty})"
