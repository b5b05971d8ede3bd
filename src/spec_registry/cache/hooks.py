"""Deferred hooks for revived spec modules.

A revived module carries no real hook functions.  Each hook is replaced by
a ``DeferredHook`` that, when first called, reloads the owning module once
through the normal execution path and then forwards to the real hook.
All deferred hooks of one module share a ``ReloadHandle``, so the module is
executed at most once per process no matter which hook fires first.

Classes
-------
- HookResolutionError  — reloaded module no longer defines the hook
- ReloadHandle         — memoized "load this module now" operation
- DeferredHook         — callable forwarding to the reloaded module's hook
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable

from spec_registry.sources.base import ModuleExecutionError
from spec_registry.spec.errors import SpecValidationError

if TYPE_CHECKING:
    from spec_registry.spec.module import SpecModule

logger = logging.getLogger(__name__)

ModuleLoader = Callable[[str, str], "SpecModule"]


class HookResolutionError(LookupError):
    """Raised when a deferred hook has no counterpart after reloading."""

    def __init__(self, modname: str, plugin_name: str, field: str) -> None:
        self.modname = modname
        self.plugin_name = plugin_name
        self.field = field
        super().__init__(
            f"Module {modname!r} no longer defines {field!r} for plugin {plugin_name!r}."
        )


class ReloadHandle:
    """Loads one spec module on demand and remembers the result.

    Parameters
    ----------
    modname:
        Logical module name.
    modpath:
        Filesystem path of the module source.
    loader:
        Callable performing the full load, typically ``SpecModule.load``
        bound to an executor and configuration.
    """

    def __init__(self, modname: str, modpath: str, loader: ModuleLoader) -> None:
        self.modname = modname
        self.modpath = modpath
        self._loader = loader
        self._module: SpecModule | None = None
        self._error: ModuleExecutionError | SpecValidationError | None = None

    @property
    def loaded(self) -> bool:
        return self._module is not None

    def get(self) -> SpecModule:
        """Return the reloaded module, loading it on the first call.

        A failed reload is remembered as well: later calls raise the same
        error without running the module again.

        Raises
        ------
        ModuleExecutionError
            If the module failed to execute.
        SpecValidationError
            If the reloaded spec failed to normalize.
        """
        if self._error is not None:
            raise self._error
        if self._module is None:
            logger.debug("ReloadHandle: reloading %r to resolve a deferred hook", self.modname)
            try:
                self._module = self._loader(self.modname, self.modpath)
            except (ModuleExecutionError, SpecValidationError) as exc:
                logger.error("ReloadHandle: reloading %r failed: %s", self.modname, exc)
                self._error = exc
                raise
        return self._module

    def __repr__(self) -> str:
        return f"ReloadHandle(modname={self.modname!r}, loaded={self.loaded})"


class DeferredHook:
    """Stand-in for a hook that was stripped from the cache.

    Parameters
    ----------
    handle:
        Shared reload handle of the owning module.
    field:
        Hook field name, such as ``"config"``.
    plugin_name:
        Name of the plugin the hook belongs to.
    """

    def __init__(self, handle: ReloadHandle, field: str, plugin_name: str) -> None:
        self.handle = handle
        self.field = field
        self.plugin_name = plugin_name

    def resolve(self) -> Callable[..., Any]:
        """Return the real hook from the reloaded module.

        Raises
        ------
        HookResolutionError
            If the reloaded module lacks the plugin or the hook is not
            callable.
        """
        module = self.handle.get()
        plugin = module.plugins.get(self.plugin_name)
        hook = getattr(plugin, self.field, None) if plugin is not None else None
        if not callable(hook):
            raise HookResolutionError(self.handle.modname, self.plugin_name, self.field)
        return hook

    def __call__(self, *args: Any, **kwargs: Any) -> Any:
        return self.resolve()(*args, **kwargs)

    def __repr__(self) -> str:
        return (
            f"DeferredHook(module={self.handle.modname!r}, "
            f"plugin={self.plugin_name!r}, field={self.field!r})"
        )
