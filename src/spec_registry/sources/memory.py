"""In-memory module sources.

Useful for tests and for hosts that build specs programmatically.

Classes
-------
- StaticDiscovery   — returns a fixed module list
- InMemoryExecutor  — serves raw specs from a dict with version tokens
"""
from __future__ import annotations

from collections import Counter

from spec_registry.sources.base import ModuleDiscovery, ModuleExecutionError, ModuleExecutor


class StaticDiscovery(ModuleDiscovery):
    """Discovery over a fixed, caller-ordered module list.

    Parameters
    ----------
    modules:
        ``(modname, modpath)`` pairs, returned in the given order.
    """

    def __init__(self, modules: list[tuple[str, str]]) -> None:
        self._modules = list(modules)

    def discover(self) -> list[tuple[str, str]]:
        return list(self._modules)

    def __repr__(self) -> str:
        return f"StaticDiscovery(modules={len(self._modules)})"


class InMemoryExecutor(ModuleExecutor):
    """Serves raw spec values keyed by module name.

    Every ``set_spec`` call bumps the module's version, which makes any
    previously issued freshness token stale.  ``executions`` counts how
    often each module was executed.

    Parameters
    ----------
    specs:
        Optional initial mapping of module name to raw spec value.
    """

    def __init__(self, specs: dict[str, object] | None = None) -> None:
        self._specs: dict[str, object] = {}
        self._versions: Counter[str] = Counter()
        self.executions: Counter[str] = Counter()
        for modname, spec in (specs or {}).items():
            self.set_spec(modname, spec)

    def set_spec(self, modname: str, spec: object) -> None:
        """Store ``spec`` for ``modname`` and bump its version."""
        self._specs[modname] = spec
        self._versions[modname] += 1

    def remove_spec(self, modname: str) -> None:
        """Forget ``modname``; later executions raise ``ModuleExecutionError``."""
        self._specs.pop(modname, None)
        self._versions.pop(modname, None)

    # ------------------------------------------------------------------
    # ModuleExecutor interface
    # ------------------------------------------------------------------

    def execute(self, modname: str, modpath: str) -> object:
        """Return the stored spec for ``modname``.

        Raises
        ------
        ModuleExecutionError
            If no spec is stored for ``modname``.
        """
        self.executions[modname] += 1
        try:
            return self._specs[modname]
        except KeyError:
            raise ModuleExecutionError(modname, "no spec registered") from None

    def freshness(self, modname: str, modpath: str) -> str:
        """Return ``"v<n>"`` for the current version, or ``""`` when unknown."""
        if modname not in self._specs:
            return ""
        return f"v{self._versions[modname]}"

    def __repr__(self) -> str:
        return f"InMemoryExecutor(modules={len(self._specs)})"
