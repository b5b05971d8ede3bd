"""Abstract collaborators that find and execute spec modules.

The registry never reads spec source itself.  A ``ModuleDiscovery``
enumerates modules and a ``ModuleExecutor`` turns one module into a raw
spec value and reports whether its source changed since it was cached.

Classes
-------
- ModuleExecutionError  — raised when a module cannot be executed
- ModuleDiscovery       — abstract base for module enumeration
- ModuleExecutor        — abstract base for module execution
"""
from __future__ import annotations

from abc import ABC, abstractmethod


class ModuleExecutionError(RuntimeError):
    """Raised when a spec module fails to execute.

    Parameters
    ----------
    modname:
        Logical name of the failing module.
    reason:
        Description of the failure.
    """

    def __init__(self, modname: str, reason: str) -> None:
        self.modname = modname
        self.reason = reason
        super().__init__(f"Failed to execute spec module {modname!r}: {reason}")


class ModuleDiscovery(ABC):
    """Enumerates the spec modules to load."""

    @abstractmethod
    def discover(self) -> list[tuple[str, str]]:
        """Return ``(modname, modpath)`` pairs.

        The root module comes first.  The returned order is authoritative:
        callers merge modules in exactly this order.

        Returns
        -------
        list[tuple[str, str]]
            Logical module names paired with their filesystem paths.
        """


class ModuleExecutor(ABC):
    """Executes spec modules and tracks their freshness.

    Implementations must be safe for sequential (single-threaded) use.
    """

    @abstractmethod
    def execute(self, modname: str, modpath: str) -> object:
        """Run the module and return its raw spec value.

        Parameters
        ----------
        modname:
            Logical module name.
        modpath:
            Filesystem path of the module source.

        Returns
        -------
        object
            The raw spec: a string, list, or mapping.

        Raises
        ------
        ModuleExecutionError
            If the module cannot be read or raises while running.
        """

    @abstractmethod
    def freshness(self, modname: str, modpath: str) -> str:
        """Return a token identifying the current version of the module source.

        Parameters
        ----------
        modname:
            Logical module name.
        modpath:
            Filesystem path of the module source.

        Returns
        -------
        str
            Opaque token.  An empty string means the source is unavailable.
        """

    def is_stale(self, modname: str, modpath: str, token: str) -> bool:
        """Return True when the module changed since ``token`` was taken.

        Parameters
        ----------
        modname:
            Logical module name.
        modpath:
            Filesystem path of the module source.
        token:
            A token previously returned by ``freshness``.

        Returns
        -------
        bool
        """
        current = self.freshness(modname, modpath)
        return not current or current != token
