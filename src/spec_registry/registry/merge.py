"""Cross-module merge of per-module registries.

Functions
---------
- merge_specs  — fold spec modules into one global registry
"""
from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from spec_registry.config import RegistryConfig
from spec_registry.registry.registry import Registry

if TYPE_CHECKING:
    from spec_registry.spec.module import SpecModule


def merge_specs(specs: Iterable[SpecModule], config: RegistryConfig | None = None) -> Registry:
    """Fold the plugins of ``specs`` into a single registry.

    Modules are folded in the given order, which is never re-sorted.  A
    later module overrides an earlier one field by field for plugins of
    the same name.  Per-module records are not mutated by the merge.

    Parameters
    ----------
    specs:
        Spec modules, root module first.
    config:
        Configuration attached to the returned registry.

    Returns
    -------
    Registry
        The global registry.
    """
    merged = Registry(config)
    for spec in specs:
        for plugin in spec.plugins.values():
            merged.merge(plugin)
    return merged
