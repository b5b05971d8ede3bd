"""Registry configuration.

All options that influence how specifications are resolved live on a single
pydantic model.  The model's structural fingerprint is stored next to the
cached registry so that a configuration change invalidates the cache.

Classes
-------
- LocalPluginsConfig  — local-path override patterns
- RegistryConfig      — top-level options

Functions
---------
- load_config  — read a ``RegistryConfig`` from a YAML file
"""
from __future__ import annotations

import hashlib
import json
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

_DEFAULT_HOME: Path = Path.home() / ".spec-registry"


class LocalPluginsConfig(BaseModel):
    """Identifiers matching any of ``patterns`` resolve to a local checkout.

    Parameters
    ----------
    patterns:
        Plain substrings tested against each plugin identifier.  The first
        match wins.
    path:
        Base directory holding local checkouts.  The plugin's uri becomes
        ``<path>/<name>``.
    """

    patterns: list[str] = Field(default_factory=list)
    path: str = str(Path.home() / "projects")

    model_config = {"frozen": False}


class RegistryConfig(BaseModel):
    """Options for spec resolution, install scanning, and caching.

    Parameters
    ----------
    root_module:
        Logical name of the root spec module.  Sibling modules are
        discovered as ``<root_module>.<name>``.
    spec_root:
        Directory containing the root spec file and the sibling directory.
    package_path:
        Directory with the ``opt`` and ``start`` install categories.
    opt:
        Default category for plugins that do not set ``opt`` explicitly.
    default_host:
        Base URL used to derive a plugin's uri from its identifier.
    bootstrap_identifier:
        Identifier of the manager's own entry, injected into the root module
        when it is not declared there.
    cache_key:
        Key under which the whole cached state is stored.
    local:
        Local-path override settings.
    """

    root_module: str = "plugins"
    spec_root: str = str(_DEFAULT_HOME / "specs")
    package_path: str = str(_DEFAULT_HOME / "pack")
    opt: bool = True
    default_host: str = "https://github.com"
    bootstrap_identifier: str = "folke/lazy.nvim"
    cache_key: str = "cache.state"
    local: LocalPluginsConfig = Field(default_factory=LocalPluginsConfig)

    model_config = {"frozen": False}

    def fingerprint(self) -> str:
        """Return the SHA-256 digest of this configuration's canonical JSON.

        Returns
        -------
        str
            64-character lowercase hex digest.  Two configurations with the
            same field values always produce the same digest.
        """
        canonical_json = json.dumps(self.model_dump(mode="json"), sort_keys=True)
        return hashlib.sha256(canonical_json.encode()).hexdigest()


def load_config(path: str | Path) -> RegistryConfig:
    """Read a ``RegistryConfig`` from a YAML document.

    An empty document yields the default configuration.

    Parameters
    ----------
    path:
        Path to the YAML file.

    Returns
    -------
    RegistryConfig
        The validated configuration.
    """
    raw = Path(path).read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    return RegistryConfig.model_validate(data)
