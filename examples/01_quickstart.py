#!/usr/bin/env python3
"""Example: spec-registry quickstart

Resolve a small spec, save the cache, then resolve again from the cache
and watch a deferred hook reload its module on first use.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install spec-registry
"""
from __future__ import annotations

import spec_registry
from spec_registry import (
    InMemoryBackend,
    InMemoryExecutor,
    PluginManager,
    RegistryConfig,
    StaticDiscovery,
)


def configure_theme(plugin: object) -> str:
    return "theme configured"


def main() -> None:
    print(f"spec-registry version: {spec_registry.__version__}")

    config = RegistryConfig(package_path="/tmp/spec-registry-example")
    executor = InMemoryExecutor(
        {
            "plugins": [
                "owner/statusline",
                {1: "owner/theme", "config": configure_theme, "opt": False},
                {1: "owner/finder", "requires": ["owner/finder-core"], "cmd": "Find"},
                {1: "owner/legacy", "enabled": False},
            ],
        }
    )
    discovery = StaticDiscovery([("plugins", "<memory>")])
    backend = InMemoryBackend()

    # Step 1: First run executes the spec and writes the cache
    manager = PluginManager(config, discovery, executor, backend)
    registry = manager.load()
    manager.save()
    print(f"Resolved: {registry.names()}")
    print(f"finder requires: {registry['finder'].requires}")

    # Step 2: Second run revives from the cache without executing the spec
    revived = PluginManager(config, discovery, executor, backend)
    registry = revived.load()
    print(f"Executions so far: {executor.executions['plugins']}")

    # Step 3: The deferred hook reloads the module once, then forwards
    print(registry["theme"].config(registry["theme"]))
    print(f"Executions after hook: {executor.executions['plugins']}")


if __name__ == "__main__":
    main()
