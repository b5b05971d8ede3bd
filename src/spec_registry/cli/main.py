"""CLI entry point for spec-registry.

Invoked as::

    spec-registry [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m spec_registry.cli.main

Commands
--------
- version      — Show detailed version information
- list         — Resolve the registry and list every plugin
- clean        — List installs that no plugin declares
- cache        — Cache management command group

Cache sub-commands
------------------
- cache show   — Show the modules held in the cache
- cache clear  — Delete the cached state
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

console = Console()

# ---------------------------------------------------------------------------
# Factories
# ---------------------------------------------------------------------------


def _make_backend(
    storage: str,
    db_path: str | None,
    storage_dir: str | None,
) -> object:
    """Instantiate the requested storage backend.

    Parameters
    ----------
    storage:
        Backend name: ``"memory"``, ``"filesystem"``, or ``"sqlite"``.
    db_path:
        Path to the SQLite database (used when ``storage="sqlite"``).
    storage_dir:
        Directory for the filesystem backend (used when ``storage="filesystem"``).

    Returns
    -------
    StorageBackend
        A configured storage backend instance.
    """
    from spec_registry.storage.filesystem import FilesystemBackend
    from spec_registry.storage.memory import InMemoryBackend
    from spec_registry.storage.sqlite import SQLiteBackend

    if storage == "memory":
        return InMemoryBackend()
    if storage == "filesystem":
        directory = Path(storage_dir) if storage_dir else Path.home() / ".spec-registry" / "cache"
        return FilesystemBackend(storage_dir=directory)
    if storage == "sqlite":
        db = Path(db_path) if db_path else Path.home() / ".spec-registry" / "cache.db"
        return SQLiteBackend(db_path=db)
    console.print(f"[red]Unknown storage backend: {storage!r}[/red]")
    sys.exit(1)


def _make_manager(ctx: click.Context) -> object:
    """Build a ``PluginManager`` from the root group's options."""
    from spec_registry.manager import PluginManager
    from spec_registry.notify import IdleNotifier
    from spec_registry.sources.filesystem import DirectoryDiscovery, FileExecutor

    config = ctx.obj["config"]
    return PluginManager(
        config=config,
        discovery=DirectoryDiscovery(config.spec_root, config.root_module),
        executor=FileExecutor(),
        backend=ctx.obj["backend"],
        notifier=IdleNotifier(sink=lambda message: console.print(f"[dim]{message}[/dim]")),
    )


def _report_errors(errors: dict[str, str]) -> None:
    for modname, message in errors.items():
        console.print(f"[red]Failed to load[/red] [bold]{modname}[/bold]: {message}")


def _format_value(value: object) -> str:
    if value is None:
        return "-"
    if isinstance(value, list):
        return ", ".join(str(item) for item in value) or "-"
    return str(value)


# ---------------------------------------------------------------------------
# Root group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(package_name="spec-registry")
@click.option(
    "--config",
    "config_path",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="YAML configuration file.",
)
@click.option(
    "--storage",
    default="filesystem",
    show_default=True,
    type=click.Choice(["memory", "filesystem", "sqlite"], case_sensitive=False),
    help="Cache storage backend to use.",
)
@click.option("--db-path", default=None, help="Path to SQLite database (sqlite backend).")
@click.option("--storage-dir", default=None, help="Directory for filesystem backend.")
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_path: str | None,
    storage: str,
    db_path: str | None,
    storage_dir: str | None,
    verbose: bool,
) -> None:
    """Declarative plugin spec resolution with a persistent cache"""
    from spec_registry.config import RegistryConfig, load_config

    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config"] = load_config(config_path) if config_path else RegistryConfig()
    ctx.obj["backend"] = _make_backend(storage, db_path, storage_dir)


# ---------------------------------------------------------------------------
# version
# ---------------------------------------------------------------------------


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from spec_registry import __version__

    console.print(f"[bold]spec-registry[/bold] v{__version__}")


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


@cli.command(name="list")
@click.option("--json-output", is_flag=True, help="Output raw JSON instead of a table.")
@click.option("--no-save", is_flag=True, help="Do not write the cache after loading.")
@click.pass_context
def list_command(ctx: click.Context, json_output: bool, no_save: bool) -> None:
    """Resolve the registry and list every plugin."""
    manager = _make_manager(ctx)
    registry = manager.load()
    manager.notifier.run_idle()
    _report_errors(manager.errors)

    if not no_save and manager.save():
        console.print("[dim]Cache updated.[/dim]")

    if json_output:
        data = {
            name: {
                "identifier": plugin.identifier,
                "uri": plugin.uri,
                "branch": plugin.branch,
                "dir": plugin.dir,
                "opt": plugin.opt,
                "installed": plugin.installed,
                "requires": plugin.requires or [],
            }
            for name, plugin in registry.items()
        }
        console.print_json(json.dumps(data))
        return

    if not len(registry):
        console.print("[yellow]No plugins declared.[/yellow]")
        return

    table = Table(title="Plugins", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Installed", justify="center")
    table.add_column("URI")
    table.add_column("Requires")

    for name, plugin in registry.items():
        table.add_row(
            name,
            "opt" if plugin.opt else "start",
            "[green]yes[/green]" if plugin.installed else "[red]no[/red]",
            _format_value(plugin.uri),
            _format_value(plugin.requires),
        )

    console.print(table)
    console.print(f"\n[dim]{len(registry)} plugin(s).[/dim]")


# ---------------------------------------------------------------------------
# clean
# ---------------------------------------------------------------------------


@cli.command(name="clean")
@click.pass_context
def clean_command(ctx: click.Context) -> None:
    """List installs under the package path that no plugin declares.

    Nothing is removed; the list is meant for an external cleanup step.
    """
    manager = _make_manager(ctx)
    manager.load()
    manager.notifier.run_idle()
    _report_errors(manager.errors)
    to_clean = manager.update_state(check_clean=True) or []

    if not to_clean:
        console.print("[green]Nothing to clean.[/green]")
        return

    table = Table(title="Orphaned installs", show_lines=False)
    table.add_column("Name", style="cyan")
    table.add_column("Category")
    table.add_column("Directory")
    for record in to_clean:
        table.add_row(record.name, record.category, record.dir)
    console.print(table)


# ---------------------------------------------------------------------------
# cache command group
# ---------------------------------------------------------------------------


@cli.group(name="cache")
def cache_group() -> None:
    """Cache management commands."""


@cache_group.command(name="show")
@click.pass_context
def cache_show(ctx: click.Context) -> None:
    """Show the modules held in the cache."""
    from spec_registry.cache.store import StateCache

    cache = StateCache(ctx.obj["backend"], ctx.obj["config"])
    state = cache.load()
    if state is None:
        console.print("[yellow]No usable cached state.[/yellow]")
        return

    table = Table(title="Cached modules", show_lines=False)
    table.add_column("Module", style="cyan")
    table.add_column("Path")
    table.add_column("Plugins", justify="right")
    table.add_column("Deferred hooks", justify="right")
    for modname, cached in state.specs.items():
        hooks = sum(len(names) for names in cached.funs.values())
        table.add_row(modname, cached.modpath, str(len(cached.plugins)), str(hooks))
    console.print(table)


@cache_group.command(name="clear")
@click.pass_context
def cache_clear(ctx: click.Context) -> None:
    """Delete the cached state."""
    from spec_registry.cache.store import StateCache

    cache = StateCache(ctx.obj["backend"], ctx.obj["config"])
    if cache.clear():
        console.print("[green]Cache cleared.[/green]")
    else:
        console.print("[yellow]No cached state to clear.[/yellow]")


if __name__ == "__main__":
    cli()
