"""Unit tests for spec_registry.cli.main.

Uses Click's test runner (CliRunner) against a temporary spec tree and
package path described by a YAML configuration file.
"""
from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from spec_registry.cli import main as cli_main
from spec_registry.cli.main import _format_value, _make_backend, cli


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli_main.console, "width", 200)


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture()
def workspace(tmp_path: Path) -> Path:
    specs = tmp_path / "specs"
    (specs / "plugins").mkdir(parents=True)
    (specs / "plugins.yaml").write_text("- x/core\n")
    (specs / "plugins" / "ui.yaml").write_text(
        "- identifier: x/theme\n  opt: false\n- x/statusline\n"
    )
    (tmp_path / "pack" / "start" / "theme").mkdir(parents=True)
    (tmp_path / "pack" / "opt" / "leftover").mkdir(parents=True)
    return tmp_path


@pytest.fixture()
def config_file(workspace: Path) -> Path:
    path = workspace / "config.yaml"
    path.write_text(
        f"spec_root: {workspace / 'specs'}\n"
        f"package_path: {workspace / 'pack'}\n"
    )
    return path


def _invoke(runner: CliRunner, config_file: Path, *args: str, storage_dir: Path | None = None):
    options = ["--config", str(config_file)]
    if storage_dir is None:
        options += ["--storage", "memory"]
    else:
        options += ["--storage", "filesystem", "--storage-dir", str(storage_dir)]
    return runner.invoke(cli, [*options, *args])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestMakeBackend:
    def test_memory_backend(self) -> None:
        from spec_registry.storage.memory import InMemoryBackend

        assert isinstance(_make_backend("memory", None, None), InMemoryBackend)

    def test_filesystem_backend(self, tmp_path: Path) -> None:
        from spec_registry.storage.filesystem import FilesystemBackend

        assert isinstance(_make_backend("filesystem", None, str(tmp_path)), FilesystemBackend)

    def test_sqlite_backend(self, tmp_path: Path) -> None:
        from spec_registry.storage.sqlite import SQLiteBackend

        backend = _make_backend("sqlite", str(tmp_path / "cache.db"), None)
        assert isinstance(backend, SQLiteBackend)


class TestFormatValue:
    def test_none(self) -> None:
        assert _format_value(None) == "-"

    def test_list(self) -> None:
        assert _format_value(["a", "b"]) == "a, b"

    def test_empty_list(self) -> None:
        assert _format_value([]) == "-"


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------


class TestVersionCommand:
    def test_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--storage", "memory", "version"])
        assert result.exit_code == 0
        assert "spec-registry" in result.output


class TestListCommand:
    def test_lists_plugins(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "list")
        assert result.exit_code == 0, result.output
        for name in ("core", "theme", "statusline", "lazy.nvim"):
            assert name in result.output
        assert "Cache updated." in result.output

    def test_json_output(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "list", "--json-output", "--no-save")
        assert result.exit_code == 0, result.output
        assert '"theme"' in result.output
        assert '"installed": true' in result.output
        assert "Cache updated." not in result.output

    def test_second_run_uses_cache(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        storage = tmp_path / "cache"
        first = _invoke(runner, config_file, "list", storage_dir=storage)
        second = _invoke(runner, config_file, "list", storage_dir=storage)
        assert "Cache updated." in first.output
        assert second.exit_code == 0
        assert "Cache updated." not in second.output
        assert "statusline" in second.output

    def test_failing_module_is_reported(self, runner: CliRunner, config_file: Path, workspace: Path) -> None:
        (workspace / "specs" / "plugins" / "broken.yaml").write_text("- identifier: 5\n")
        result = _invoke(runner, config_file, "list")
        assert result.exit_code == 0
        assert "Failed to load" in result.output
        assert "plugins.broken" in result.output

    def test_no_plugins(self, runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "config.yaml"
        config.write_text(f"spec_root: {tmp_path}\npackage_path: {tmp_path / 'pack'}\nroot_module: none\n")
        result = _invoke(runner, config, "list", "--no-save")
        assert result.exit_code == 0
        assert "No plugins declared." in result.output


class TestCleanCommand:
    def test_reports_orphans(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "clean")
        assert result.exit_code == 0, result.output
        assert "leftover" in result.output

    def test_nothing_to_clean(self, runner: CliRunner, config_file: Path, workspace: Path) -> None:
        (workspace / "pack" / "opt" / "leftover").rmdir()
        result = _invoke(runner, config_file, "clean")
        assert "Nothing to clean." in result.output


class TestCacheCommands:
    def test_show_without_cache(self, runner: CliRunner, config_file: Path) -> None:
        result = _invoke(runner, config_file, "cache", "show")
        assert result.exit_code == 0
        assert "No usable cached state." in result.output

    def test_show_after_list(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        storage = tmp_path / "cache"
        _invoke(runner, config_file, "list", storage_dir=storage)
        result = _invoke(runner, config_file, "cache", "show", storage_dir=storage)
        assert result.exit_code == 0, result.output
        assert "plugins" in result.output

    def test_clear(self, runner: CliRunner, config_file: Path, tmp_path: Path) -> None:
        storage = tmp_path / "cache"
        _invoke(runner, config_file, "list", storage_dir=storage)
        assert "Cache cleared." in _invoke(runner, config_file, "cache", "clear", storage_dir=storage).output
        second = _invoke(runner, config_file, "cache", "clear", storage_dir=storage)
        assert "No cached state to clear." in second.output
