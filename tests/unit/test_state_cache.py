"""Unit tests for spec_registry.cache.store.StateCache and deferred hooks."""
from __future__ import annotations

from pathlib import Path

import pytest

from spec_registry.cache.hooks import DeferredHook, HookResolutionError, ReloadHandle
from spec_registry.cache.serializer import CacheDecodeError
from spec_registry.cache.state import CachedSpecModule
from spec_registry.cache.store import StateCache
from spec_registry.config import RegistryConfig
from spec_registry.sources.base import ModuleExecutionError
from spec_registry.sources.memory import InMemoryExecutor
from spec_registry.spec.module import SpecModule
from spec_registry.storage.filesystem import FilesystemBackend
from spec_registry.storage.memory import InMemoryBackend
from spec_registry.storage.sqlite import SQLiteBackend


def setup_theme(plugin: object) -> str:
    return "configured"


@pytest.fixture()
def config() -> RegistryConfig:
    return RegistryConfig()


@pytest.fixture()
def backend() -> InMemoryBackend:
    return InMemoryBackend()


@pytest.fixture()
def executor() -> InMemoryExecutor:
    return InMemoryExecutor(
        {
            "plugins.ui": [
                {1: "x/theme", "config": setup_theme, "run": "make"},
                {1: "x/statusline", "event": "VimEnter"},
            ]
        }
    )


def _module(executor: InMemoryExecutor, config: RegistryConfig) -> SpecModule:
    return SpecModule.load("plugins.ui", "/specs/plugins/ui.py", executor, config)


def _loader(executor: InMemoryExecutor, config: RegistryConfig):
    def load(modname: str, modpath: str) -> SpecModule:
        return SpecModule.load(modname, modpath, executor, config)

    return load


# ---------------------------------------------------------------------------
# strip
# ---------------------------------------------------------------------------


class TestStateCacheStrip:
    def test_callables_become_markers(self, executor: InMemoryExecutor, config: RegistryConfig) -> None:
        cached = StateCache.strip(_module(executor, config))
        assert cached.funs == {"config": ["theme"]}
        assert "config" not in cached.plugins["theme"]
        assert cached.plugins["theme"]["run"] == "make"

    def test_volatile_fields_are_dropped(self, executor: InMemoryExecutor, config: RegistryConfig) -> None:
        module = _module(executor, config)
        theme = module.plugins["theme"]
        theme.dir = "/pack/opt/theme"
        theme.installed = True
        theme.loaded = {"start": "init"}
        theme.tasks = ["clone"]
        theme.dirty = True
        cached = StateCache.strip(module)
        for field in ("dir", "installed", "loaded", "tasks", "dirty"):
            assert field not in cached.plugins["theme"]

    def test_module_is_not_mutated(self, executor: InMemoryExecutor, config: RegistryConfig) -> None:
        module = _module(executor, config)
        module.plugins["theme"].installed = True
        StateCache.strip(module)
        assert module.plugins["theme"].config is setup_theme
        assert module.plugins["theme"].installed is True

    def test_token_and_path_are_kept(self, executor: InMemoryExecutor, config: RegistryConfig) -> None:
        cached = StateCache.strip(_module(executor, config))
        assert cached.token == "v1"
        assert cached.modpath == "/specs/plugins/ui.py"


# ---------------------------------------------------------------------------
# save / load
# ---------------------------------------------------------------------------


class TestStateCacheSaveLoad:
    def test_save_is_noop_when_clean(self, backend: InMemoryBackend, config: RegistryConfig) -> None:
        cache = StateCache(backend, config)
        assert cache.save([]) is False
        assert backend.writes == 0
        assert backend.exists(config.cache_key) is False

    def test_save_then_load(
        self, backend: InMemoryBackend, executor: InMemoryExecutor, config: RegistryConfig
    ) -> None:
        cache = StateCache(backend, config)
        cache.dirty = True
        assert cache.save([_module(executor, config)], loaders={"cmd": {"Theme": ["theme"]}}) is True
        assert cache.dirty is False

        state = StateCache(backend, config).load()
        assert state is not None
        assert list(state.specs) == ["plugins.ui"]
        assert state.loaders == {"cmd": {"Theme": ["theme"]}}

    def test_load_missing_returns_none(self, backend: InMemoryBackend, config: RegistryConfig) -> None:
        assert StateCache(backend, config).load() is None

    def test_load_corrupt_returns_none(self, backend: InMemoryBackend, config: RegistryConfig) -> None:
        backend.set(config.cache_key, "garbage{")
        assert StateCache(backend, config).load() is None

    def test_fingerprint_mismatch_returns_none(
        self, backend: InMemoryBackend, executor: InMemoryExecutor, config: RegistryConfig
    ) -> None:
        cache = StateCache(backend, config)
        cache.dirty = True
        cache.save([_module(executor, config)])
        other = RegistryConfig(default_host="https://mirror.example.org")
        assert StateCache(backend, other).load() is None

    def test_undecodable_file_is_a_miss(self, tmp_path: Path, config: RegistryConfig) -> None:
        storage = tmp_path / "cache"
        storage.mkdir()
        (storage / f"{config.cache_key}.json").write_bytes(b"\xff\xfe\x00garbage")
        assert StateCache(FilesystemBackend(storage), config).load() is None

    def test_corrupt_database_is_a_miss(self, tmp_path: Path, config: RegistryConfig) -> None:
        path = tmp_path / "cache.db"
        path.write_bytes(b"not a database at all " * 200)
        cache = StateCache(SQLiteBackend(path), config)
        assert cache.load() is None
        assert cache.clear() is False

    def test_failed_write_keeps_cache_dirty(self, tmp_path: Path, config: RegistryConfig) -> None:
        path = tmp_path / "cache.db"
        path.write_bytes(b"not a database at all " * 200)
        cache = StateCache(SQLiteBackend(path), config)
        cache.dirty = True
        assert cache.save([]) is False
        assert cache.dirty is True

    def test_clear(self, backend: InMemoryBackend, config: RegistryConfig) -> None:
        cache = StateCache(backend, config)
        assert cache.clear() is False
        cache.dirty = True
        cache.save([])
        assert cache.clear() is True
        assert cache.load() is None


# ---------------------------------------------------------------------------
# revive
# ---------------------------------------------------------------------------


class TestStateCacheRevive:
    def test_revive_does_not_execute(
        self, backend: InMemoryBackend, executor: InMemoryExecutor, config: RegistryConfig
    ) -> None:
        cached = StateCache.strip(_module(executor, config))
        executions = executor.executions["plugins.ui"]
        module = StateCache(backend, config).revive(cached, _loader(executor, config))
        assert executor.executions["plugins.ui"] == executions
        assert module.plugins.names() == ["theme", "statusline"]
        assert module.plugins["statusline"].event == "VimEnter"
        assert module.token == "v1"

    def test_hook_reloads_once(
        self, backend: InMemoryBackend, executor: InMemoryExecutor, config: RegistryConfig
    ) -> None:
        cached = StateCache.strip(_module(executor, config))
        module = StateCache(backend, config).revive(cached, _loader(executor, config))
        before = executor.executions["plugins.ui"]

        hook = module.plugins["theme"].config
        assert isinstance(hook, DeferredHook)
        assert hook("plugin") == "configured"
        assert hook("plugin") == "configured"
        assert executor.executions["plugins.ui"] == before + 1

    def test_hooks_of_one_module_share_a_handle(
        self, backend: InMemoryBackend, config: RegistryConfig
    ) -> None:
        executor = InMemoryExecutor(
            {"plugins.ui": [{1: "x/a", "config": setup_theme}, {1: "x/b", "init": setup_theme}]}
        )
        cached = StateCache.strip(_module(executor, config))
        module = StateCache(backend, config).revive(cached, _loader(executor, config))
        first = module.plugins["a"].config
        second = module.plugins["b"].init
        assert first.handle is second.handle

    def test_missing_hook_after_reload_raises(
        self, backend: InMemoryBackend, executor: InMemoryExecutor, config: RegistryConfig
    ) -> None:
        cached = StateCache.strip(_module(executor, config))
        module = StateCache(backend, config).revive(cached, _loader(executor, config))
        executor.set_spec("plugins.ui", ["x/theme"])
        with pytest.raises(HookResolutionError):
            module.plugins["theme"].config()

    def test_invalid_plugin_raises_decode_error(self, backend: InMemoryBackend, config: RegistryConfig) -> None:
        cached = CachedSpecModule(
            modname="plugins.ui", modpath="/specs/plugins/ui.py", plugins={"bad": {"opt": "maybe"}}
        )
        with pytest.raises(CacheDecodeError):
            StateCache(backend, config).revive(cached, lambda modname, modpath: None)

    def test_marker_for_unknown_plugin_raises(self, backend: InMemoryBackend, config: RegistryConfig) -> None:
        cached = CachedSpecModule(
            modname="plugins.ui",
            modpath="/specs/plugins/ui.py",
            plugins={"a": {"identifier": "x/a", "name": "a"}},
            funs={"config": ["ghost"]},
        )
        with pytest.raises(CacheDecodeError):
            StateCache(backend, config).revive(cached, lambda modname, modpath: None)


class TestReloadHandle:
    def test_loads_lazily_and_once(self) -> None:
        calls: list[str] = []

        def loader(modname: str, modpath: str) -> SpecModule:
            calls.append(modname)
            return SpecModule(modname=modname, modpath=modpath)

        handle = ReloadHandle("plugins.ui", "/p", loader)
        assert handle.loaded is False
        first = handle.get()
        assert handle.get() is first
        assert calls == ["plugins.ui"]
        assert handle.loaded is True

    def test_failed_reload_is_not_retried(self) -> None:
        calls: list[str] = []

        def loader(modname: str, modpath: str) -> SpecModule:
            calls.append(modname)
            raise ModuleExecutionError(modname, "source removed")

        handle = ReloadHandle("plugins.ui", "/p", loader)
        hook = DeferredHook(handle, "config", "theme")
        for _ in range(3):
            with pytest.raises(ModuleExecutionError, match="source removed"):
                hook()
        assert calls == ["plugins.ui"]
        assert handle.loaded is False
