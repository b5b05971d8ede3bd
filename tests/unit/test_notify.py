"""Unit tests for spec_registry.notify.IdleNotifier."""
from __future__ import annotations

import logging

import pytest

from spec_registry.notify import IdleNotifier


class TestIdleNotifier:
    def test_schedule_does_not_deliver(self) -> None:
        received: list[str] = []
        notifier = IdleNotifier(sink=received.append)
        notifier.schedule("Reloading plugins.ui")
        assert received == []
        assert notifier.pending == ["Reloading plugins.ui"]
        assert len(notifier) == 1

    def test_run_idle_delivers_in_order(self) -> None:
        received: list[str] = []
        notifier = IdleNotifier(sink=received.append)
        notifier.schedule("first")
        notifier.schedule("second")
        assert notifier.run_idle() == 2
        assert received == ["first", "second"]
        assert len(notifier) == 0

    def test_run_idle_on_empty_queue(self) -> None:
        assert IdleNotifier(sink=lambda message: None).run_idle() == 0

    def test_failing_sink_does_not_stop_delivery(self, caplog: pytest.LogCaptureFixture) -> None:
        received: list[str] = []

        def sink(message: str) -> None:
            if message == "bad":
                raise RuntimeError("sink down")
            received.append(message)

        notifier = IdleNotifier(sink=sink)
        notifier.schedule("bad")
        notifier.schedule("good")
        with caplog.at_level(logging.ERROR, logger="spec_registry.notify"):
            assert notifier.run_idle() == 2
        assert received == ["good"]
        assert "failed to deliver" in caplog.text

    def test_default_sink_logs(self, caplog: pytest.LogCaptureFixture) -> None:
        notifier = IdleNotifier()
        notifier.schedule("Reloading plugins")
        with caplog.at_level(logging.INFO, logger="spec_registry.notify"):
            notifier.run_idle()
        assert "Reloading plugins" in caplog.text
