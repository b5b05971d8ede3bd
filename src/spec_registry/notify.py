"""Fire-and-forget notifications delivered on the host's idle tick.

``schedule`` never blocks and never raises for delivery problems; the host
calls ``run_idle`` when it has nothing else to do.

Classes
-------
- IdleNotifier  — queue of pending messages and their sink
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Callable

logger = logging.getLogger(__name__)


def _log_sink(message: str) -> None:
    logger.info("%s", message)


class IdleNotifier:
    """Queues messages and delivers them later.

    Parameters
    ----------
    sink:
        Callable receiving each message.  Defaults to logging at INFO.
    """

    def __init__(self, sink: Callable[[str], None] | None = None) -> None:
        self._sink = sink or _log_sink
        self._pending: deque[str] = deque()

    def schedule(self, message: str) -> None:
        """Queue ``message`` for delivery on the next idle tick."""
        self._pending.append(message)

    def run_idle(self) -> int:
        """Deliver every queued message.

        A failing sink is logged and does not stop the remaining messages.

        Returns
        -------
        int
            Number of messages taken from the queue.
        """
        delivered = 0
        while self._pending:
            message = self._pending.popleft()
            delivered += 1
            try:
                self._sink(message)
            except Exception:  # noqa: BLE001
                logger.exception("IdleNotifier: failed to deliver %r", message)
        return delivered

    @property
    def pending(self) -> list[str]:
        return list(self._pending)

    def __len__(self) -> int:
        return len(self._pending)
