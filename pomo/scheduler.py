"""Tick delivery for PomoFocus.

A scheduler owns one cancellable repeating timer and calls back once
per interval while armed. Callers that need race-free cancellation
(see PomodoroTimer) tag each arm with a generation and drop stale ticks.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

TICK_SECONDS = 1.0


class Scheduler(Protocol):
    @property
    def active(self) -> bool: ...

    def start(self, callback: Callable[[], None]) -> None: ...

    def cancel(self) -> None: ...


class ThreadScheduler:
    """Repeating timer on a daemon thread.

    cancel() only signals the worker; it never joins, so it is safe to
    call from inside a tick callback or while holding a lock the
    callback wants.
    """

    def __init__(self, interval: float = TICK_SECONDS) -> None:
        self.interval = interval
        self._lock = threading.Lock()
        self._stop: threading.Event | None = None
        self._thread: threading.Thread | None = None

    @property
    def active(self) -> bool:
        with self._lock:
            return self._stop is not None and not self._stop.is_set()

    def start(self, callback: Callable[[], None]) -> None:
        """Arm the timer, replacing any previous arm."""
        with self._lock:
            if self._stop is not None:
                self._stop.set()
            stop = threading.Event()
            thread = threading.Thread(
                target=self._run, args=(callback, stop), name="pomo-ticker", daemon=True
            )
            self._stop = stop
            self._thread = thread
        thread.start()

    def cancel(self) -> None:
        with self._lock:
            if self._stop is not None:
                self._stop.set()
            self._stop = None
            self._thread = None

    def _run(self, callback: Callable[[], None], stop: threading.Event) -> None:
        while not stop.wait(self.interval):
            try:
                callback()
            except Exception:
                logger.exception("Tick callback failed; stopping ticker")
                stop.set()
