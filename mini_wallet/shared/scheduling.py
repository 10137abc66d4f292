"""Timer helpers shared by the session refresh loop and debounced inputs.

The TUI passes Textual's ``set_interval``/``set_timer`` in as schedulers; the
thread-based defaults below are used headless and in tests.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)


class TimerHandle(Protocol):
    def stop(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], TimerHandle]


class IntervalTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, interval: float, callback: Callable[[], None]):
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread = threading.Thread(target=self._run, daemon=True)

    def start(self) -> "IntervalTimer":
        self._thread.start()
        return self

    def _run(self) -> None:
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception as e:
                logger.error("Interval callback failed: %s", e)

    def stop(self) -> None:
        self._stopped.set()

    @property
    def stopped(self) -> bool:
        return self._stopped.is_set()


class DelayedCall:
    """One-shot cancellable call, a thin wrapper over ``threading.Timer``."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self._timer = threading.Timer(delay, callback)
        self._timer.daemon = True

    def start(self) -> "DelayedCall":
        self._timer.start()
        return self

    def stop(self) -> None:
        self._timer.cancel()


def start_interval(interval: float, callback: Callable[[], None]) -> TimerHandle:
    return IntervalTimer(interval, callback).start()


def start_timer(delay: float, callback: Callable[[], None]) -> TimerHandle:
    return DelayedCall(delay, callback).start()


class Debouncer:
    """Schedules ``callback`` after ``delay`` seconds of quiet.

    Every ``trigger`` cancels the pending call, if any, and schedules a new
    one, so only the last trigger in a burst fires.
    """

    def __init__(
        self,
        delay: float,
        callback: Callable[[], None],
        scheduler: Scheduler = start_timer,
    ):
        self.delay = delay
        self.callback = callback
        self.scheduler = scheduler
        self._pending: TimerHandle | None = None
        self._lock = threading.Lock()

    def trigger(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.stop()
            self._pending = self.scheduler(self.delay, self._fire)

    def _fire(self) -> None:
        with self._lock:
            self._pending = None
        self.callback()

    def cancel(self) -> None:
        with self._lock:
            if self._pending is not None:
                self._pending.stop()
                self._pending = None

    @property
    def pending(self) -> bool:
        return self._pending is not None
