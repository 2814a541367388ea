"""Output stages between record arrival and broadcast.

``PassThroughStage`` forwards every line at once.  ``TimeWindowBatchStage``
collects lines and emits them as one newline-joined message once the
window that opened with the first line has elapsed, whether or not more
lines arrive.  Expiry is driven by a timer armed when the window opens;
``tick()`` lets a caller poll the window instead.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

Emit = Callable[[str], None]
# schedule(delay_seconds, callback) -> cancel
Schedule = Callable[[float, Callable[[], None]], Callable[[], None]]

PASSTHROUGH = "passthrough"
BATCH = "batch"


class OutputStage(Protocol):
    """Protocol shared by every output stage."""

    def push(self, line: str) -> None:
        ...

    def tick(self) -> None:
        """Emit anything whose time has come."""
        ...

    def flush(self) -> None:
        ...

    def close(self) -> None:
        ...


class PassThroughStage:
    """Emits every line immediately."""

    def __init__(self, emit: Emit) -> None:
        self._emit = emit

    def push(self, line: str) -> None:
        self._emit(line)

    def tick(self) -> None:
        pass

    def flush(self) -> None:
        pass

    def close(self) -> None:
        pass


def thread_timer(delay: float, callback: Callable[[], None]) -> Callable[[], None]:
    """Run *callback* once on a daemon timer thread after *delay* seconds."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.name = "connectrelay-batch-window"
    timer.start()
    return timer.cancel


class TimeWindowBatchStage:
    """Batches lines and flushes when the window has elapsed.

    Parameters
    ----------
    emit:
        Receives each flushed batch.
    window_ms:
        Window length in milliseconds.
    clock:
        Monotonic clock in seconds, used by :meth:`tick`.  Injectable for
        tests.
    schedule:
        Arms the expiry of each window.  Defaults to a daemon
        ``threading.Timer``.  ``None`` disables timers; the caller then
        drives expiry with :meth:`tick`.
    """

    def __init__(
        self,
        emit: Emit,
        window_ms: int = 1000,
        clock: Callable[[], float] = time.monotonic,
        schedule: Optional[Schedule] = thread_timer,
    ) -> None:
        if window_ms <= 0:
            raise ValueError(f"window_ms must be positive, got {window_ms}")
        self._emit = emit
        self._window = window_ms / 1000.0
        self._clock = clock
        self._schedule = schedule
        self._lock = threading.RLock()
        self._pending: list[str] = []
        self._opened_at: float | None = None
        self._generation = 0
        self._cancel: Callable[[], None] | None = None

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def push(self, line: str) -> None:
        with self._lock:
            now = self._clock()
            if self._opened_at is None:
                self._open(now)
            self._pending.append(line)
            if now - self._opened_at >= self._window:
                self.flush()

    def tick(self) -> None:
        with self._lock:
            if self._opened_at is not None and self._clock() - self._opened_at >= self._window:
                self.flush()

    def flush(self) -> None:
        with self._lock:
            if self._cancel is not None:
                self._cancel()
                self._cancel = None
            self._opened_at = None
            if not self._pending:
                return
            batch = "\n".join(self._pending)
            logger.debug("Flushing batch of %d lines", len(self._pending))
            self._pending.clear()
            self._emit(batch)

    def close(self) -> None:
        self.flush()

    def _open(self, now: float) -> None:
        self._opened_at = now
        self._generation += 1
        if self._schedule is not None:
            generation = self._generation
            self._cancel = self._schedule(self._window, lambda: self._expire(generation))

    def _expire(self, generation: int) -> None:
        # A timer that lost the race with flush() must not cut a newer window short.
        with self._lock:
            if generation == self._generation and self._opened_at is not None:
                self._cancel = None
                self.flush()


def build_output_stage(kind: str, emit: Emit, *, window_ms: int = 1000) -> OutputStage:
    """Build the output stage named by *kind* (``passthrough`` or ``batch``)."""
    if kind == PASSTHROUGH:
        return PassThroughStage(emit)
    if kind == BATCH:
        return TimeWindowBatchStage(emit, window_ms=window_ms)
    raise ValueError(f"Unknown output stage: {kind!r}")
