"""The live event source this relay configures.

The real source (an HTTP streaming connection) is an external
collaborator.  This module defines the ``LiveSource`` protocol the
synchronization driver depends on, and ``LocalLiveSource``, an in-process
source whose records and errors are injected by the caller.  It is used
by the terminal session and the tests.

The source owns its own reconnection policy; nothing here retries.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable
from typing import Any, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

RecordCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class LiveSourceError(RuntimeError):
    """A connection or runtime failure reported by the live source."""


@runtime_checkable
class LiveSource(Protocol):
    """What the driver needs from a live source."""

    def reconfigure(self, document: dict[str, Any]) -> None:
        """Apply a new subscription document."""
        ...

    def on_record(self, callback: RecordCallback) -> None:
        ...

    def on_error(self, callback: ErrorCallback) -> None:
        ...


class LocalLiveSource:
    """In-process live source.

    Keeps every configuration it was given (``history``) and forwards
    injected records and errors to the registered callbacks.
    """

    def __init__(self) -> None:
        self._record_callbacks: list[RecordCallback] = []
        self._error_callbacks: list[ErrorCallback] = []
        self.history: list[dict[str, Any]] = []

    @property
    def configuration(self) -> dict[str, Any] | None:
        """The most recently applied document, if any."""
        return copy.deepcopy(self.history[-1]) if self.history else None

    @property
    def reconfigure_count(self) -> int:
        return len(self.history)

    def reconfigure(self, document: dict[str, Any]) -> None:
        self.history.append(copy.deepcopy(document))
        logger.info("Live source reconfigured (%d)", len(self.history))

    def on_record(self, callback: RecordCallback) -> None:
        self._record_callbacks.append(callback)

    def on_error(self, callback: ErrorCallback) -> None:
        self._error_callbacks.append(callback)

    def emit(self, record: Any) -> None:
        """Deliver *record* to every record callback."""
        for callback in list(self._record_callbacks):
            callback(record)

    def fail(self, error: BaseException | str) -> None:
        """Deliver *error* to every error callback."""
        if isinstance(error, str):
            error = LiveSourceError(error)
        logger.warning("Live source error: %s", error)
        for callback in list(self._error_callbacks):
            callback(error)
