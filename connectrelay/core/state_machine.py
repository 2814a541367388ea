"""Configuration state machine, the single owner of the stream document.

Every accepted mutation publishes a deep-copied snapshot of the whole
document to subscribers, synchronously and in subscription order.
Compound edits run inside :meth:`ConfigStateMachine.transaction` so that
observers (the live source in particular) never see an intermediate
document, e.g. one with both ``start`` and ``resume_offset`` set.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, Union

from pydantic import BaseModel, ConfigDict

from connectrelay.core.paths import ABSENT, assign, delete, lookup
from connectrelay.models.stream import DEFAULT_DOCUMENT

logger = logging.getLogger(__name__)

Observer = Callable[[dict[str, Any]], None]


class SetStep(BaseModel):
    """Transaction step: set *value* at *path*."""

    model_config = ConfigDict(frozen=True)

    path: str
    value: Any


class RemoveStep(BaseModel):
    """Transaction step: remove whatever is at *path*."""

    model_config = ConfigDict(frozen=True)

    path: str


Step = Union[SetStep, RemoveStep]


class ConfigStateMachine:
    """Owns the stream configuration document.

    Parameters
    ----------
    document:
        Initial document.  Defaults to a copy of ``DEFAULT_DOCUMENT``.
        The machine keeps its own deep copy; callers never hold an alias.
    """

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        source = DEFAULT_DOCUMENT if document is None else document
        self._document: dict[str, Any] = copy.deepcopy(source)
        self._observers: list[Observer] = []
        self._depth = 0
        self._dirty = False
        self._version = 0

    @classmethod
    def from_persisted(cls, persisted: dict[str, Any] | None) -> ConfigStateMachine:
        """Build from a persisted snapshot, or the default when there is none."""
        if persisted is None:
            logger.info("No persisted stream configuration, using defaults")
        return cls(persisted)

    # ------------------------------------------------------------------
    # Observers
    # ------------------------------------------------------------------

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        """Register *observer*; return a callable that unsubscribes it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            try:
                self._observers.remove(observer)
            except ValueError:
                pass

        return _unsubscribe

    @property
    def version(self) -> int:
        """Number of change notifications emitted so far."""
        return self._version

    def _changed(self) -> None:
        if self._depth:
            self._dirty = True
            return
        self._emit()

    def _emit(self) -> None:
        self._version += 1
        logger.debug("Stream configuration v%d: %s", self._version, self._document)
        for observer in list(self._observers):
            observer(self.snapshot())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get(self, path: str) -> Any:
        """Return a copy of the value at *path*, or ``ABSENT``."""
        value = lookup(self._document, path)
        if value is ABSENT:
            return ABSENT
        return copy.deepcopy(value)

    def snapshot(self) -> dict[str, Any]:
        """Return a deep copy of the full document."""
        return copy.deepcopy(self._document)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def set(self, path: str, value: Any) -> None:
        """Replace the value at *path*, creating intermediate containers.

        Only path syntax is checked here; the meaning of *value* is the
        caller's business.
        """
        assign(self._document, path, copy.deepcopy(value))
        self._changed()

    def remove(self, path: str) -> bool:
        """Remove the value at *path*.  Notifies only if something went."""
        removed = delete(self._document, path)
        if removed:
            self._changed()
        return removed

    def reset(self, document: dict[str, Any]) -> None:
        """Replace the whole document."""
        self._document = copy.deepcopy(document)
        self._changed()

    @contextmanager
    def transaction(self) -> Iterator[ConfigStateMachine]:
        """Group mutations into one notification.

        Nested transactions coalesce into the outermost one.  If the block
        raises, the document is restored and nothing is published.
        """
        outermost = self._depth == 0
        before = copy.deepcopy(self._document) if outermost else None
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._depth -= 1
            if outermost:
                self._document = before
                self._dirty = False
                logger.debug("Transaction rolled back")
            raise
        self._depth -= 1
        if outermost and self._dirty:
            self._dirty = False
            self._emit()

    def apply(self, steps: Iterable[Step]) -> None:
        """Run *steps* in order inside a single transaction."""
        with self.transaction():
            for step in steps:
                if isinstance(step, SetStep):
                    self.set(step.path, step.value)
                elif isinstance(step, RemoveStep):
                    self.remove(step.path)
                else:
                    raise TypeError(f"Unknown transaction step: {step!r}")
