"""SynchronizationDriver — keeps the live source in step with the document.

On every document change, in this order:

1. persist the new snapshot;
2. forward it to the live source;
3. broadcast an acknowledgement.

Persisting first means a crash between steps leaves the store matching
the last *attempted* reconfiguration.  If persisting fails the remaining
steps are skipped and ``PersistenceError`` propagates.

Independently, live-source records go through the projection engine and
the output stage to the dispatcher, and live-source errors are broadcast
verbatim.  Field selector changes are persisted under their own key and
never touch the live source.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from connectrelay.core.selector import FieldSelector
from connectrelay.core.state_machine import ConfigStateMachine
from connectrelay.core.store import PersistentWriter
from connectrelay.live.source import LiveSource
from connectrelay.models.messages import MessageKind
from connectrelay.projection.batching import OutputStage, PassThroughStage
from connectrelay.projection.engine import ProjectionEngine
from connectrelay.routing.dispatcher import BroadcastDispatcher

logger = logging.getLogger(__name__)

ACK_TEXT = "👍 stream settings updated"


class SynchronizationDriver:
    """Wires change notifications and live-source channels together.

    Parameters
    ----------
    machine:
        The configuration state machine.
    engine:
        Projection engine used for incoming records.
    source:
        The live source.
    dispatcher:
        Broadcast dispatcher for acknowledgements, errors and lines.
    writer:
        Persistence writer.
    state_key, output_key:
        Store keys for the document and the selector.
    output_stage:
        Factory for the stage between projection and broadcast.  Called
        with the emit function.  Defaults to pass-through.
    """

    def __init__(
        self,
        machine: ConfigStateMachine,
        engine: ProjectionEngine,
        source: LiveSource,
        dispatcher: BroadcastDispatcher,
        writer: PersistentWriter,
        *,
        state_key: str,
        output_key: str,
        output_stage: Callable[[Callable[[str], None]], OutputStage] | None = None,
    ) -> None:
        self._machine = machine
        self._engine = engine
        self._source = source
        self._dispatcher = dispatcher
        self._writer = writer
        self._state_key = state_key
        self._output_key = output_key
        stage_factory = output_stage or PassThroughStage
        self._stage = stage_factory(self._broadcast_line)
        self._unsubscribers: list[Callable[[], None]] = []
        self._started = False
        self._channels_bound = False

    @property
    def output_stage(self) -> OutputStage:
        return self._stage

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Subscribe to the machine and push the initial document.

        The initial document is persisted even if unchanged, to normalise
        the stored form.  No acknowledgement is broadcast for it.
        """
        if self._started:
            return
        self._unsubscribers = [
            self._machine.subscribe(self.persist_document),
            self._machine.subscribe(self._source.reconfigure),
            self._machine.subscribe(self._acknowledge),
        ]
        if not self._channels_bound:
            self._source.on_record(self.handle_record)
            self._source.on_error(self.handle_error)
            self._channels_bound = True

        initial = self._machine.snapshot()
        self.persist_document(initial)
        self._source.reconfigure(initial)
        self._started = True
        logger.info("Synchronization driver started")

    def stop(self) -> None:
        for unsubscribe in self._unsubscribers:
            unsubscribe()
        self._unsubscribers = []
        self._stage.close()
        self._started = False

    # ------------------------------------------------------------------
    # Document side
    # ------------------------------------------------------------------

    def persist_document(self, document: dict[str, Any]) -> None:
        self._writer.write(self._state_key, document)

    def persist_selector(self, selector: FieldSelector) -> None:
        self._writer.write(self._output_key, selector.paths)

    def _acknowledge(self, _document: dict[str, Any]) -> None:
        self._dispatcher.broadcast(ACK_TEXT, MessageKind.ACK)

    # ------------------------------------------------------------------
    # Live-source side
    # ------------------------------------------------------------------

    def handle_record(self, record: Any) -> None:
        self._stage.push(self._engine.render(record))

    def tick(self) -> None:
        """Let the output stage emit a batch whose window has expired."""
        self._stage.tick()

    def handle_error(self, error: BaseException) -> None:
        self._dispatcher.broadcast(str(error), MessageKind.ERROR)

    def _broadcast_line(self, line: str) -> None:
        self._dispatcher.broadcast(line, MessageKind.RECORD)
