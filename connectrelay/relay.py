"""Relay — assembles the state machine, selector, driver and command table.

Startup order:

1. load the document and selector from the store (or defaults);
2. build the components and register the sinks;
3. start the driver, which persists the initial document and pushes it to
   the live source.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Iterable

from connectrelay.commands.router import CommandResult, CommandRouter
from connectrelay.commands.stream import StreamCommands
from connectrelay.config import RelaySettings
from connectrelay.core.selector import FieldSelector
from connectrelay.core.state_machine import ConfigStateMachine
from connectrelay.core.store import KeyValueStore, PersistentWriter
from connectrelay.live.source import LiveSource
from connectrelay.models.stream import DEFAULT_OUTPUT
from connectrelay.projection.batching import build_output_stage
from connectrelay.projection.engine import ProjectionEngine
from connectrelay.routing.dispatcher import BroadcastDispatcher
from connectrelay.routing.sinks import BaseSink
from connectrelay.sync.driver import SynchronizationDriver

logger = logging.getLogger(__name__)


class Relay:
    """A running relay.  Build with :meth:`create`."""

    def __init__(
        self,
        machine: ConfigStateMachine,
        selector: FieldSelector,
        engine: ProjectionEngine,
        dispatcher: BroadcastDispatcher,
        driver: SynchronizationDriver,
        router: CommandRouter,
    ) -> None:
        self.machine = machine
        self.selector = selector
        self.engine = engine
        self.dispatcher = dispatcher
        self.driver = driver
        self.router = router

    @classmethod
    def create(
        cls,
        settings: RelaySettings,
        store: KeyValueStore,
        source: LiveSource,
        sinks: Iterable[BaseSink],
    ) -> Relay:
        writer = PersistentWriter(store, retries=settings.persist_retries)

        machine = ConfigStateMachine.from_persisted(writer.read(settings.state_key))
        stored_output = writer.read(settings.output_key)
        selector = FieldSelector(DEFAULT_OUTPUT if stored_output is None else stored_output)
        engine = ProjectionEngine(selector)

        dispatcher = BroadcastDispatcher()
        for sink in sinks:
            dispatcher.register_sink(sink)

        driver = SynchronizationDriver(
            machine,
            engine,
            source,
            dispatcher,
            writer,
            state_key=settings.state_key,
            output_key=settings.output_key,
            output_stage=functools.partial(
                _stage_factory, settings.output_stage, settings.batch_window_ms
            ),
        )
        router = StreamCommands(machine, selector, driver).register(CommandRouter())

        driver.start()
        logger.info(
            "Relay started: %d sinks, %d selected fields",
            len(dispatcher.registered_sinks),
            len(selector),
        )
        return cls(machine, selector, engine, dispatcher, driver, router)

    def handle(self, text: str) -> CommandResult:
        """Dispatch one line of chat."""
        return self.router.dispatch(text)

    def close(self) -> None:
        self.driver.stop()


def _stage_factory(kind: str, window_ms: int, emit):
    return build_output_stage(kind, emit, window_ms=window_ms)
