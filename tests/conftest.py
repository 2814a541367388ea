"""Shared test fixtures for connectrelay."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from connectrelay.config import RelaySettings
from connectrelay.core.selector import FieldSelector
from connectrelay.core.state_machine import ConfigStateMachine
from connectrelay.core.store import MemoryKeyValueStore, PersistentWriter
from connectrelay.live.source import LocalLiveSource
from connectrelay.projection.engine import ProjectionEngine
from connectrelay.relay import Relay
from connectrelay.routing.dispatcher import BroadcastDispatcher
from connectrelay.routing.sinks.room import RoomSink
from connectrelay.sync.driver import SynchronizationDriver


@pytest.fixture
def relay_settings() -> RelaySettings:
    """Settings isolated from the developer's environment and .env file."""
    return RelaySettings(_env_file=None, rooms="ops,mobile", persist_retries=1)


@pytest.fixture
def store() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def writer(store: MemoryKeyValueStore) -> PersistentWriter:
    return PersistentWriter(store, retries=1)


@pytest.fixture
def machine() -> ConfigStateMachine:
    """A state machine holding the default document."""
    return ConfigStateMachine()


@pytest.fixture
def selector() -> FieldSelector:
    return FieldSelector()


@pytest.fixture
def source() -> LocalLiveSource:
    return LocalLiveSource()


@pytest.fixture
def rooms() -> list[RoomSink]:
    """Two buffering room sinks."""
    return [RoomSink("ops"), RoomSink("mobile")]


@pytest.fixture
def dispatcher(rooms: list[RoomSink]) -> BroadcastDispatcher:
    d = BroadcastDispatcher()
    for room in rooms:
        d.register_sink(room)
    return d


@pytest.fixture
def driver(
    machine: ConfigStateMachine,
    selector: FieldSelector,
    source: LocalLiveSource,
    dispatcher: BroadcastDispatcher,
    writer: PersistentWriter,
) -> SynchronizationDriver:
    """A started driver wired to the fixtures above."""
    d = SynchronizationDriver(
        machine,
        ProjectionEngine(selector),
        source,
        dispatcher,
        writer,
        state_key="uaconnect:lastState",
        output_key="uaconnect:lastOutput",
    )
    d.start()
    return d


@pytest.fixture
def relay(
    relay_settings: RelaySettings,
    store: MemoryKeyValueStore,
    source: LocalLiveSource,
    rooms: list[RoomSink],
) -> Iterator[Relay]:
    """A fully assembled relay over an empty in-memory store."""
    r = Relay.create(relay_settings, store, source, rooms)
    yield r
    r.close()


# ---------------------------------------------------------------------------
# Record factory
# ---------------------------------------------------------------------------


@pytest.fixture
def make_record() -> Callable[..., dict[str, Any]]:
    """Factory fixture: build a live-source event record."""

    def _factory(event_type: str = "PUSH_BODY", **overrides: Any) -> dict[str, Any]:
        record: dict[str, Any] = {
            "id": "ff76bb85-74bc-4511-a3bf-11b6117784db",
            "type": event_type,
            "offset": "1",
            "occurred": "2026-01-02T12:00:00.000Z",
            "device": {
                "named_user_id": "user-42",
                "ios_channel": "a7d4c9e2-0000-4c1b-9f00-3a5e0a1b2c3d",
            },
            "body": {"push_id": "p-1", "payload": "aGVsbG8="},
        }
        record.update(overrides)
        return record

    return _factory
