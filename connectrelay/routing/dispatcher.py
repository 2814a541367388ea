"""BroadcastDispatcher — delivers each message to every destination room.

Acknowledgements, live-source errors and projected record lines all go
through here.  A room that fails is logged and skipped; delivery to the
other rooms continues.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from connectrelay.models.messages import MessageKind, OutboundMessage

if TYPE_CHECKING:
    from connectrelay.routing.sinks import BaseSink

logger = logging.getLogger(__name__)


class BroadcastError(RuntimeError):
    """Raised when no destination accepted a message."""


class BroadcastDispatcher:
    """Fans messages out to its sinks, in registration order.

    Sinks are keyed by ``sink_name``: one sink per destination.

    Usage
    -----
    >>> dispatcher = BroadcastDispatcher()
    >>> dispatcher.register_sink(RoomSink("ops"))
    >>> dispatcher.broadcast("👍 stream settings updated", MessageKind.ACK)
    """

    def __init__(self) -> None:
        self._by_name: dict[str, BaseSink] = {}

    # ------------------------------------------------------------------
    # Destinations
    # ------------------------------------------------------------------

    def register_sink(self, sink: BaseSink) -> None:
        """Add *sink*.  A second sink with the same name is ignored."""
        name = sink.sink_name
        if name in self._by_name:
            logger.debug("Destination %s already registered", name)
            return
        self._by_name[name] = sink
        logger.info("Broadcasting to %s", name)

    def unregister_sink(self, sink: BaseSink | str) -> None:
        """Drop a sink, given the sink itself or its name."""
        name = sink if isinstance(sink, str) else sink.sink_name
        if self._by_name.pop(name, None) is not None:
            logger.info("Stopped broadcasting to %s", name)

    @property
    def registered_sinks(self) -> list[BaseSink]:
        return list(self._by_name.values())

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    def dispatch(self, message: OutboundMessage) -> list[str]:
        """Deliver *message* to every sink and return the names that took it.

        Raises
        ------
        BroadcastError
            If sinks are registered and none of them accepted *message*.
        """
        if not self._by_name:
            logger.warning("No destinations, %s message dropped", message.kind.value)
            return []

        delivered: list[str] = []
        failures: dict[str, Exception] = {}
        for name, sink in self._by_name.items():
            try:
                sink.accept(message)
            except Exception as exc:  # noqa: BLE001
                logger.error("Delivery of %s to %s failed: %s", message.message_id, name, exc)
                failures[name] = exc
            else:
                delivered.append(name)

        if not delivered:
            detail = "; ".join(f"{name}: {exc}" for name, exc in failures.items())
            raise BroadcastError(
                f"All {len(failures)} sinks failed for message {message.message_id}: {detail}"
            )
        if failures:
            logger.warning(
                "%s message reached %d of %d destinations",
                message.kind.value,
                len(delivered),
                len(self._by_name),
            )
        return delivered

    def broadcast(self, text: str, kind: MessageKind) -> list[str]:
        """Wrap *text* in an ``OutboundMessage`` and dispatch it."""
        return self.dispatch(OutboundMessage(kind=kind, text=text))
