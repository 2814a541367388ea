"""Chat-room sink, one instance per configured destination room.

With a ``deliver`` callable the sink hands each message straight to the
chat adapter (``deliver(room, text)``).  Without one it buffers messages
until ``flush()``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from connectrelay.models.messages import OutboundMessage

logger = logging.getLogger(__name__)

Deliver = Callable[[str, str], None]


class RoomSink:
    """Delivers broadcast messages to a single chat room.

    Parameters
    ----------
    room:
        Room identifier as understood by the chat adapter.
    deliver:
        Optional ``(room, text)`` callable.  When omitted, messages are
        buffered.
    """

    def __init__(self, room: str, deliver: Deliver | None = None) -> None:
        self._room = room
        self._deliver = deliver
        self._pending: list[OutboundMessage] = []

    @property
    def sink_name(self) -> str:
        return f"room:{self._room}"

    @property
    def room(self) -> str:
        return self._room

    def accept(self, message: OutboundMessage) -> None:
        if self._deliver is not None:
            self._deliver(self._room, message.text)
            return
        self._pending.append(message)
        logger.debug("RoomSink %s: queued message %s", self._room, message.message_id)

    def flush(self) -> list[OutboundMessage]:
        """Return and clear buffered messages."""
        messages = list(self._pending)
        self._pending.clear()
        return messages

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    @property
    def texts(self) -> list[str]:
        """Text of the buffered messages, oldest first."""
        return [m.text for m in self._pending]
