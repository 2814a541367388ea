"""Sink protocol for connectrelay broadcasts.

All sinks implement ``BaseSink``: a ``sink_name`` property and an
``accept(message)`` method.  The dispatcher calls ``accept`` on every
registered sink for every broadcast message.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from connectrelay.models.messages import OutboundMessage


@runtime_checkable
class BaseSink(Protocol):
    """Protocol that every broadcast destination implements.

    Attributes
    ----------
    sink_name : str
        Unique, human-readable identifier (e.g. ``"room:ops"``).
    """

    @property
    def sink_name(self) -> str:
        ...

    def accept(self, message: OutboundMessage) -> None:
        """Deliver *message*.

        May raise; the dispatcher logs the failure and moves on to the
        next sink.
        """
        ...
