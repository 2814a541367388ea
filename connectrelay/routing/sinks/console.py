"""Terminal sink: prints broadcasts with Rich, tagged by room and kind."""

from __future__ import annotations

from rich.console import Console
from rich.markup import escape

from connectrelay.models.messages import MessageKind, OutboundMessage

_KIND_STYLES: dict[MessageKind, str] = {
    MessageKind.ACK: "green",
    MessageKind.ERROR: "bold red",
    MessageKind.RECORD: "cyan",
    MessageKind.REPLY: "yellow",
}


class ConsoleSink:
    """Prints every message to a Rich console.

    Parameters
    ----------
    room:
        Room label shown in front of each line.
    console:
        Rich Console instance.  A new one is created if not provided.
    """

    def __init__(self, room: str, console: Console | None = None) -> None:
        self._room = room
        self.console = console or Console()

    @property
    def sink_name(self) -> str:
        return f"console:{self._room}"

    def accept(self, message: OutboundMessage) -> None:
        style = _KIND_STYLES.get(message.kind, "")
        self.console.print(
            f"[dim]#{escape(self._room)}[/dim] [{style}]{escape(message.text)}[/{style}]"
        )
