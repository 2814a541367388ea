"""``connectrelay console`` — an interactive relay session on stdin.

Each input line is one event:

* ``!...``          a chat command;
* ``error <text>``  a live-source error;
* anything else     a JSON record from the live source.

Replies go to the terminal; broadcasts are printed once per configured
room.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from connectrelay.config import settings
from connectrelay.core.store import SqliteKeyValueStore
from connectrelay.live.source import LocalLiveSource
from connectrelay.relay import Relay
from connectrelay.routing.sinks.console import ConsoleSink

console = Console()

ERROR_PREFIX = "error "


def console_cmd(
    store_path: Path = typer.Option(
        None,
        "--store",
        "-s",
        help="Path to the SQLite store (defaults to CONNECTRELAY_STORE_PATH).",
    ),
    output_stage: str = typer.Option(
        None,
        "--output-stage",
        help="passthrough or batch (defaults to CONNECTRELAY_OUTPUT_STAGE).",
    ),
) -> None:
    """Run an interactive relay session.

    Reads commands, records and errors from stdin until EOF.
    """
    overrides = {}
    if output_stage:
        overrides["output_stage"] = output_stage
    run_settings = settings.model_copy(update=overrides)

    store = SqliteKeyValueStore(store_path or run_settings.store_path)
    source = LocalLiveSource()
    sinks = [ConsoleSink(room, console) for room in run_settings.destinations]
    relay = Relay.create(run_settings, store, source, sinks)

    console.print(
        f"[dim]Relay ready on {', '.join(run_settings.destinations) or 'no rooms'}. "
        "Type !current to inspect, Ctrl+D to exit.[/dim]"
    )

    try:
        for raw in sys.stdin:
            line = raw.strip()
            if not line:
                continue
            if line.startswith("!"):
                result = relay.handle(line)
                if not result.matched:
                    console.print(f"[dim]unknown command: {escape(line)}[/dim]")
                for reply in result.replies:
                    console.print(f"[yellow]{escape(reply)}[/yellow]")
            elif line.startswith(ERROR_PREFIX):
                source.fail(line[len(ERROR_PREFIX):])
            else:
                try:
                    record = json.loads(line)
                except json.JSONDecodeError as exc:
                    console.print(f"[red]not a JSON record:[/red] {escape(str(exc))}")
                    continue
                source.emit(record)
    finally:
        relay.close()
