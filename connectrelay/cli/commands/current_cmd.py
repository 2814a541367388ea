"""``connectrelay current`` — show the persisted configuration."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.json import JSON
from rich.panel import Panel

from connectrelay.config import settings
from connectrelay.core.store import SqliteKeyValueStore, encode_value
from connectrelay.models.stream import DEFAULT_DOCUMENT, DEFAULT_OUTPUT

console = Console()


def current_cmd(
    store_path: Path = typer.Option(
        None,
        "--store",
        "-s",
        help="Path to the SQLite store (defaults to CONNECTRELAY_STORE_PATH).",
    ),
) -> None:
    """Show the stream configuration and output fields from the store.

    Falls back to (and says so) the built-in defaults when nothing has
    been persisted yet.
    """
    path = store_path or settings.store_path
    if not Path(path).exists():
        console.print(f"[bold yellow]Store not found:[/bold yellow] {path}")
        console.print("[dim]Showing built-in defaults.[/dim]")
        document, output = DEFAULT_DOCUMENT, list(DEFAULT_OUTPUT)
    else:
        store = SqliteKeyValueStore(path)
        document = store.get(settings.state_key)
        output = store.get(settings.output_key)
        if document is None:
            document = DEFAULT_DOCUMENT
        if output is None:
            output = list(DEFAULT_OUTPUT)

    console.print(
        Panel(JSON(encode_value(document)), title="[bold]Stream configuration[/bold]", border_style="cyan")
    )
    console.print(f"[bold]Output fields:[/bold] {', '.join(output) or '[dim](none)[/dim]'}")
