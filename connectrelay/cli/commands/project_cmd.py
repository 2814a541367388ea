"""``connectrelay project FILE`` — render recorded events offline.

Uses the persisted output fields unless ``--field`` is given.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from connectrelay.config import settings
from connectrelay.core.selector import FieldSelector
from connectrelay.core.store import SqliteKeyValueStore
from connectrelay.models.stream import DEFAULT_OUTPUT
from connectrelay.projection.engine import ProjectionEngine

console = Console()


def project_cmd(
    records_file: Path = typer.Argument(
        ...,
        exists=True,
        dir_okay=False,
        help="JSON-lines file, one event record per line.",
    ),
    fields: list[str] = typer.Option(
        None,
        "--field",
        "-f",
        help="Dot-path to display; repeat for several.  Overrides the stored fields.",
    ),
    store_path: Path = typer.Option(
        None,
        "--store",
        "-s",
        help="Path to the SQLite store (defaults to CONNECTRELAY_STORE_PATH).",
    ),
) -> None:
    """Print one projected line per record."""
    if fields:
        paths = fields
    else:
        path = store_path or settings.store_path
        stored = SqliteKeyValueStore(path).get(settings.output_key) if Path(path).exists() else None
        paths = list(DEFAULT_OUTPUT) if stored is None else stored

    engine = ProjectionEngine(FieldSelector(paths))
    bad = 0
    with records_file.open(encoding="utf-8") as fh:
        for lineno, raw in enumerate(fh, start=1):
            if not raw.strip():
                continue
            try:
                record = json.loads(raw)
            except json.JSONDecodeError as exc:
                bad += 1
                console.print(f"[red]line {lineno}: {escape(str(exc))}[/red]")
                continue
            console.print(escape(engine.render(record)), highlight=False)

    if bad:
        raise typer.Exit(code=1)
