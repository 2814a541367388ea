"""Main Typer application — registers all CLI commands.

Entry point: ``connectrelay`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.logging import RichHandler

from connectrelay.cli.commands.console_cmd import console_cmd
from connectrelay.cli.commands.current_cmd import current_cmd
from connectrelay.cli.commands.project_cmd import project_cmd
from connectrelay.config import settings

app = typer.Typer(
    name="connectrelay",
    help="connectrelay: chat-driven configuration and display of a live event stream.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None, "--log-level", help="Logging level (defaults to CONNECTRELAY_LOG_LEVEL)."
    ),
) -> None:
    """Configure logging before any command runs."""
    logging.basicConfig(
        level=(log_level or settings.log_level).upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )


app.command(name="console", help="Run an interactive relay session on stdin.")(console_cmd)
app.command(name="current", help="Show the persisted stream configuration and output fields.")(current_cmd)
app.command(name="project", help="Render a JSON-lines file of records with the output fields.")(project_cmd)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
