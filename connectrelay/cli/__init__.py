"""connectrelay CLI — Typer-based command-line interface.

Provides the ``connectrelay`` command with subcommands for running an
interactive relay session, inspecting the persisted configuration and
projecting recorded events.

All output uses Rich for formatted terminal display.
"""
