"""Chat command surface: a regex router and the stream command table."""

from connectrelay.commands.router import CommandRejected, CommandResult, CommandRouter

__all__ = ["CommandRejected", "CommandResult", "CommandRouter"]
