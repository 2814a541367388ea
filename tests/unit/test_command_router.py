"""Tests for CommandRouter — first-match routing and rejection replies."""

from __future__ import annotations

import re

from connectrelay.commands.router import CommandRejected, CommandRouter


def _router() -> CommandRouter:
    router = CommandRouter()

    @router.hear("echo", r"^!echo (.+)$")
    def _echo(match: re.Match[str]) -> list[str]:
        return [match.group(1)]

    @router.hear("refuse", r"^!refuse")
    def _refuse(match: re.Match[str]) -> None:
        raise CommandRejected("not today")

    @router.hear("echo-shadowed", r"^!echo twice$")
    def _never(match: re.Match[str]) -> list[str]:
        return ["unreachable"]

    return router


class TestCommandRouter:
    def test_registration_order(self):
        assert _router().command_names == ["echo", "refuse", "echo-shadowed"]

    def test_handler_replies(self):
        result = _router().dispatch("!echo hi there")
        assert result.command == "echo"
        assert result.matched is True
        assert result.rejected is False
        assert result.replies == ["hi there"]

    def test_first_match_wins(self):
        assert _router().dispatch("!echo twice").replies == ["twice"]

    def test_surrounding_whitespace_ignored(self):
        assert _router().dispatch("   !ECHO x  ").replies == ["x"]

    def test_rejection_becomes_reply(self):
        result = _router().dispatch("!refuse")
        assert result.rejected is True
        assert result.replies == ["😞 not today"]

    def test_handler_returning_none(self):
        router = CommandRouter()
        router.register("quiet", r"^!quiet", lambda match: None)
        result = router.dispatch("!quiet")
        assert result.matched is True
        assert result.replies == []

    def test_no_match(self):
        result = _router().dispatch("plain chat")
        assert result.command is None
        assert result.matched is False
