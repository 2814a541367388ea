"""CommandRouter — binds case-insensitive patterns to handlers.

Handlers receive the regex match and return the replies for the
requester.  A handler rejects a command by raising ``CommandRejected``;
the router turns that into a single ``😞`` reply.  Rejections never
change state and never escape the router.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable
from typing import NamedTuple, Optional

from pydantic import BaseModel, ConfigDict

logger = logging.getLogger(__name__)

REJECT_PREFIX = "😞"

Handler = Callable[[re.Match[str]], Optional[list[str]]]


class CommandRejected(Exception):
    """Raised by a handler to refuse a command with a user-facing reason."""

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CommandResult(BaseModel):
    """Outcome of dispatching one line of chat."""

    model_config = ConfigDict(frozen=True)

    command: str | None = None
    matched: bool = False
    rejected: bool = False
    replies: list[str] = []


class _Route(NamedTuple):
    name: str
    pattern: re.Pattern[str]
    handler: Handler


class CommandRouter:
    """First-match regex router."""

    def __init__(self) -> None:
        self._routes: list[_Route] = []

    def register(self, name: str, pattern: str, handler: Handler) -> None:
        self._routes.append(
            _Route(name=name, pattern=re.compile(pattern, re.IGNORECASE), handler=handler)
        )

    def hear(self, name: str, pattern: str) -> Callable[[Handler], Handler]:
        """Decorator form of :meth:`register`."""

        def _decorator(handler: Handler) -> Handler:
            self.register(name, pattern, handler)
            return handler

        return _decorator

    @property
    def command_names(self) -> list[str]:
        return [route.name for route in self._routes]

    def dispatch(self, text: str) -> CommandResult:
        """Run the first handler whose pattern matches *text*."""
        text = text.strip()
        for route in self._routes:
            match = route.pattern.match(text)
            if match is None:
                continue
            logger.debug("Command %s matched %r", route.name, text)
            try:
                replies = route.handler(match) or []
            except CommandRejected as exc:
                logger.info("Command %s rejected: %s", route.name, exc.reason)
                return CommandResult(
                    command=route.name,
                    matched=True,
                    rejected=True,
                    replies=[f"{REJECT_PREFIX} {exc.reason}"],
                )
            return CommandResult(command=route.name, matched=True, replies=replies)
        return CommandResult()
