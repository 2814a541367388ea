"""Outbound broadcast messages."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MessageKind(str, Enum):
    """What produced an outbound message."""

    ACK = "ack"
    ERROR = "error"
    RECORD = "record"
    REPLY = "reply"


class OutboundMessage(BaseModel):
    """A single line of text delivered to every broadcast destination."""

    model_config = ConfigDict(frozen=True)

    message_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    kind: MessageKind
    text: str
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
