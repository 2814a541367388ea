"""Pydantic v2 data models."""

from connectrelay.models.messages import MessageKind, OutboundMessage
from connectrelay.models.stream import (
    DEFAULT_DOCUMENT,
    DEFAULT_OUTPUT,
    ENUMERATED_DOMAINS,
    DeviceType,
    EventType,
    FilterKey,
    PartitionSubset,
    SampleSubset,
    StartPosition,
    StreamDocument,
)

__all__ = [
    # stream
    "DEFAULT_DOCUMENT",
    "DEFAULT_OUTPUT",
    "ENUMERATED_DOMAINS",
    "DeviceType",
    "EventType",
    "FilterKey",
    "PartitionSubset",
    "SampleSubset",
    "StartPosition",
    "StreamDocument",
    # messages
    "MessageKind",
    "OutboundMessage",
]
