"""The stream configuration document sent to the live source.

The state machine holds the document as a plain JSON tree so it can be
addressed by dot-path.  These models describe the same document and are
used to validate whole-document replacement before it reaches the machine.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class FilterKey(str, Enum):
    """Keys a filter group may carry."""

    DEVICE_TYPES = "device_types"
    NOTIFICATIONS = "notifications"
    DEVICES = "devices"
    TYPES = "types"
    LATENCY = "latency"


class DeviceType(str, Enum):
    IOS = "ios"
    ANDROID = "android"
    AMAZON = "amazon"


class EventType(str, Enum):
    """Event types the live source can be filtered down to.

    Declaration order is the order of the default ``types`` filter.
    """

    PUSH_BODY = "PUSH_BODY"
    CUSTOM = "CUSTOM"
    TAG_CHANGE = "TAG_CHANGE"
    FIRST_OPEN = "FIRST_OPEN"
    UNINSTALL = "UNINSTALL"
    RICH_DELIVERY = "RICH_DELIVERY"
    RICH_READ = "RICH_READ"
    RICH_DELETE = "RICH_DELETE"
    IN_APP_MESSAGE_EXPIRATION = "IN_APP_MESSAGE_EXPIRATION"
    IN_APP_MESSAGE_RESOLUTION = "IN_APP_MESSAGE_RESOLUTION"
    IN_APP_MESSAGE_DISPLAY = "IN_APP_MESSAGE_DISPLAY"
    SEND = "SEND"


class StartPosition(str, Enum):
    """Sentinel starting positions in the source's data window."""

    LATEST = "LATEST"
    EARLIEST = "EARLIEST"


class SampleSubset(BaseModel):
    """Randomly keep ``proportion`` of the stream."""

    model_config = ConfigDict(frozen=True)

    type: Literal["SAMPLE"] = "SAMPLE"
    proportion: float = Field(ge=0.0, le=1.0)


class PartitionSubset(BaseModel):
    """Split the stream into ``count`` partitions and keep ``selection``."""

    model_config = ConfigDict(frozen=True)

    type: Literal["PARTITION"] = "PARTITION"
    count: int = Field(ge=1)
    selection: int = Field(ge=0)

    @model_validator(mode="after")
    def _selection_within_count(self) -> PartitionSubset:
        if self.selection > self.count:
            raise ValueError("selection cannot be larger than count")
        return self


Subset = Annotated[Union[SampleSubset, PartitionSubset], Field(discriminator="type")]

# Keys whose values are restricted to a fixed domain.
ENUMERATED_DOMAINS: dict[FilterKey, type[Enum]] = {
    FilterKey.DEVICE_TYPES: DeviceType,
    FilterKey.TYPES: EventType,
}


class StreamDocument(BaseModel):
    """The full subscription document.

    Exactly one of ``start`` / ``resume_offset`` must be present.  Unknown
    top-level keys are carried through untouched.
    """

    model_config = ConfigDict(extra="allow")

    filters: list[dict[FilterKey, list[Any]]] = []
    start: StartPosition | None = None
    resume_offset: int | None = Field(default=None, ge=0)
    subset: Subset | None = None

    @field_validator("start", mode="before")
    @classmethod
    def _upper_start(cls, value: Any) -> Any:
        return value.upper() if isinstance(value, str) else value

    @model_validator(mode="after")
    def _check_invariants(self) -> StreamDocument:
        if (self.start is None) == (self.resume_offset is None):
            raise ValueError("exactly one of start or resume_offset must be set")

        for group in self.filters:
            for key, values in group.items():
                domain = ENUMERATED_DOMAINS.get(key)
                if domain is not None:
                    allowed = {member.value for member in domain}
                    illegal = [v for v in values if v not in allowed]
                    if illegal:
                        raise ValueError(f"invalid {key.value}: {', '.join(map(str, illegal))}")
                seen: list[Any] = []
                for value in values:
                    if value in seen:
                        raise ValueError(f"duplicate {key.value} filter value: {value}")
                    seen.append(value)
        return self

    def to_document(self) -> dict[str, Any]:
        """Dump to the plain JSON tree the state machine stores."""
        return self.model_dump(mode="json", exclude_none=True)


DEFAULT_DOCUMENT: dict[str, Any] = {
    "filters": [
        {
            FilterKey.DEVICE_TYPES.value: [d.value for d in DeviceType],
            FilterKey.TYPES.value: [t.value for t in EventType],
        }
    ],
    "start": StartPosition.LATEST.value,
}

DEFAULT_OUTPUT: tuple[str, ...] = (
    "device.named_user_id",
    "device.ios_channel",
    "device.android_channel",
    "device.amazon_channel",
    "type",
    "body",
)
