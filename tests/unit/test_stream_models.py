"""Tests for the stream document models."""

from __future__ import annotations

import pytest
from pydantic import TypeAdapter, ValidationError

from connectrelay.models.messages import MessageKind, OutboundMessage
from connectrelay.models.stream import (
    DEFAULT_DOCUMENT,
    DEFAULT_OUTPUT,
    DeviceType,
    EventType,
    PartitionSubset,
    SampleSubset,
    StreamDocument,
    Subset,
)


class TestDefaults:
    def test_default_document_is_valid(self):
        doc = StreamDocument.model_validate(DEFAULT_DOCUMENT)
        assert doc.to_document() == DEFAULT_DOCUMENT

    def test_default_filters_cover_every_value(self):
        group = DEFAULT_DOCUMENT["filters"][0]
        assert group["device_types"] == [d.value for d in DeviceType]
        assert group["types"] == [t.value for t in EventType]

    def test_default_output(self):
        assert DEFAULT_OUTPUT[0] == "device.named_user_id"
        assert "body" in DEFAULT_OUTPUT
        assert len(set(DEFAULT_OUTPUT)) == len(DEFAULT_OUTPUT)


class TestStreamDocument:
    def test_start_case_normalised(self):
        doc = StreamDocument.model_validate({"start": "earliest"})
        assert doc.to_document()["start"] == "EARLIEST"

    def test_start_and_offset_together_rejected(self):
        with pytest.raises(ValidationError, match="exactly one"):
            StreamDocument(start="LATEST", resume_offset=3)

    def test_neither_start_nor_offset_rejected(self):
        with pytest.raises(ValidationError, match="exactly one"):
            StreamDocument(filters=[])

    def test_negative_offset_rejected(self):
        with pytest.raises(ValidationError):
            StreamDocument(resume_offset=-1)

    def test_unknown_filter_key_rejected(self):
        with pytest.raises(ValidationError):
            StreamDocument.model_validate({"filters": [{"colour": ["red"]}], "start": "LATEST"})

    def test_duplicate_filter_value_rejected(self):
        with pytest.raises(ValidationError, match="duplicate types"):
            StreamDocument.model_validate(
                {"filters": [{"types": ["SEND", "SEND"]}], "start": "LATEST"}
            )

    def test_open_keys_accept_any_values(self):
        doc = StreamDocument.model_validate(
            {"filters": [{"devices": [{"ios_channel": "abc"}]}], "resume_offset": 0}
        )
        assert doc.to_document()["filters"] == [{"devices": [{"ios_channel": "abc"}]}]

    def test_extra_top_level_keys_carried(self):
        doc = StreamDocument.model_validate({"start": "EARLIEST", "note": "keep"})
        assert doc.to_document() == {"filters": [], "start": "EARLIEST", "note": "keep"}

    def test_subset_round_trips_as_plain_json(self):
        doc = StreamDocument.model_validate(
            {"start": "LATEST", "subset": {"type": "PARTITION", "count": 4, "selection": 2}}
        )
        assert doc.to_document()["subset"] == {"type": "PARTITION", "count": 4, "selection": 2}


class TestSubsets:
    def test_sample_bounds(self):
        assert SampleSubset(proportion=0).proportion == 0
        assert SampleSubset(proportion=1).proportion == 1
        with pytest.raises(ValidationError):
            SampleSubset(proportion=1.5)

    def test_partition_selection_within_count(self):
        with pytest.raises(ValidationError, match="larger than count"):
            PartitionSubset(count=2, selection=3)

    def test_discriminated_union(self):
        adapter = TypeAdapter(Subset)
        parsed = adapter.validate_python({"type": "SAMPLE", "proportion": 0.3})
        assert isinstance(parsed, SampleSubset)

    def test_models_are_frozen(self):
        subset = SampleSubset(proportion=0.3)
        with pytest.raises(ValidationError):
            subset.proportion = 0.9


class TestOutboundMessage:
    def test_defaults(self):
        msg = OutboundMessage(kind=MessageKind.ACK, text="ok")
        assert msg.message_id
        assert msg.timestamp_utc.tzinfo is not None

    def test_frozen(self):
        msg = OutboundMessage(kind=MessageKind.RECORD, text="x")
        with pytest.raises(ValidationError):
            msg.text = "y"
