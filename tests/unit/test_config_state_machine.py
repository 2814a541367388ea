"""Tests for ConfigStateMachine — get/set/remove, transactions, notifications."""

from __future__ import annotations

from typing import Any

import pytest

from connectrelay.core.paths import ABSENT
from connectrelay.core.state_machine import ConfigStateMachine, RemoveStep, SetStep
from connectrelay.models.stream import DEFAULT_DOCUMENT


@pytest.fixture
def seen(machine: ConfigStateMachine) -> list[dict[str, Any]]:
    """Every snapshot published by the machine fixture."""
    snapshots: list[dict[str, Any]] = []
    machine.subscribe(snapshots.append)
    return snapshots


class TestReads:
    def test_default_document(self, machine: ConfigStateMachine):
        assert machine.snapshot() == DEFAULT_DOCUMENT

    def test_get_by_path(self, machine: ConfigStateMachine):
        assert machine.get("start") == "LATEST"
        assert machine.get("filters.0.device_types") == ["ios", "android", "amazon"]
        assert machine.get("resume_offset") is ABSENT

    def test_get_returns_copy(self, machine: ConfigStateMachine):
        types = machine.get("filters.0.types")
        types.clear()
        assert machine.get("filters.0.types")

    def test_snapshot_returns_copy(self, machine: ConfigStateMachine):
        snap = machine.snapshot()
        snap["start"] = "EARLIEST"
        assert machine.get("start") == "LATEST"

    def test_caller_document_not_aliased(self):
        doc = {"start": "LATEST", "filters": []}
        m = ConfigStateMachine(doc)
        doc["start"] = "EARLIEST"
        assert m.get("start") == "LATEST"

    def test_from_persisted_none_uses_default(self):
        assert ConfigStateMachine.from_persisted(None).snapshot() == DEFAULT_DOCUMENT

    def test_from_persisted(self):
        m = ConfigStateMachine.from_persisted({"filters": [], "resume_offset": 7})
        assert m.get("resume_offset") == 7


class TestMutations:
    def test_set_emits_once(self, machine: ConfigStateMachine, seen: list):
        machine.set("subset", {"type": "SAMPLE", "proportion": 0.5})
        assert len(seen) == 1
        assert seen[0]["subset"] == {"type": "SAMPLE", "proportion": 0.5}
        assert machine.version == 1

    def test_set_value_not_aliased(self, machine: ConfigStateMachine):
        value = ["ios"]
        machine.set("filters.0.device_types", value)
        value.append("android")
        assert machine.get("filters.0.device_types") == ["ios"]

    def test_remove_emits_only_when_removed(self, machine: ConfigStateMachine, seen: list):
        assert machine.remove("subset") is False
        assert seen == []
        assert machine.remove("start") is True
        assert len(seen) == 1
        assert "start" not in seen[0]

    def test_reset_emits_once(self, machine: ConfigStateMachine, seen: list):
        machine.reset({"filters": [], "resume_offset": 3})
        assert seen == [{"filters": [], "resume_offset": 3}]

    def test_observers_get_private_copies(self, machine: ConfigStateMachine):
        def vandal(doc: dict) -> None:
            doc.clear()

        received: list[dict] = []
        machine.subscribe(vandal)
        machine.subscribe(received.append)
        machine.set("start", "EARLIEST")
        assert received[0]["start"] == "EARLIEST"
        assert machine.get("start") == "EARLIEST"

    def test_observers_called_in_subscription_order(self, machine: ConfigStateMachine):
        order: list[str] = []
        machine.subscribe(lambda _: order.append("persist"))
        machine.subscribe(lambda _: order.append("reconfigure"))
        machine.subscribe(lambda _: order.append("ack"))
        machine.set("start", "EARLIEST")
        assert order == ["persist", "reconfigure", "ack"]

    def test_unsubscribe(self, machine: ConfigStateMachine):
        received: list[dict] = []
        unsubscribe = machine.subscribe(received.append)
        unsubscribe()
        unsubscribe()
        machine.set("start", "EARLIEST")
        assert received == []


class TestTransactions:
    def test_single_notification(self, machine: ConfigStateMachine, seen: list):
        with machine.transaction():
            machine.remove("start")
            machine.set("resume_offset", 42)
        assert len(seen) == 1
        assert "start" not in seen[0]
        assert seen[0]["resume_offset"] == 42

    def test_no_intermediate_state_visible(self, machine: ConfigStateMachine, seen: list):
        with machine.transaction():
            machine.remove("start")
            assert seen == []
            machine.set("resume_offset", 1)
            assert seen == []
        assert len(seen) == 1

    def test_nested_transactions_coalesce(self, machine: ConfigStateMachine, seen: list):
        with machine.transaction():
            machine.set("a", 1)
            with machine.transaction():
                machine.set("b", 2)
            assert seen == []
        assert len(seen) == 1
        assert seen[0]["a"] == 1 and seen[0]["b"] == 2

    def test_noop_transaction_is_silent(self, machine: ConfigStateMachine, seen: list):
        with machine.transaction():
            machine.remove("does_not_exist")
        assert seen == []
        assert machine.version == 0

    def test_failed_transaction_rolls_back(self, machine: ConfigStateMachine, seen: list):
        before = machine.snapshot()
        with pytest.raises(RuntimeError):
            with machine.transaction():
                machine.remove("start")
                raise RuntimeError("boom")
        assert machine.snapshot() == before
        assert seen == []

    def test_machine_usable_after_rollback(self, machine: ConfigStateMachine, seen: list):
        with pytest.raises(RuntimeError):
            with machine.transaction():
                machine.set("a", 1)
                raise RuntimeError("boom")
        machine.set("b", 2)
        assert len(seen) == 1
        assert "a" not in seen[0]

    def test_apply_steps(self, machine: ConfigStateMachine, seen: list):
        machine.apply([RemoveStep(path="start"), SetStep(path="resume_offset", value=9)])
        assert len(seen) == 1
        assert seen[0]["resume_offset"] == 9
        assert "start" not in seen[0]

    def test_apply_rejects_unknown_step(self, machine: ConfigStateMachine, seen: list):
        with pytest.raises(TypeError):
            machine.apply([SetStep(path="a", value=1), "not a step"])  # type: ignore[list-item]
        assert seen == []
        assert machine.get("a") is ABSENT
