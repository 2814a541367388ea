"""Stream and output commands.

Document mutations are acknowledged by the synchronization driver's
broadcast, not by a reply.  Selector mutations reply directly because
they never reach the live source.
"""

from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from connectrelay.commands.router import CommandRejected, CommandRouter
from connectrelay.core.selector import FieldSelector
from connectrelay.core.state_machine import ConfigStateMachine, RemoveStep, SetStep
from connectrelay.core.validator import (
    FILTER_DOMAINS,
    is_known_filter_key,
    is_legal_filter_key,
    is_legal_filter_value,
    is_legal_start,
    is_legal_subset_sample,
)
from connectrelay.models.stream import (
    DEFAULT_DOCUMENT,
    PartitionSubset,
    SampleSubset,
    StreamDocument,
)
from connectrelay.sync.driver import SynchronizationDriver

logger = logging.getLogger(__name__)

OUTPUT_UPDATED = "👍 output settings updated"
PRIMARY_GROUP = "filters.0"


def compact_json(value: object) -> str:
    return json.dumps(value, separators=(",", ":"), ensure_ascii=False)


class StreamCommands:
    """Registers the chat command table on a :class:`CommandRouter`.

    Parameters
    ----------
    machine:
        The configuration state machine.
    selector:
        The field selector.
    driver:
        Used to persist the selector after every selector change.
    """

    def __init__(
        self,
        machine: ConfigStateMachine,
        selector: FieldSelector,
        driver: SynchronizationDriver,
    ) -> None:
        self._machine = machine
        self._selector = selector
        self._driver = driver

    def register(self, router: CommandRouter) -> CommandRouter:
        router.register("current", r"^!current", self.current)
        router.register("reset", r"^!reset", self.reset)
        router.register("show", r"^!show (.+)$", self.show)
        router.register("hide", r"^!hide (.+)$", self.hide)
        router.register("set-output", r"^!set output (.*)$", self.set_output)
        router.register("set-current", r"^!set current (.*)$", self.set_current)
        router.register("set-start", r"^!set start (\w+)", self.set_start)
        router.register("set-resume-offset", r"^!set resume_offset (\S+)", self.set_resume_offset)
        router.register("set-subset-sample", r"^!set subset sample (\S+)", self.set_subset_sample)
        router.register(
            "set-subset-partition",
            r"^!set subset partition (-?\d+) (-?\d+)",
            self.set_subset_partition,
        )
        router.register("clear-subset", r"^!clear subset", self.clear_subset)
        router.register("filters-clear", r"^!filters clear (\w+)", self.filters_clear)
        router.register(
            "filters-edit", r"^!filters (add|remove) (\w+) (\w+)", self.filters_edit
        )
        return router

    # ------------------------------------------------------------------
    # Display / reset
    # ------------------------------------------------------------------

    def current(self, match: re.Match[str]) -> list[str]:
        return [
            f"⛵ {compact_json(self._machine.snapshot())}",
            f"👀 {self._selector.describe()}",
        ]

    def reset(self, match: re.Match[str]) -> None:
        self._selector.reset()
        self._driver.persist_selector(self._selector)
        self._machine.reset(DEFAULT_DOCUMENT)

    # ------------------------------------------------------------------
    # Field selector
    # ------------------------------------------------------------------

    def show(self, match: re.Match[str]) -> list[str]:
        path = match.group(1).strip()
        if not self._selector.add(path):
            raise CommandRejected(f"already showing {path}")
        self._driver.persist_selector(self._selector)
        return [OUTPUT_UPDATED]

    def hide(self, match: re.Match[str]) -> list[str]:
        path = match.group(1).strip()
        if not self._selector.remove(path):
            raise CommandRejected(f"not showing {path}")
        self._driver.persist_selector(self._selector)
        return [OUTPUT_UPDATED]

    def set_output(self, match: re.Match[str]) -> list[str]:
        paths = [p.strip() for p in match.group(1).split(",")]
        self._selector.replace(p for p in paths if p)
        self._driver.persist_selector(self._selector)
        return [OUTPUT_UPDATED]

    # ------------------------------------------------------------------
    # Whole document
    # ------------------------------------------------------------------

    def set_current(self, match: re.Match[str]) -> None:
        try:
            data = json.loads(match.group(1))
        except json.JSONDecodeError as exc:
            raise CommandRejected(f"error parsing JSON: {exc}") from exc

        try:
            document = StreamDocument.model_validate(data)
        except ValidationError as exc:
            reasons = "; ".join(err["msg"] for err in exc.errors())
            raise CommandRejected(f"invalid stream configuration: {reasons}") from exc

        self._machine.reset(document.to_document())

    # ------------------------------------------------------------------
    # Start position
    # ------------------------------------------------------------------

    def set_start(self, match: re.Match[str]) -> None:
        token = match.group(1)
        if not is_legal_start(token):
            raise CommandRejected(
                f"invalid start position {token}, expected LATEST or EARLIEST"
            )
        self._machine.apply(
            [RemoveStep(path="resume_offset"), SetStep(path="start", value=token.upper())]
        )

    def set_resume_offset(self, match: re.Match[str]) -> None:
        raw = match.group(1)
        if not (raw.isascii() and raw.isdigit()):
            raise CommandRejected(f"invalid resume_offset {raw}")
        self._machine.apply(
            [RemoveStep(path="start"), SetStep(path="resume_offset", value=int(raw))]
        )

    # ------------------------------------------------------------------
    # Subset
    # ------------------------------------------------------------------

    def set_subset_sample(self, match: re.Match[str]) -> None:
        raw = match.group(1)
        try:
            proportion = float(raw)
        except ValueError as exc:
            raise CommandRejected(f"invalid proportion value: {raw}") from exc
        if not is_legal_subset_sample(proportion):
            raise CommandRejected(f"invalid proportion value: {raw}")
        self._machine.set("subset", SampleSubset(proportion=proportion).model_dump())

    def set_subset_partition(self, match: re.Match[str]) -> None:
        count = int(match.group(1))
        selection = int(match.group(2))
        if count < 1:
            raise CommandRejected("count cannot be less than 1")
        if selection > count:
            raise CommandRejected("selection cannot be larger than count")
        if selection < 0:
            raise CommandRejected("selection cannot be negative")
        subset = PartitionSubset(count=count, selection=selection)
        self._machine.set("subset", subset.model_dump())

    def clear_subset(self, match: re.Match[str]) -> None:
        self._machine.remove("subset")

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filters_clear(self, match: re.Match[str]) -> None:
        key = match.group(1)
        if not is_known_filter_key(key):
            raise CommandRejected(f"invalid filter type {key}")

        if not self._machine.remove(f"{PRIMARY_GROUP}.{key}"):
            group = self._machine.get(PRIMARY_GROUP)
            present = group.keys() if isinstance(group, dict) else []
            available = ", ".join(k for k in present if is_known_filter_key(k))
            raise CommandRejected(
                f"no filters defined for {key}. available filters: {available}"
            )

    def filters_edit(self, match: re.Match[str]) -> None:
        operation = match.group(1).lower()
        key = match.group(2)
        value = match.group(3)

        if not is_legal_filter_key(key):
            raise CommandRejected(f"invalid filter type {key}")
        if not is_legal_filter_value(key, value):
            allowed = ", ".join(sorted(FILTER_DOMAINS[key]))
            raise CommandRejected(f"invalid {key}: {value} (allowed: {allowed})")

        path = f"{PRIMARY_GROUP}.{key}"
        current = self._machine.get(path)
        values = list(current) if isinstance(current, list) else []

        if operation == "add":
            if value in values:
                raise CommandRejected(f"{key} filter already includes {value}")
            self._machine.set(path, values + [value])
        else:
            if value not in values:
                raise CommandRejected(f"{key} filter does not include {value}")
            self._machine.set(path, [v for v in values if v != value])
