"""ProjectionEngine — renders selected fields of a record as one line.

The engine holds no state of its own.  It reads the field selector by
reference on every call, so selector edits apply to the next record.
"""

from __future__ import annotations

import json
from typing import Any

from connectrelay.core.paths import ABSENT, NodeKind, lookup, node_kind
from connectrelay.core.selector import FieldSelector

PAIR_SEPARATOR = ", "


def render_value(value: Any) -> str:
    """Render a resolved value for display.

    Mappings and sequences become compact JSON; ``None`` and booleans use
    their JSON spelling; anything else uses ``str``.
    """
    if node_kind(value) is not NodeKind.SCALAR:
        return json.dumps(value, separators=(",", ":"), ensure_ascii=False, default=str)
    if value is None or isinstance(value, bool):
        return json.dumps(value)
    return str(value)


class ProjectionEngine:
    """Projects records through a :class:`FieldSelector`.

    Parameters
    ----------
    selector:
        The live selector.  Not copied.
    """

    def __init__(self, selector: FieldSelector) -> None:
        self._selector = selector

    @property
    def selector(self) -> FieldSelector:
        return self._selector

    def pairs(self, record: Any) -> list[tuple[str, str]]:
        """Return ``(path, rendered)`` for every selected path present in *record*."""
        result: list[tuple[str, str]] = []
        for path in self._selector:
            value = lookup(record, path)
            if value is ABSENT:
                continue
            result.append((path, render_value(value)))
        return result

    def render(self, record: Any) -> str:
        """Render *record* as ``path: value`` pairs joined by commas.

        An empty selector (or a record with none of the fields) yields an
        empty string.
        """
        return PAIR_SEPARATOR.join(f"{path}: {text}" for path, text in self.pairs(record))
