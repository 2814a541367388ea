"""Ordered set of paths rendered from each record."""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from connectrelay.models.stream import DEFAULT_OUTPUT


class FieldSelector:
    """Ordered set of unique dot-paths.

    Insertion order is kept for display; membership is what matters.
    Mutators return ``False`` instead of raising when there is nothing
    to do, so callers can turn that into a user-facing rejection.
    """

    def __init__(self, paths: Iterable[str] = DEFAULT_OUTPUT) -> None:
        self._paths: dict[str, None] = {}
        self.replace(paths)

    def __contains__(self, path: object) -> bool:
        return path in self._paths

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._paths))

    def __len__(self) -> int:
        return len(self._paths)

    def __repr__(self) -> str:
        return f"FieldSelector({list(self._paths)!r})"

    @property
    def paths(self) -> list[str]:
        """Return a copy of the selected paths in display order."""
        return list(self._paths)

    def add(self, path: str) -> bool:
        if path in self._paths:
            return False
        self._paths[path] = None
        return True

    def remove(self, path: str) -> bool:
        if path not in self._paths:
            return False
        del self._paths[path]
        return True

    def replace(self, paths: Iterable[str]) -> None:
        """Replace the whole selection; duplicates keep their first position."""
        self._paths = dict.fromkeys(paths)

    def reset(self) -> None:
        self.replace(DEFAULT_OUTPUT)

    def describe(self) -> str:
        return ", ".join(self._paths)
