"""Dot-path addressing over nested JSON trees.

A path is a dot-separated string such as ``device.ios_channel`` or
``filters.0.types``.  Each segment selects a key of a mapping or, when it
is an integer, an index of a sequence.  Lookups never raise for missing
data: they return the ``ABSENT`` sentinel instead.  ``None`` is a value
(JSON ``null``), not absence.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping, MutableSequence, Sequence
from enum import Enum
from typing import Any


class InvalidPathError(ValueError):
    """Raised when a path string is syntactically unusable."""


class _Absent(Enum):
    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"

    def __bool__(self) -> bool:
        return False


ABSENT = _Absent.ABSENT
"""Returned by :func:`lookup` when the path does not resolve."""


class NodeKind(str, Enum):
    """Tag for a node of a JSON tree."""

    MAPPING = "mapping"
    SEQUENCE = "sequence"
    SCALAR = "scalar"


def node_kind(node: Any) -> NodeKind:
    """Classify *node*; strings and bytes are scalars, not sequences."""
    if isinstance(node, Mapping):
        return NodeKind.MAPPING
    if isinstance(node, Sequence) and not isinstance(node, (str, bytes, bytearray)):
        return NodeKind.SEQUENCE
    return NodeKind.SCALAR


def split_path(path: str) -> tuple[str, ...]:
    """Split *path* into segments, rejecting empty paths and segments."""
    if not isinstance(path, str) or not path:
        raise InvalidPathError(f"Path must be a non-empty string, got {path!r}")
    segments = tuple(path.split("."))
    if any(seg == "" for seg in segments):
        raise InvalidPathError(f"Path {path!r} contains an empty segment")
    return segments


def _as_index(segment: str) -> int | None:
    if segment.isdigit():
        return int(segment)
    return None


def _child(node: Any, segment: str) -> Any:
    kind = node_kind(node)
    if kind is NodeKind.MAPPING:
        return node.get(segment, ABSENT)
    if kind is NodeKind.SEQUENCE:
        index = _as_index(segment)
        if index is None or index >= len(node):
            return ABSENT
        return node[index]
    return ABSENT


def lookup(tree: Any, path: str) -> Any:
    """Resolve *path* against *tree*, returning the value or ``ABSENT``."""
    node = tree
    for segment in split_path(path):
        node = _child(node, segment)
        if node is ABSENT:
            return ABSENT
    return node


def _empty_container_for(segment: str) -> MutableMapping[str, Any] | list[Any]:
    return [] if _as_index(segment) is not None else {}


def _put(node: Any, segment: str, value: Any, path: str) -> None:
    kind = node_kind(node)
    if kind is NodeKind.MAPPING:
        node[segment] = value
        return
    if kind is NodeKind.SEQUENCE:
        index = _as_index(segment)
        if index is None:
            raise InvalidPathError(
                f"Segment {segment!r} of {path!r} addresses a list but is not an index"
            )
        if index < len(node):
            node[index] = value
        else:
            node.extend([None] * (index - len(node)))
            node.append(value)
        return
    raise InvalidPathError(
        f"Segment {segment!r} of {path!r} descends into a scalar value"
    )


def assign(tree: MutableMapping[str, Any], path: str, value: Any) -> None:
    """Set the value at *path*, creating intermediate containers.

    A missing intermediate becomes a list when the following segment is an
    integer index and a dict otherwise.  Writing past the end of a list
    pads it with ``None``.
    """
    segments = split_path(path)
    node: Any = tree
    for segment, following in zip(segments, segments[1:]):
        child = _child(node, segment)
        if child is ABSENT or node_kind(child) is NodeKind.SCALAR:
            child = _empty_container_for(following)
            _put(node, segment, child, path)
        node = child
    _put(node, segments[-1], value, path)


def delete(tree: Any, path: str) -> bool:
    """Remove the entry at *path*; return whether anything was removed."""
    segments = split_path(path)
    parent = tree
    for segment in segments[:-1]:
        parent = _child(parent, segment)
        if parent is ABSENT:
            return False

    last = segments[-1]
    kind = node_kind(parent)
    if kind is NodeKind.MAPPING:
        if last not in parent:
            return False
        del parent[last]
        return True
    if kind is NodeKind.SEQUENCE:
        index = _as_index(last)
        if index is None or index >= len(parent) or not isinstance(parent, MutableSequence):
            return False
        del parent[index]
        return True
    return False
