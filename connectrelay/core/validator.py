"""Pure validation rules for filter values and subset parameters."""

from __future__ import annotations

from typing import Any

from connectrelay.models.stream import ENUMERATED_DOMAINS, FilterKey, StartPosition

FILTER_DOMAINS: dict[str, frozenset[str]] = {
    key.value: frozenset(member.value for member in domain)
    for key, domain in ENUMERATED_DOMAINS.items()
}

KNOWN_FILTER_KEYS: frozenset[str] = frozenset(key.value for key in FilterKey)


def is_known_filter_key(key: str) -> bool:
    """Whether *key* is any filter key the live source understands."""
    return key in KNOWN_FILTER_KEYS


def is_legal_filter_key(key: str) -> bool:
    """Whether *key* has an enumerated domain (and so can be added/removed)."""
    return key in FILTER_DOMAINS


def is_legal_filter_value(key: str, value: Any) -> bool:
    """Whether *value* belongs to the enumerated domain of *key*.

    Keys without an enumerated domain are never legal here.
    """
    domain = FILTER_DOMAINS.get(key)
    return domain is not None and value in domain


def is_legal_subset_sample(proportion: float) -> bool:
    return 0.0 <= proportion <= 1.0


def is_legal_subset_partition(count: int, selection: int) -> bool:
    """``count >= 1`` and ``0 <= selection <= count``."""
    return count >= 1 and 0 <= selection <= count


def is_legal_start(token: str) -> bool:
    return token.upper() in StartPosition.__members__
