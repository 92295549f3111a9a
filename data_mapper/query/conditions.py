"""Condition grammar shared by every adapter.

Conditions are declared as a mapping or as ``(field, operator, value)``
tuples::

    {"title": "Hello"}                  # equality
    {"status": ["draft", "live"]}       # IN
    {"deleted_at": None}                # IS NULL
    {"views >": 10, "title :like": "He%"}
    [("views", ">=", 10), ("author_id", "!=", [1, 2])]

Each ``Query.where()`` call produces one ConditionGroup. Groups are folded
left to right with their ``link``: ``((g1 OR g2) AND g3)``. SQL adapters
compile this structure; schemaless adapters evaluate it with matches().
"""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

from data_mapper.core.enums import Operator
from data_mapper.core.exceptions import QueryBuildError

CONJUNCTIONS = ("AND", "OR")

_OPERATOR_ALIASES: dict[str, Operator] = {
    "=": Operator.EQ,
    "==": Operator.EQ,
    ":eq": Operator.EQ,
    "!=": Operator.NE,
    "<>": Operator.NE,
    ":not": Operator.NE,
    ":ne": Operator.NE,
    "<": Operator.LT,
    ":lt": Operator.LT,
    "<=": Operator.LTE,
    ":lte": Operator.LTE,
    ">": Operator.GT,
    ":gt": Operator.GT,
    ">=": Operator.GTE,
    ":gte": Operator.GTE,
    "~=": Operator.LIKE,
    "like": Operator.LIKE,
    ":like": Operator.LIKE,
    "in": Operator.IN,
    ":in": Operator.IN,
    "not in": Operator.NOT_IN,
    ":not_in": Operator.NOT_IN,
}

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class Condition:
    """A single ``field operator value`` comparison."""

    field: str
    operator: Operator
    value: Any


@dataclass(frozen=True)
class ConditionGroup:
    """Conditions joined by ``conjunction``, linked to earlier groups by ``link``."""

    conditions: tuple[Condition, ...]
    conjunction: str = "AND"
    link: str = "AND"


def normalize_operator(operator: str | Operator) -> Operator:
    """Map an operator or one of its aliases onto the canonical Operator."""
    if isinstance(operator, Operator):
        return operator
    try:
        return _OPERATOR_ALIASES[operator.strip().lower()]
    except KeyError:
        raise QueryBuildError(f"Unknown condition operator: {operator!r}") from None


def normalize_conjunction(value: str) -> str:
    conjunction = value.strip().upper()
    if conjunction not in CONJUNCTIONS:
        raise QueryBuildError(f"Conjunction must be AND or OR, got {value!r}")
    return conjunction


def make_condition(field: str, operator: str | Operator, value: Any) -> Condition:
    """Build a Condition, turning sequence equality into IN / NOT IN."""
    op = normalize_operator(operator)
    is_sequence = isinstance(value, _SEQUENCE_TYPES)

    if is_sequence and op is Operator.EQ:
        op = Operator.IN
    elif is_sequence and op is Operator.NE:
        op = Operator.NOT_IN

    if op in (Operator.IN, Operator.NOT_IN):
        if not is_sequence:
            raise QueryBuildError(f"Operator {op.value} on '{field}' requires a list of values")
        value = tuple(value)
    elif op is Operator.LIKE and not isinstance(value, str):
        raise QueryBuildError(f"LIKE on '{field}' requires a string pattern")
    elif is_sequence:
        raise QueryBuildError(f"Operator {op.value} on '{field}' does not accept a list")

    return Condition(field=field, operator=op, value=value)


def parse_conditions(
    conditions: Mapping[str, Any] | Iterable[Condition | tuple[Any, ...]],
) -> tuple[Condition, ...]:
    """Parse mapping or tuple declarations into Conditions."""
    if isinstance(conditions, Mapping):
        parsed = []
        for key, value in conditions.items():
            field, _, operator = key.strip().partition(" ")
            parsed.append(make_condition(field, operator or "=", value))
        return tuple(parsed)

    parsed = []
    for item in conditions:
        if isinstance(item, Condition):
            parsed.append(item)
        elif isinstance(item, tuple) and len(item) == 3:
            parsed.append(make_condition(*item))
        elif isinstance(item, tuple) and len(item) == 2:
            parsed.append(make_condition(item[0], "=", item[1]))
        else:
            raise QueryBuildError(f"Cannot parse condition {item!r}")
    return tuple(parsed)


# --- Evaluation ---


@lru_cache(maxsize=256)
def _like_pattern(pattern: str) -> re.Pattern[str]:
    parts = []
    for char in pattern:
        if char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("^" + "".join(parts) + "$", re.IGNORECASE | re.DOTALL)


def condition_matches(record: Mapping[str, Any], condition: Condition) -> bool:
    """Evaluate one condition with SQL NULL semantics."""
    actual = record.get(condition.field)
    op = condition.operator
    expected = condition.value

    if op is Operator.EQ and expected is None:
        return actual is None
    if op is Operator.NE and expected is None:
        return actual is not None
    # Comparisons against NULL are never true
    if actual is None:
        return False

    if op is Operator.EQ:
        return bool(actual == expected)
    if op is Operator.NE:
        return bool(actual != expected)
    if op is Operator.IN:
        return actual in expected
    if op is Operator.NOT_IN:
        # A NULL in the list makes NOT IN unknown for every value
        return None not in expected and actual not in expected
    if op is Operator.LIKE:
        return _like_pattern(expected).match(str(actual)) is not None

    try:
        if op is Operator.LT:
            return bool(actual < expected)
        if op is Operator.LTE:
            return bool(actual <= expected)
        if op is Operator.GT:
            return bool(actual > expected)
        return bool(actual >= expected)
    except TypeError:
        # Incomparable types never match
        return False


def group_matches(record: Mapping[str, Any], group: ConditionGroup) -> bool:
    results = (condition_matches(record, c) for c in group.conditions)
    return any(results) if group.conjunction == "OR" else all(results)


def matches(record: Mapping[str, Any], groups: Iterable[ConditionGroup]) -> bool:
    """Evaluate condition groups against a record, folding left to right."""
    result = True
    for index, group in enumerate(groups):
        value = group_matches(record, group)
        if index == 0:
            result = value
        elif group.link == "OR":
            result = result or value
        else:
            result = result and value
    return result
