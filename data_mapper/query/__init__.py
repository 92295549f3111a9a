"""Query layer - backend-agnostic query builder and condition grammar."""

from __future__ import annotations

from data_mapper.query.builder import Query
from data_mapper.query.conditions import (
    Condition,
    ConditionGroup,
    matches,
    parse_conditions,
)

__all__ = [
    "Query",
    "Condition",
    "ConditionGroup",
    "parse_conditions",
    "matches",
]
