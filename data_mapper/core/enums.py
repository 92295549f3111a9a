"""Enumerations shared across the mapper, query and adapter layers."""

from __future__ import annotations

from enum import Enum


class FieldType(Enum):
    """Storage types a field declaration may use."""

    STRING = "string"
    TEXT = "text"
    INT = "int"
    FLOAT = "float"
    BOOL = "bool"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    RELATION = "relation"


class RelationKind(Enum):
    """Supported relation kinds."""

    HAS_ONE = "HasOne"
    HAS_MANY = "HasMany"
    HAS_MANY_THROUGH = "HasManyThrough"


class SortDirection(Enum):
    ASC = "ASC"
    DESC = "DESC"


class Operator(Enum):
    """Canonical comparison operators of the condition grammar."""

    EQ = "="
    NE = "!="
    LT = "<"
    LTE = "<="
    GT = ">"
    GTE = ">="
    LIKE = "LIKE"
    IN = "IN"
    NOT_IN = "NOT IN"
