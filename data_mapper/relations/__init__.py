"""Relation layer - lazy relation handles and their resolver."""

from __future__ import annotations

from data_mapper.relations.relation import HasMany, HasManyThrough, HasOne, Relation
from data_mapper.relations.resolver import RelationResolver

__all__ = [
    "Relation",
    "HasOne",
    "HasMany",
    "HasManyThrough",
    "RelationResolver",
]
