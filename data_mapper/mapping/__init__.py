"""Mapping layer - field metadata, entities and result collections."""

from __future__ import annotations

from data_mapper.mapping.collection import Collection, assemble
from data_mapper.mapping.entity import Entity
from data_mapper.mapping.fields import (
    FieldDescriptor,
    FieldMetadata,
    RelationDescriptor,
    resolve_fields,
)

__all__ = [
    "Entity",
    "Collection",
    "assemble",
    "FieldDescriptor",
    "RelationDescriptor",
    "FieldMetadata",
    "resolve_fields",
]
