"""data_mapper - entity mapping over pluggable storage adapters."""

from __future__ import annotations

from data_mapper.adapters.base import BaseAdapter
from data_mapper.adapters.memory import MemoryAdapter
from data_mapper.adapters.protocol import StorageAdapter
from data_mapper.adapters.sqlite import SqliteAdapter
from data_mapper.core.config import ConnectionConfig, create_adapter
from data_mapper.core.enums import FieldType, Operator, RelationKind, SortDirection
from data_mapper.core.exceptions import (
    AdapterError,
    AdapterExecutionError,
    ConfigurationError,
    DataMapperError,
    DuplicateMapperError,
    DuplicatePrimaryKeyError,
    FieldDeclarationError,
    MapperNotFoundError,
    MissingFieldsError,
    MissingPrimaryKeyError,
    MissingSourceError,
    QueryBuildError,
    RegistryError,
    UnsupportedOperationError,
)
from data_mapper.core.mapper import Mapper
from data_mapper.core.query_log import QueryLog, QueryLogEntry, query_log
from data_mapper.core.registry import MapperRegistry, default_registry
from data_mapper.mapping.collection import Collection
from data_mapper.mapping.entity import Entity
from data_mapper.mapping.fields import FieldDescriptor, RelationDescriptor, resolve_fields
from data_mapper.query.builder import Query
from data_mapper.relations.relation import HasMany, HasManyThrough, HasOne, Relation

__all__ = [
    # Mapper
    "Mapper",
    "Entity",
    "Collection",
    "Query",
    # Metadata
    "FieldDescriptor",
    "RelationDescriptor",
    "resolve_fields",
    # Relations
    "Relation",
    "HasOne",
    "HasMany",
    "HasManyThrough",
    # Registry
    "MapperRegistry",
    "default_registry",
    # Adapters
    "StorageAdapter",
    "BaseAdapter",
    "SqliteAdapter",
    "MemoryAdapter",
    "ConnectionConfig",
    "create_adapter",
    # Diagnostics
    "QueryLog",
    "QueryLogEntry",
    "query_log",
    # Enums
    "FieldType",
    "RelationKind",
    "SortDirection",
    "Operator",
    # Exceptions
    "DataMapperError",
    "ConfigurationError",
    "MissingSourceError",
    "MissingFieldsError",
    "FieldDeclarationError",
    "MissingPrimaryKeyError",
    "DuplicatePrimaryKeyError",
    "QueryBuildError",
    "UnsupportedOperationError",
    "RegistryError",
    "MapperNotFoundError",
    "DuplicateMapperError",
    "AdapterError",
    "AdapterExecutionError",
]
