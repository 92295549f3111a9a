"""Mapper - binds one entity type to one storage source.

Subclasses declare the source and its fields::

    class PostMapper(Mapper):
        source = "posts"
        fields = {
            "id": {"type": "int", "primary": True},
            "title": {"type": "string", "required": True},
            "comments": {
                "type": "relation",
                "relation": "HasMany",
                "mapper": "CommentMapper",
                "where": {"self.id": "foreign.post_id"},
            },
        }

Field declarations are resolved once per mapper class. Reads go through
the read adapter, writes through the primary adapter.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any, ClassVar

import structlog

from data_mapper.adapters.protocol import StorageAdapter
from data_mapper.core.exceptions import (
    MissingPrimaryKeyError,
    MissingSourceError,
    UnsupportedOperationError,
)
from data_mapper.core.query_log import QueryLogEntry, query_log
from data_mapper.core.registry import MapperRegistry, default_registry
from data_mapper.mapping.collection import Collection, assemble
from data_mapper.mapping.entity import Entity
from data_mapper.mapping.fields import (
    FieldDescriptor,
    FieldMetadata,
    RelationDescriptor,
    resolve_fields,
)
from data_mapper.query.builder import ConditionsInput, Query
from data_mapper.relations.relation import Relation
from data_mapper.relations.resolver import RelationResolver

Validator = Callable[[Any, Entity], Iterable[str]]

# Resolved metadata per mapper class
_METADATA: dict[type, FieldMetadata] = {}


def _is_empty_key(value: Any) -> bool:
    return value is None or value == ""


class Mapper:
    """Orchestrates reads and writes of one entity type.

    Args:
        adapter: Storage adapter used for writes (and reads by default).
        adapter_read: Optional separate adapter for reads, e.g. a replica.
        registry: Registry used to locate related mappers.
        logger: Optional structlog logger.

    Raises:
        TypeError: If an adapter does not implement StorageAdapter.
        MissingSourceError: If the subclass does not define ``source``.
        ConfigurationError: If the field declarations are invalid.
    """

    source: ClassVar[str | None] = None
    fields: ClassVar[Mapping[str, Mapping[str, Any]]] = {}
    validators: ClassVar[Sequence[Validator]] = ()

    entity_class: ClassVar[type[Entity]] = Entity
    query_class: ClassVar[type[Query]] = Query
    collection_class: ClassVar[type[Collection]] = Collection

    def __init__(
        self,
        adapter: StorageAdapter,
        adapter_read: StorageAdapter | None = None,
        *,
        registry: MapperRegistry | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        if not isinstance(adapter, StorageAdapter):
            raise TypeError("Adapter must implement the StorageAdapter protocol")
        if adapter_read is not None and not isinstance(adapter_read, StorageAdapter):
            raise TypeError("Read adapter must implement the StorageAdapter protocol")

        self._adapter = adapter
        self._adapter_read = adapter_read
        self._registry = registry if registry is not None else default_registry
        self._logger = logger or structlog.get_logger(__name__)
        self._errors: list[str] = []

        if not self.source:
            raise MissingSourceError(type(self).__name__)
        self._metadata = self._resolve_metadata()
        self._relations = RelationResolver(self, self._registry, self._logger)

    @classmethod
    def _resolve_metadata(cls) -> FieldMetadata:
        if cls not in _METADATA:
            _METADATA[cls] = resolve_fields(cls.fields, cls.__name__)
        return _METADATA[cls]

    # --- Accessors ---

    def adapter(self) -> StorageAdapter:
        return self._adapter

    def adapter_read(self) -> StorageAdapter:
        """Adapter serving reads: the read adapter if given, else the primary one."""
        return self._adapter_read if self._adapter_read is not None else self._adapter

    def get_source(self) -> str:
        return str(self.source)

    def get_fields(self) -> dict[str, FieldDescriptor]:
        return dict(self._metadata.fields)

    def get_relations(self) -> dict[str, RelationDescriptor]:
        return dict(self._metadata.relations)

    def field_exists(self, name: str) -> bool:
        return name in self._metadata.fields

    def primary_key_field(self) -> str:
        if self._metadata.primary_key is None:
            raise MissingPrimaryKeyError(type(self).__name__)
        return self._metadata.primary_key

    def primary_key(self, entity: Entity) -> Any:
        return entity.get(self.primary_key_field())

    # --- Reads ---

    def get(self, primary_key_value: Any = None) -> Entity | None:
        """Return a new empty entity, or the entity with the given primary key."""
        if _is_empty_key(primary_key_value):
            return self.entity_class()
        return self.first({self.primary_key_field(): primary_key_value})

    def first(self, conditions: ConditionsInput | None = None) -> Entity | None:
        """Return the first entity matching conditions, or None."""
        return self.select().where(conditions).limit(1).execute().first()

    def all(self, conditions: ConditionsInput | None = None) -> Query:
        """Return a query for all entities matching conditions (all when empty)."""
        return self.select().where(conditions)

    def select(self, fields: str | Iterable[str] = "*") -> Query:
        """Begin a query against this mapper's source."""
        query = self.query_class(self)
        return query.select(fields, self.get_source())

    def query(
        self,
        statement: str,
        binds: Mapping[str, Any] | Sequence[Any] | None = None,
    ) -> Collection:
        """Run a raw backend statement and assemble its rows into entities.

        Raises:
            UnsupportedOperationError: If the read adapter cannot run raw statements.
        """
        adapter = self.adapter_read()
        fetch = getattr(adapter, "fetch", None)
        if fetch is None:
            raise UnsupportedOperationError(type(adapter).__name__, "raw queries")
        return self.collection(fetch(statement, binds))

    def collection(self, rows: Iterable[Mapping[str, Any]]) -> Collection:
        """Assemble raw rows into a Collection of loaded entities."""
        return assemble(
            rows,
            self.entity_class,
            self.get_relations_for,
            self._metadata.primary_key,
            self.collection_class,
        )

    def get_relations_for(self, entity: Entity) -> dict[str, Relation]:
        return self._relations.resolve_for(entity)

    # --- Writes ---

    def save(self, entity: Entity) -> Any:
        """Validate, then insert (no primary key) or update (has primary key).

        Returns False without touching storage when validation fails;
        the messages are available from get_errors().
        """
        if not self.validate(entity):
            self._logger.info("save_rejected", mapper=type(self).__name__, errors=self.get_errors())
            return False

        if _is_empty_key(self.primary_key(entity)):
            return self.insert(entity)
        return self.update(entity)

    def insert(self, entity: Entity) -> Any:
        """Insert known fields of the entity and write the new key back to it."""
        pk_field = self.primary_key_field()
        data = {
            name: None if self.is_empty(value) else value
            for name, value in entity.data().items()
            if self.field_exists(name)
        }
        # Let the backend generate the key
        if data.get(pk_field) is None:
            data.pop(pk_field, None)

        if not data:
            self.add_error(f"No field data to insert into '{self.source}'")
            return False

        result = self._adapter.create(self.get_source(), data)
        entity[pk_field] = result
        entity.mark_loaded()
        self._logger.debug(
            "entity_inserted", mapper=type(self).__name__, source=self.source, primary_key=result
        )

        self._save_related(entity)
        return result

    def update(self, entity: Entity) -> bool:
        """Write only the modified known fields of the entity."""
        pk_field = self.primary_key_field()
        pk = entity.get(pk_field)
        if _is_empty_key(pk):
            self.add_error(f"Cannot update a record of '{self.source}' without a primary key")
            return False

        data = {
            name: None if self.is_empty(value) else value
            for name, value in entity.modified_fields().items()
            if self.field_exists(name) and name != pk_field
        }

        result = True
        if data:
            result = self._adapter.update(self.get_source(), data, {pk_field: pk})
            self._logger.debug(
                "entity_updated",
                mapper=type(self).__name__,
                source=self.source,
                primary_key=pk,
                fields=sorted(data),
            )

        if not result:
            self.add_error(f"No record of '{self.source}' matched primary key {pk!r}")
            return False

        entity.mark_loaded()
        self._save_related(entity)
        return result

    def _save_related(self, entity: Entity) -> None:
        # The primary write is already committed; failures here do not undo it
        errors = self._relations.save_related(entity)
        if errors:
            self.add_errors(errors)
            self._logger.warning("cascade_failed", mapper=type(self).__name__, errors=errors)

    def destroy(self, entity: Entity) -> bool:
        """Delete the stored record of the entity."""
        pk_field = self.primary_key_field()
        pk = entity.get(pk_field)
        if _is_empty_key(pk):
            self.add_error(f"Cannot destroy a record of '{self.source}' without a primary key")
            return False
        result = self.delete({pk_field: pk})
        self._logger.debug(
            "entity_destroyed", mapper=type(self).__name__, source=self.source, primary_key=pk
        )
        return result

    def delete(self, conditions: Mapping[str, Any]) -> bool:
        """Delete every record matching conditions."""
        return self._adapter.delete(self.get_source(), conditions)

    # --- Structure ---

    def migrate(self) -> bool:
        """Sync the source's structure with the declared fields."""
        result = self._adapter.migrate(self.get_source(), self.get_fields())
        self._logger.info("datasource_migrated", mapper=type(self).__name__, source=self.source)
        return result

    def truncate_datasource(self) -> bool:
        """Delete all records and reset generated keys."""
        return self._adapter.truncate_datasource(self.get_source())

    def drop_datasource(self) -> bool:
        """Drop the source with all of its data."""
        return self._adapter.drop_datasource(self.get_source())

    # --- Validation ---

    def validate(self, entity: Entity) -> bool:
        """Run required-field checks and the declared validators.

        Clears the errors of any previous validation.
        """
        self._errors = []
        for name, descriptor in self._metadata.fields.items():
            if descriptor.required and self.is_empty(entity.get(name)):
                self.add_error(f"Required field '{name}' was left blank")

        for validator in self.validators:
            self.add_errors(validator(self, entity))

        return not self.has_errors()

    @staticmethod
    def is_empty(value: Any) -> bool:
        """True for None, empty strings and empty containers. 0 and False are values."""
        if value is None:
            return True
        if isinstance(value, (str, bytes, list, tuple, dict, set, frozenset)):
            return len(value) == 0
        return False

    def has_errors(self) -> bool:
        return bool(self._errors)

    def get_errors(self) -> list[str]:
        return list(self._errors)

    def add_error(self, message: str) -> None:
        self._errors.append(message)

    def add_errors(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.add_error(message)

    # --- Adapter shortcuts ---

    def date_format(self) -> str:
        return self._adapter.date_format()

    def time_format(self) -> str:
        return self._adapter.time_format()

    def datetime_format(self) -> str:
        return self._adapter.datetime_format()

    # --- Diagnostics ---

    def query_count(self) -> int:
        """Number of statements executed by all adapters in this process."""
        return query_log.count()

    def debug(self) -> list[QueryLogEntry]:
        """Log and return every executed statement."""
        entries = query_log.entries()
        self._logger.info(
            "query_log",
            count=len(entries),
            entries=[{"query": e.query, "data": e.data} for e in entries],
        )
        return entries
