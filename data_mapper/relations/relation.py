"""Lazy relation handles.

A handle is bound to one entity: it carries the related mapper and the
foreign-key values read from that entity. No query runs until the related
data is first used; the result is then cached on the handle.
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import TYPE_CHECKING, Any, ClassVar

from data_mapper.core.enums import RelationKind
from data_mapper.mapping.collection import Collection

if TYPE_CHECKING:
    from data_mapper.core.mapper import Mapper
    from data_mapper.mapping.entity import Entity
    from data_mapper.mapping.fields import RelationDescriptor


class Relation:
    """Base relation handle."""

    kind: ClassVar[RelationKind]

    def __init__(
        self,
        mapper: Mapper,
        foreign_keys: Mapping[str, Any],
        descriptor: RelationDescriptor,
    ) -> None:
        self._mapper = mapper
        self._foreign_keys = dict(foreign_keys)
        self._descriptor = descriptor
        self._collection: Collection | None = None

    @property
    def mapper(self) -> Mapper:
        return self._mapper

    @property
    def descriptor(self) -> RelationDescriptor:
        return self._descriptor

    @property
    def foreign_keys(self) -> dict[str, Any]:
        """Related column -> value bound from the owning entity."""
        return dict(self._foreign_keys)

    @property
    def is_loaded(self) -> bool:
        return self._collection is not None

    def conditions(self) -> dict[str, Any]:
        return {**self._descriptor.where, **self._foreign_keys}

    def execute(self) -> Collection:
        return self._mapper.all(self.conditions()).execute()

    def collection(self) -> Collection:
        """Fetch the related entities once and cache them."""
        if self._collection is None:
            self._collection = self.execute()
        return self._collection

    def first(self) -> Entity | None:
        return self.collection().first()

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.collection())

    def __len__(self) -> int:
        return len(self.collection())

    def __getitem__(self, index: int) -> Entity:
        return self.collection()[index]

    def __repr__(self) -> str:
        state = "loaded" if self.is_loaded else "deferred"
        return (
            f"<{type(self).__name__} {self._descriptor.name!r} -> "
            f"{type(self._mapper).__name__} {self._foreign_keys!r} ({state})>"
        )


class HasMany(Relation):
    kind = RelationKind.HAS_MANY


class HasOne(Relation):
    """Single related entity. Attribute reads and writes proxy to it."""

    kind = RelationKind.HAS_ONE

    def execute(self) -> Collection:
        return self._mapper.all(self.conditions()).limit(1).execute()

    def entity(self) -> Entity | None:
        return self.first()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        entity = self.entity()
        if entity is None:
            raise AttributeError(f"Relation '{self._descriptor.name}' has no related entity")
        return getattr(entity, name)

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_"):
            object.__setattr__(self, name, value)
            return
        entity = self.entity()
        if entity is None:
            raise AttributeError(f"Relation '{self._descriptor.name}' has no related entity")
        setattr(entity, name, value)


class HasManyThrough(Relation):
    """Related entities reached through an intermediate mapper.

    The bound foreign keys select rows of the ``through`` mapper;
    ``through_keys`` (through column -> target column) then select the
    target rows.
    """

    kind = RelationKind.HAS_MANY_THROUGH

    def __init__(
        self,
        mapper: Mapper,
        foreign_keys: Mapping[str, Any],
        descriptor: RelationDescriptor,
        through_mapper: Mapper,
    ) -> None:
        super().__init__(mapper, foreign_keys, descriptor)
        self._through_mapper = through_mapper

    @property
    def through_mapper(self) -> Mapper:
        return self._through_mapper

    def execute(self) -> Collection:
        links = self._through_mapper.all(self._foreign_keys).execute()
        conditions: list[tuple[str, str, Any]] = []
        for through_column, target_column in self._descriptor.through_keys.items():
            values = {link.get(through_column) for link in links} - {None}
            if not values:
                return Collection()
            conditions.append((target_column, "in", sorted(values)))
        query = self._mapper.all(conditions)
        if self._descriptor.where:
            query.where(self._descriptor.where)
        return query.execute()


RELATION_CLASSES: dict[RelationKind, type[Relation]] = {
    RelationKind.HAS_ONE: HasOne,
    RelationKind.HAS_MANY: HasMany,
    RelationKind.HAS_MANY_THROUGH: HasManyThrough,
}
