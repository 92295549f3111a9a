"""Relation resolution and cascading saves."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from data_mapper.core.enums import RelationKind
from data_mapper.core.exceptions import MapperNotFoundError
from data_mapper.mapping.collection import Collection
from data_mapper.mapping.entity import Entity
from data_mapper.relations.relation import RELATION_CLASSES, HasManyThrough, Relation

if TYPE_CHECKING:
    from data_mapper.core.mapper import Mapper
    from data_mapper.core.registry import MapperRegistry
    from data_mapper.mapping.fields import RelationDescriptor


class RelationResolver:
    """Builds per-entity relation handles for one owning mapper.

    Target mappers are looked up in the registry and share the owning
    mapper's adapter. A target that cannot be found is skipped so the
    owning entity stays readable.
    """

    def __init__(
        self,
        owner: Mapper,
        registry: MapperRegistry,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        self._owner = owner
        self._registry = registry
        self._logger = logger or structlog.get_logger(__name__)

    def resolve_for(self, entity: Entity) -> dict[str, Relation]:
        """Return fresh relation handles bound to this entity's current values."""
        relations: dict[str, Relation] = {}
        for name, descriptor in self._owner.get_relations().items():
            relation = self._build(entity, descriptor)
            if relation is not None:
                relations[name] = relation
        return relations

    def _target(self, target: str | type, descriptor: RelationDescriptor) -> Mapper | None:
        try:
            return self._registry.create(target, self._owner.adapter())
        except MapperNotFoundError as e:
            self._logger.warning(
                "relation_skipped",
                mapper=type(self._owner).__name__,
                relation=descriptor.name,
                reason=str(e),
            )
            return None

    def _build(self, entity: Entity, descriptor: RelationDescriptor) -> Relation | None:
        mapper = self._target(descriptor.mapper, descriptor)
        if mapper is None:
            return None

        foreign_keys = {
            foreign: entity.get(local) for local, foreign in descriptor.foreign_keys.items()
        }

        if descriptor.kind is RelationKind.HAS_MANY_THROUGH:
            through_mapper = self._target(descriptor.through, descriptor)
            if through_mapper is None:
                return None
            return HasManyThrough(mapper, foreign_keys, descriptor, through_mapper)

        return RELATION_CLASSES[descriptor.kind](mapper, foreign_keys, descriptor)

    def save_related(self, entity: Entity) -> list[str]:
        """Save modified child records held in the entity's relation fields.

        Each modified child receives the parent's foreign-key values before
        it is saved through the related mapper. Unmodified children are left
        alone. Returns error messages from children that failed validation.
        """
        errors: list[str] = []
        for name, descriptor in self._owner.get_relations().items():
            if name not in entity:
                continue
            children = _children(entity[name])
            if not children:
                continue
            if descriptor.kind is RelationKind.HAS_MANY_THROUGH:
                self._logger.debug("cascade_skipped", relation=name, reason="read-only relation")
                continue

            relation = self._build(entity, descriptor)
            if relation is None:
                continue
            related_mapper = relation.mapper

            for child in children:
                if isinstance(child, Mapping):
                    record = related_mapper.get()
                    record.set_data(child)
                    child = record
                if not child.modified_fields():
                    continue

                child.set_data(relation.foreign_keys)
                if related_mapper.save(child) is False:
                    errors.extend(f"{name}: {message}" for message in related_mapper.get_errors())
        return errors


def _children(value: Any) -> list[Any]:
    """Child records held by a relation field, or an empty list."""
    if isinstance(value, Relation):
        # Only data the caller already loaded (and may have changed)
        return list(value.collection()) if value.is_loaded else []
    if isinstance(value, (Entity, Mapping)):
        return [value]
    if isinstance(value, (list, tuple, Collection)):
        for child in value:
            if not isinstance(child, (Entity, Mapping)):
                raise TypeError(
                    f"Related rows must be entities or mappings, got {type(child).__name__}"
                )
        return list(value)
    return []
