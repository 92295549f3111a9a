"""Result collections and single-pass result assembly."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any, overload

from data_mapper.mapping.entity import Entity


def _is_empty_key(value: Any) -> bool:
    return value is None or value == ""


class Collection:
    """Read-only ordered sequence of entities from a read.

    ``identities`` lists each distinct, non-empty primary key once, in
    first-seen order. Rows sharing a key all stay in the sequence.
    """

    def __init__(
        self,
        entities: Iterable[Entity] = (),
        identities: Iterable[Any] = (),
    ) -> None:
        self._entities: tuple[Entity, ...] = tuple(entities)
        self._identities: tuple[Any, ...] = tuple(identities)

    @property
    def identities(self) -> list[Any]:
        return list(self._identities)

    def first(self) -> Entity | None:
        return self._entities[0] if self._entities else None

    def to_dicts(self) -> list[dict[str, Any]]:
        return [entity.data() for entity in self._entities]

    def __len__(self) -> int:
        return len(self._entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self._entities)

    @overload
    def __getitem__(self, index: int) -> Entity: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Entity, ...]: ...

    def __getitem__(self, index: int | slice) -> Entity | tuple[Entity, ...]:
        return self._entities[index]

    def __repr__(self) -> str:
        return f"<Collection of {len(self._entities)} entities>"


def assemble(
    rows: Iterable[Mapping[str, Any]],
    entity_factory: Callable[[Mapping[str, Any]], Entity],
    resolve_relations: Callable[[Entity], Mapping[str, Any]] | None = None,
    primary_key: str | None = None,
    collection_class: type[Collection] = Collection,
) -> Collection:
    """Hydrate raw rows into a Collection in a single pass.

    Each row becomes an entity with its relation handles attached as fields,
    then is marked loaded. The row stream is closed on every exit path when
    it exposes ``close()``.

    Args:
        rows: Raw rows from the backend (dicts, or a closable row stream).
        entity_factory: Builds an entity from one row.
        resolve_relations: Returns relation handles to attach to an entity.
        primary_key: Name of the primary key field used for identities.
        collection_class: Collection type to return.
    """
    entities: list[Entity] = []
    identities: list[Any] = []
    seen: set[Any] = set()

    try:
        for row in rows:
            entity = entity_factory(row)

            if resolve_relations is not None:
                for field_name, relation in resolve_relations(entity).items():
                    entity[field_name] = relation

            entities.append(entity)

            if primary_key is not None:
                key = entity.get(primary_key)
                # First occurrence wins
                if not _is_empty_key(key) and key not in seen:
                    seen.add(key)
                    identities.append(key)

            entity.mark_loaded()
    finally:
        close = getattr(rows, "close", None)
        if close is not None:
            close()

    return collection_class(entities, identities)
