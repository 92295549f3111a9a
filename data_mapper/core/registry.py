"""Mapper registry - maps logical mapper names to factories.

Relations refer to their target mapper by name:

    "comments": {"type": "relation", "relation": "HasMany", "mapper": "CommentMapper", ...}

The name is looked up here. Factories are called as
``factory(adapter, registry=registry)``; Mapper subclasses satisfy that
signature directly.
"""

from __future__ import annotations

from typing import Any, Callable

from data_mapper.core.exceptions import DuplicateMapperError, MapperNotFoundError

MapperFactory = Callable[..., Any]


class MapperRegistry:
    """Registry of mapper factories keyed by logical name.

    Populate once at startup, then treat as read-only.
    """

    def __init__(self) -> None:
        self._factories: dict[str, MapperFactory] = {}

    def register(
        self,
        name_or_factory: str | MapperFactory | None = None,
        factory: MapperFactory | None = None,
    ) -> Any:
        """Register a mapper factory.

        Usable three ways::

            registry.register("posts", PostMapper)

            @registry.register
            class PostMapper(Mapper): ...

            @registry.register("posts")
            class PostMapper(Mapper): ...

        Raises:
            DuplicateMapperError: If the name is already registered.
        """
        if factory is not None:
            self._add(str(name_or_factory), factory)
            return factory

        if name_or_factory is not None and not isinstance(name_or_factory, str):
            self._add(name_or_factory.__name__, name_or_factory)
            return name_or_factory

        def decorator(target: MapperFactory) -> MapperFactory:
            self._add(name_or_factory or target.__name__, target)
            return target

        return decorator

    def _add(self, name: str, factory: MapperFactory) -> None:
        if name in self._factories:
            raise DuplicateMapperError(name)
        self._factories[name] = factory

    def get(self, name: str) -> MapperFactory:
        """Look up a factory by name.

        Raises:
            MapperNotFoundError: If no factory is registered under the name.
        """
        try:
            return self._factories[name]
        except KeyError:
            raise MapperNotFoundError(name) from None

    def create(self, target: str | MapperFactory, adapter: Any) -> Any:
        """Instantiate a mapper from a registered name or a factory given directly."""
        factory = self.get(target) if isinstance(target, str) else target
        return factory(adapter, registry=self)

    def has(self, name: str) -> bool:
        return name in self._factories

    @property
    def names(self) -> list[str]:
        """All registered names, sorted alphabetically."""
        return sorted(self._factories.keys())

    def __len__(self) -> int:
        return len(self._factories)


default_registry = MapperRegistry()
