"""Unit tests for MapperRegistry."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from data_mapper.core.exceptions import DuplicateMapperError, MapperNotFoundError
from data_mapper.core.registry import MapperRegistry


class TestMapperRegistry:
    def test_register_by_name(self) -> None:
        registry = MapperRegistry()
        factory = MagicMock()
        registry.register("posts", factory)
        assert registry.get("posts") is factory
        assert registry.has("posts") is True

    def test_register_as_decorator(self) -> None:
        registry = MapperRegistry()

        @registry.register
        class PostMapper:
            def __init__(self, adapter, registry=None) -> None:
                self.adapter = adapter

        assert registry.get("PostMapper") is PostMapper

    def test_register_as_named_decorator(self) -> None:
        registry = MapperRegistry()

        @registry.register("posts")
        class PostMapper:
            pass

        assert registry.get("posts") is PostMapper
        assert registry.has("PostMapper") is False

    def test_duplicate_name(self) -> None:
        registry = MapperRegistry()
        registry.register("posts", MagicMock())
        with pytest.raises(DuplicateMapperError, match="posts"):
            registry.register("posts", MagicMock())

    def test_not_found(self) -> None:
        registry = MapperRegistry()
        with pytest.raises(MapperNotFoundError, match="GhostMapper") as exc_info:
            registry.get("GhostMapper")
        assert exc_info.value.mapper_name == "GhostMapper"

    def test_create_by_name_passes_registry(self) -> None:
        registry = MapperRegistry()
        factory = MagicMock()
        registry.register("posts", factory)
        adapter = object()
        result = registry.create("posts", adapter)
        factory.assert_called_once_with(adapter, registry=registry)
        assert result is factory.return_value

    def test_create_from_factory_directly(self) -> None:
        registry = MapperRegistry()
        factory = MagicMock()
        registry.create(factory, "adapter")
        factory.assert_called_once_with("adapter", registry=registry)

    def test_names_sorted(self) -> None:
        registry = MapperRegistry()
        for name in ("b", "a", "c"):
            registry.register(name, MagicMock())
        assert registry.names == ["a", "b", "c"]
        assert len(registry) == 3

    def test_empty_registry(self) -> None:
        registry = MapperRegistry()
        assert len(registry) == 0
        assert registry.names == []
