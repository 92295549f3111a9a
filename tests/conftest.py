"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from data_mapper.adapters.memory import MemoryAdapter
from data_mapper.adapters.sqlite import SqliteAdapter
from data_mapper.core.config import ConnectionConfig
from data_mapper.core.mapper import Mapper
from data_mapper.core.query_log import query_log
from data_mapper.core.registry import MapperRegistry

# --- Mappers ---


class BlogMapper(Mapper):
    source = "test_blog"
    fields = {
        "id": {"type": "int", "primary": True},
        "title": {"type": "string", "required": True},
        "body": {"type": "text", "required": True},
        "date_created": {"type": "datetime"},
    }


class PostMapper(Mapper):
    source = "posts"
    fields = {
        "id": {"type": "int", "primary": True},
        "title": {"type": "string", "required": True},
        "author_id": {"type": "int"},
        "comments": {
            "type": "relation",
            "relation": "HasMany",
            "mapper": "CommentMapper",
            "where": {"self.id": "foreign.post_id"},
        },
        "author": {
            "type": "relation",
            "relation": "HasOne",
            "mapper": "AuthorMapper",
            "where": {"self.author_id": "foreign.id"},
        },
        "tags": {
            "type": "relation",
            "relation": "HasManyThrough",
            "mapper": "TagMapper",
            "through": "PostTagMapper",
            "where": {"self.id": "foreign.post_id"},
            "through_keys": {"tag_id": "id"},
        },
    }


class CommentMapper(Mapper):
    source = "comments"
    fields = {
        "id": {"type": "int", "primary": True},
        "post_id": {"type": "int", "index": True},
        "name": {"type": "string", "required": True},
        "body": {"type": "text"},
    }


class AuthorMapper(Mapper):
    source = "authors"
    fields = {
        "id": {"type": "int", "primary": True},
        "name": {"type": "string", "required": True},
        "email": {"type": "string", "unique": True},
    }


class TagMapper(Mapper):
    source = "tags"
    fields = {
        "id": {"type": "int", "primary": True},
        "name": {"type": "string", "required": True},
    }


class PostTagMapper(Mapper):
    source = "post_tags"
    fields = {
        "id": {"type": "int", "primary": True},
        "post_id": {"type": "int"},
        "tag_id": {"type": "int"},
    }


ALL_MAPPERS = (BlogMapper, PostMapper, CommentMapper, AuthorMapper, TagMapper, PostTagMapper)


# --- Fixtures ---


@pytest.fixture(autouse=True)
def clear_query_log() -> Iterator[None]:
    """Every test starts with an empty process-wide query log."""
    query_log.clear()
    yield
    query_log.clear()


@pytest.fixture
def registry() -> MapperRegistry:
    """Fresh registry holding every test mapper under its class name."""
    reg = MapperRegistry()
    for mapper_class in ALL_MAPPERS:
        reg.register(mapper_class)
    return reg


@pytest.fixture
def sqlite_config() -> ConnectionConfig:
    """SQLite in-memory connection config."""
    return ConnectionConfig(driver="sqlite", database=":memory:")


@pytest.fixture
def sqlite_adapter(sqlite_config: ConnectionConfig) -> Iterator[SqliteAdapter]:
    adapter = SqliteAdapter(sqlite_config)
    yield adapter
    adapter.close()


@pytest.fixture
def memory_adapter() -> MemoryAdapter:
    return MemoryAdapter()


@pytest.fixture(params=["sqlite", "memory"])
def any_adapter(request: pytest.FixtureRequest) -> Iterator[SqliteAdapter | MemoryAdapter]:
    """Each shipped adapter in turn."""
    if request.param == "sqlite":
        adapter = SqliteAdapter(ConnectionConfig(driver="sqlite"))
        yield adapter
        adapter.close()
    else:
        yield MemoryAdapter()


@pytest.fixture
def make_mapper(registry: MapperRegistry):
    """Helper to build a registered test mapper bound to an adapter.

    Usage:
        posts = make_mapper("PostMapper", sqlite_adapter)
    """

    def _make(name: str, adapter, *, migrate: bool = False) -> Mapper:
        mapper = registry.create(name, adapter)
        if migrate:
            mapper.migrate()
        return mapper

    return _make
