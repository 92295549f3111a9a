"""Integration tests against the in-process memory store."""

from __future__ import annotations

import datetime as dt

import pytest

from data_mapper.adapters.memory import MemoryAdapter
from data_mapper.core.config import ConnectionConfig, create_adapter
from data_mapper.core.exceptions import AdapterExecutionError
from data_mapper.core.mapper import Mapper
from data_mapper.mapping.entity import Entity


@pytest.mark.integration
class TestMemoryBlogScenario:
    @pytest.fixture
    def blog(self, make_mapper) -> Mapper:
        adapter = create_adapter(ConnectionConfig(driver="memory", database="blog"))
        mapper = make_mapper("BlogMapper", adapter)
        assert mapper.migrate() is True
        return mapper

    def test_lifecycle(self, blog: Mapper) -> None:
        post = blog.get()
        post.title = "Test Post"
        post.body = "<p>This is a really awesome super-duper post.</p>"
        post.date_created = blog.adapter().datetime()

        post_id = blog.save(post)
        assert post_id == 1

        found = blog.first({"title": "Test Post"})
        assert found.id == post_id
        assert isinstance(found.date_created, dt.datetime)

        found.title = "Test Post Modified"
        assert blog.save(found) is True
        assert blog.get(post_id).title == "Test Post Modified"

        assert blog.destroy(found) is True
        assert blog.first({"title": "Test Post Modified"}) is None

    def test_records_are_copies(self, blog: Mapper) -> None:
        post_id = blog.save(Entity(title="Original", body="..."))
        fetched = blog.get(post_id)
        fetched.title = "Changed locally"
        assert blog.get(post_id).title == "Original"

    def test_explicit_key_kept(self, blog: Mapper) -> None:
        assert blog.insert(Entity(id=42, title="Fixed", body="...")) == 42
        # Generated keys continue above explicit ones
        assert blog.insert(Entity(title="Next", body="...")) == 43

    def test_duplicate_key_rejected(self, blog: Mapper) -> None:
        blog.insert(Entity(id=1, title="One", body="..."))
        with pytest.raises(AdapterExecutionError, match="duplicate key"):
            blog.insert(Entity(id=1, title="Again", body="..."))

    def test_ordering_puts_none_first(self, blog: Mapper) -> None:
        blog.save(Entity(title="b", body="...", date_created=dt.datetime(2024, 1, 2)))
        blog.save(Entity(title="a", body="..."))
        blog.save(Entity(title="c", body="...", date_created=dt.datetime(2024, 1, 1)))
        titles = [p.title for p in blog.select().order("date_created")]
        assert titles == ["a", "c", "b"]


@pytest.mark.integration
class TestMemoryDatabases:
    def test_adapters_do_not_share_records(self, make_mapper) -> None:
        first = make_mapper("BlogMapper", MemoryAdapter(ConnectionConfig(driver="memory")))
        second = make_mapper("BlogMapper", MemoryAdapter(ConnectionConfig(driver="memory")))
        first.save(Entity(title="Only here", body="..."))
        assert len(first.all().execute()) == 1
        assert len(second.all().execute()) == 0

    def test_drop_datasource(self, make_mapper) -> None:
        blog = make_mapper("BlogMapper", MemoryAdapter(), migrate=True)
        blog.save(Entity(title="Gone", body="..."))
        assert blog.drop_datasource() is True
        assert len(blog.all().execute()) == 0
