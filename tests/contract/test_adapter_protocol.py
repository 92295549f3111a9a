"""Contract tests for storage adapter protocol compliance."""

from __future__ import annotations

import datetime as dt

import pytest

from data_mapper.adapters.base import to_datetime
from data_mapper.adapters.memory import MemoryAdapter
from data_mapper.adapters.protocol import StorageAdapter
from data_mapper.adapters.sqlite import SqliteAdapter
from data_mapper.core.exceptions import UnsupportedOperationError
from data_mapper.core.query_log import query_log
from data_mapper.mapping.entity import Entity


class TestSqliteAdapterProtocol:
    def test_implements_protocol(self) -> None:
        assert isinstance(SqliteAdapter(), StorageAdapter)

    def test_formats(self) -> None:
        adapter = SqliteAdapter()
        assert adapter.date_format() == "%Y-%m-%d"
        assert adapter.time_format() == "%H:%M:%S"
        assert adapter.datetime_format() == "%Y-%m-%d %H:%M:%S"

    def test_temporal_values_are_formatted_text(self) -> None:
        adapter = SqliteAdapter()
        moment = dt.datetime(2024, 5, 17, 13, 45, 9, 1234)
        assert adapter.date(moment) == "2024-05-17"
        assert adapter.time(moment) == "13:45:09"
        assert adapter.datetime(moment) == "2024-05-17 13:45:09"

    def test_escape_quotes_literals(self) -> None:
        adapter = SqliteAdapter()
        assert adapter.escape("O'Brien") == "'O''Brien'"
        assert adapter.escape(None) == "NULL"
        assert adapter.escape(True) == "1"
        assert adapter.escape(12) == "12"

    def test_databases_unsupported(self) -> None:
        adapter = SqliteAdapter()
        with pytest.raises(UnsupportedOperationError, match="SqliteAdapter"):
            adapter.create_database("other")
        with pytest.raises(UnsupportedOperationError):
            adapter.drop_database("other")


class TestMemoryAdapterProtocol:
    def test_implements_protocol(self) -> None:
        assert isinstance(MemoryAdapter(), StorageAdapter)

    def test_temporal_values_are_native(self) -> None:
        adapter = MemoryAdapter()
        moment = dt.datetime(2024, 5, 17, 13, 45, 9, 1234)
        assert adapter.date(moment) == dt.date(2024, 5, 17)
        assert adapter.time(moment) == dt.time(13, 45, 9)
        assert adapter.datetime(moment) == dt.datetime(2024, 5, 17, 13, 45, 9)

    def test_escape_is_identity(self) -> None:
        assert MemoryAdapter().escape("O'Brien") == "O'Brien"

    def test_grouping_unsupported(self, make_mapper) -> None:
        posts = make_mapper("PostMapper", MemoryAdapter())
        with pytest.raises(UnsupportedOperationError, match="grouping"):
            posts.select().group("author_id").execute()

    def test_update_requires_conditions(self) -> None:
        with pytest.raises(UnsupportedOperationError):
            MemoryAdapter().update("posts", {"title": "x"}, {})

    def test_databases(self) -> None:
        adapter = MemoryAdapter()
        assert adapter.create_database("archive") is True
        assert adapter.drop_database("archive") is True


class TestToDatetime:
    def test_none_is_now(self) -> None:
        before = dt.datetime.now()
        assert before <= to_datetime() <= dt.datetime.now()

    def test_date(self) -> None:
        assert to_datetime(dt.date(2024, 1, 2)) == dt.datetime(2024, 1, 2)

    def test_iso_string(self) -> None:
        assert to_datetime("2024-01-02 03:04:05") == dt.datetime(2024, 1, 2, 3, 4, 5)

    def test_time_string(self) -> None:
        assert to_datetime("03:04:05").time() == dt.time(3, 4, 5)

    def test_unsupported_type(self) -> None:
        with pytest.raises(TypeError):
            to_datetime([2024])


# --- Behaviour shared by every adapter ---


class TestAdapterBehaviour:
    @pytest.fixture
    def comments(self, any_adapter, make_mapper):
        mapper = make_mapper("CommentMapper", any_adapter, migrate=True)
        rows = [(1, "alpha"), (1, "beta"), (2, "gamma"), (3, "Delta"), (None, "epsilon")]
        for post_id, name in rows:
            mapper.insert(Entity(post_id=post_id, name=name))
        return mapper

    def test_create_returns_generated_keys(self, comments) -> None:
        assert [c.id for c in comments.all().order("id")] == [1, 2, 3, 4, 5]

    def test_equality_and_in(self, comments) -> None:
        assert len(comments.all({"post_id": 1}).execute()) == 2
        assert len(comments.all({"post_id": [2, 3]}).execute()) == 2

    def test_null_conditions(self, comments) -> None:
        assert [c.name for c in comments.all({"post_id": None})] == ["epsilon"]
        assert len(comments.all({"post_id !=": None}).execute()) == 4

    def test_not_equal_skips_null(self, comments) -> None:
        assert len(comments.all({"post_id !=": 1}).execute()) == 2

    def test_not_in_with_null_matches_nothing(self, comments) -> None:
        assert len(comments.all([("post_id", "not in", [1])]).execute()) == 2
        assert len(comments.all([("post_id", "not in", [1, None])]).execute()) == 0

    def test_like(self, comments) -> None:
        names = [c.name for c in comments.all({"name :like": "%ta"}).order("id")]
        assert names == ["beta", "Delta"]

    def test_or_groups(self, comments) -> None:
        query = comments.select().where({"post_id": 2}).or_where({"name": "alpha"})
        assert sorted(c.name for c in query) == ["alpha", "gamma"]

    def test_order_limit_offset(self, comments) -> None:
        query = comments.select().order("name", "DESC").limit(2, 1)
        # Binary collation: "Delta" sorts below every lower-case name
        assert [c.name for c in query] == ["epsilon", "beta"]
        assert [c.name for c in comments.select().order("name", "DESC")][-1] == "Delta"

    def test_offset_without_limit(self, comments) -> None:
        query = comments.select().order("id").offset(3)
        assert [c.id for c in query] == [4, 5]

    def test_projection(self, comments) -> None:
        entity = comments.select(["id", "name"]).order("id").first()
        assert entity.data() == {"id": 1, "name": "alpha"}

    def test_update_and_delete(self, comments) -> None:
        entity = comments.get(1)
        entity.name = "renamed"
        assert comments.save(entity) is True
        assert comments.get(1).name == "renamed"

        assert comments.delete({"post_id": 1}) is True
        assert len(comments.all().execute()) == 3

    def test_writes_report_unmatched_records(self, comments) -> None:
        assert comments.adapter().update("comments", {"name": "x"}, {"id": 404}) is False
        assert comments.delete({"id": 404}) is False

        vanished = comments.get(1)
        comments.delete({"id": 1})
        vanished.name = "too late"
        assert comments.save(vanished) is False
        assert comments.destroy(vanished) is False

    def test_truncate_resets_keys(self, comments) -> None:
        comments.truncate_datasource()
        assert len(comments.all().execute()) == 0
        assert comments.insert(Entity(name="again")) == 1

    def test_every_operation_is_logged(self, comments) -> None:
        before = query_log.count()
        list(comments.all())
        assert query_log.count() == before + 1
