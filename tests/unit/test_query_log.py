"""Unit tests for the process-wide query log."""

from __future__ import annotations

import pytest

from data_mapper.core.query_log import QueryLog, QueryLogEntry


class TestQueryLog:
    def test_starts_empty(self) -> None:
        log = QueryLog()
        assert log.count() == 0
        assert log.entries() == []

    def test_appends_in_order(self) -> None:
        log = QueryLog()
        log.log("SELECT 1")
        log.log("INSERT INTO posts", {"title": "x"})
        assert len(log) == 2
        assert log.entries() == [
            QueryLogEntry("SELECT 1"),
            QueryLogEntry("INSERT INTO posts", {"title": "x"}),
        ]

    def test_entries_is_a_copy(self) -> None:
        log = QueryLog()
        log.log("SELECT 1")
        log.entries().clear()
        assert log.count() == 1

    def test_clear(self) -> None:
        log = QueryLog()
        log.log("SELECT 1")
        log.clear()
        assert log.count() == 0

    def test_entry_is_frozen(self) -> None:
        entry = QueryLogEntry("SELECT 1")
        with pytest.raises(AttributeError):
            entry.query = "SELECT 2"  # type: ignore[misc]
