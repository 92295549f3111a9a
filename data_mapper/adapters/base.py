"""Shared adapter behaviour: temporal values, escaping, query logging."""

from __future__ import annotations

import datetime as dt
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from data_mapper.core.exceptions import UnsupportedOperationError
from data_mapper.core.query_log import query_log

if TYPE_CHECKING:
    from data_mapper.mapping.collection import Collection
    from data_mapper.query.builder import Query


def to_datetime(value: Any = None) -> dt.datetime:
    """Coerce None (now), a date, a timestamp or an ISO string to a datetime."""
    if value is None:
        return dt.datetime.now()
    if isinstance(value, dt.datetime):
        return value
    if isinstance(value, dt.date):
        return dt.datetime.combine(value, dt.time())
    if isinstance(value, dt.time):
        return dt.datetime.combine(dt.date.today(), value)
    if isinstance(value, (int, float)):
        return dt.datetime.fromtimestamp(value)
    if isinstance(value, str):
        try:
            return dt.datetime.fromisoformat(value)
        except ValueError:
            return dt.datetime.combine(dt.date.today(), dt.time.fromisoformat(value))
    raise TypeError(f"Cannot convert {type(value).__name__} to a datetime")


class BaseAdapter:
    """Base class for adapters storing temporal values as formatted text.

    Subclasses implement the data operations of StorageAdapter.
    """

    name = "adapter"

    FORMAT_DATE = "%Y-%m-%d"
    FORMAT_TIME = "%H:%M:%S"
    FORMAT_DATETIME = "%Y-%m-%d %H:%M:%S"

    def __init__(self, logger: structlog.stdlib.BoundLogger | None = None) -> None:
        self._logger = logger or structlog.get_logger(__name__)

    def date_format(self) -> str:
        return self.FORMAT_DATE

    def time_format(self) -> str:
        return self.FORMAT_TIME

    def datetime_format(self) -> str:
        return self.FORMAT_DATETIME

    def date(self, value: Any = None) -> Any:
        return to_datetime(value).strftime(self.FORMAT_DATE)

    def time(self, value: Any = None) -> Any:
        return to_datetime(value).strftime(self.FORMAT_TIME)

    def datetime(self, value: Any = None) -> Any:
        return to_datetime(value).strftime(self.FORMAT_DATETIME)

    def escape(self, value: Any) -> Any:
        return value

    def create_database(self, database: str) -> bool:
        raise UnsupportedOperationError(self.name, "creating databases")

    def drop_database(self, database: str) -> bool:
        raise UnsupportedOperationError(self.name, "dropping databases")

    def to_collection(self, query: Query, rows: Iterable[Mapping[str, Any]]) -> Collection:
        """Hand raw rows back to the query's mapper for assembly."""
        return query.mapper.collection(rows)

    def _log_query(self, query: str, data: Any = None) -> None:
        query_log.log(query, data)
        self._logger.debug("query_executed", adapter=self.name, query=query, data=data)
