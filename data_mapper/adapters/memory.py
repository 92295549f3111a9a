"""In-process document store adapter.

Schemaless: records are plain dicts grouped per source. Conditions are
evaluated with the shared condition grammar, so a query returns the same
records here as on a relational backend. Grouping is not supported.
"""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog

from data_mapper.adapters.base import BaseAdapter, to_datetime
from data_mapper.core.config import ConnectionConfig
from data_mapper.core.enums import SortDirection
from data_mapper.core.exceptions import (
    AdapterExecutionError,
    QueryBuildError,
    UnsupportedOperationError,
)
from data_mapper.query.conditions import ConditionGroup, matches, parse_conditions

if TYPE_CHECKING:
    from data_mapper.mapping.collection import Collection
    from data_mapper.mapping.fields import FieldDescriptor
    from data_mapper.query.builder import Query

DEFAULT_KEY = "id"


@dataclass
class _Store:
    """Records of one source keyed by primary key."""

    key: str = DEFAULT_KEY
    records: dict[Any, dict[str, Any]] = field(default_factory=dict)
    next_id: int = 1


def _conditions(conditions: Mapping[str, Any]) -> list[ConditionGroup]:
    if not conditions:
        return []
    return [ConditionGroup(conditions=parse_conditions(conditions))]


class MemoryAdapter(BaseAdapter):
    """Schemaless adapter keeping every record in process memory.

    The key column of a source is learned from migrate(); sources that were
    never migrated use ``id``. Integer keys are generated when a record is
    created without one.
    """

    name = "MemoryAdapter"

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        super().__init__(logger)
        self.config = config or ConnectionConfig(driver="memory")
        self._database = self.config.database
        self._databases: dict[str, dict[str, _Store]] = {self._database: {}}

    def _store(self, source: str) -> _Store:
        return self._databases[self._database].setdefault(source, _Store())

    # --- Data operations ---

    def create(self, source: str, data: Mapping[str, Any]) -> Any:
        store = self._store(source)
        record = dict(data)
        key = record.get(store.key)

        if key is None or key == "":
            key = store.next_id
            record[store.key] = key
        if key in store.records:
            raise AdapterExecutionError("create", f"duplicate key {key!r} in '{source}'")
        if isinstance(key, int) and key >= store.next_id:
            store.next_id = key + 1

        self._log_query(f"INSERT {source}", record)
        store.records[key] = record
        return key

    def read(self, query: Query) -> Collection:
        if query.group_by:
            raise UnsupportedOperationError(self.name, "grouping")
        if not query.source:
            raise QueryBuildError("Query has no source to read from")

        self._log_query(f"FIND {query.source}", repr(query))
        store = self._databases[self._database].get(query.source, _Store())
        rows = [dict(r) for r in store.records.values() if matches(r, query.conditions)]

        # Stable sorts applied last key first give multi-key ordering
        for name, direction in reversed(list(query.order_by.items())):
            try:
                rows.sort(
                    key=lambda r, n=name: (r.get(n) is not None, r.get(n)),
                    reverse=direction is SortDirection.DESC,
                )
            except TypeError as e:
                raise AdapterExecutionError("read", f"cannot order by '{name}': {e}") from e

        start = query.limit_offset or 0
        stop = None if query.limit_count is None else start + query.limit_count
        rows = rows[start:stop]

        if query.fields:
            rows = [{f: row.get(f) for f in query.fields} for row in rows]
        return self.to_collection(query, rows)

    def update(
        self,
        source: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
    ) -> bool:
        if not conditions:
            raise UnsupportedOperationError(self.name, "updating without conditions")
        if not data:
            raise QueryBuildError(f"Nothing to update in '{source}'")

        self._log_query(f"UPDATE {source}", {"data": dict(data), "where": dict(conditions)})
        groups = _conditions(conditions)
        matched = False
        for record in self._store(source).records.values():
            if matches(record, groups):
                record.update(data)
                matched = True
        return matched

    def delete(self, source: str, conditions: Mapping[str, Any]) -> bool:
        self._log_query(f"DELETE {source}", dict(conditions))
        store = self._store(source)
        groups = _conditions(conditions)
        doomed = [key for key, record in store.records.items() if matches(record, groups)]
        for key in doomed:
            del store.records[key]
        return bool(doomed)

    # --- Structure ---

    def migrate(self, source: str, fields: Mapping[str, FieldDescriptor]) -> bool:
        """Remember the key column. There is no schema to change."""
        store = self._store(source)
        for name, descriptor in fields.items():
            if descriptor.primary:
                store.key = name
        self._logger.debug("datasource_migrated", adapter=self.name, source=source, key=store.key)
        return True

    def truncate_datasource(self, source: str) -> bool:
        store = self._store(source)
        store.records.clear()
        store.next_id = 1
        return True

    def drop_datasource(self, source: str) -> bool:
        self._databases[self._database].pop(source, None)
        return True

    def create_database(self, database: str) -> bool:
        self._databases.setdefault(database, {})
        return True

    def drop_database(self, database: str) -> bool:
        self._databases.pop(database, None)
        if database == self._database:
            self._databases[database] = {}
        return True

    # --- Values ---

    def date(self, value: Any = None) -> dt.date:
        return to_datetime(value).date()

    def time(self, value: Any = None) -> dt.time:
        return to_datetime(value).time().replace(microsecond=0)

    def datetime(self, value: Any = None) -> dt.datetime:
        return to_datetime(value).replace(microsecond=0)
