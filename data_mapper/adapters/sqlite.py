"""SQLite adapter using stdlib sqlite3.

Compiles Query objects and condition groups to SQL. Identifiers are
validated and double-quoted; values are always bound as named parameters.
"""

from __future__ import annotations

import re
import sqlite3
from collections.abc import Iterator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

import structlog

from data_mapper.adapters.base import BaseAdapter
from data_mapper.core.config import ConnectionConfig
from data_mapper.core.enums import FieldType, Operator
from data_mapper.core.exceptions import AdapterExecutionError, QueryBuildError
from data_mapper.query.conditions import Condition, ConditionGroup, parse_conditions

if TYPE_CHECKING:
    from data_mapper.mapping.collection import Collection
    from data_mapper.mapping.fields import FieldDescriptor
    from data_mapper.query.builder import Query

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_COLUMN_TYPES: dict[FieldType, str] = {
    FieldType.STRING: "VARCHAR",
    FieldType.TEXT: "TEXT",
    FieldType.INT: "INTEGER",
    FieldType.FLOAT: "REAL",
    FieldType.BOOL: "BOOLEAN",
    FieldType.DATE: "DATE",
    FieldType.TIME: "TIME",
    FieldType.DATETIME: "DATETIME",
}


def quote_identifier(name: str) -> str:
    """Validate and double-quote a table or column name."""
    if not _IDENTIFIER.match(name):
        raise QueryBuildError(f"Invalid identifier: {name!r}")
    return f'"{name}"'


def _bind(params: dict[str, Any], value: Any) -> str:
    name = f"p{len(params)}"
    params[name] = value
    return ":" + name


def _compile_condition(condition: Condition, params: dict[str, Any]) -> str:
    column = quote_identifier(condition.field)
    op = condition.operator
    value = condition.value

    if op is Operator.EQ and value is None:
        return f"{column} IS NULL"
    if op is Operator.NE and value is None:
        return f"{column} IS NOT NULL"
    if op in (Operator.IN, Operator.NOT_IN):
        if not value:
            # Empty IN never matches; empty NOT IN matches every non-null value
            return "0 = 1" if op is Operator.IN else f"{column} IS NOT NULL"
        placeholders = ", ".join(_bind(params, v) for v in value)
        return f"{column} {op.value} ({placeholders})"
    return f"{column} {op.value} {_bind(params, value)}"


def compile_conditions(groups: Sequence[ConditionGroup], params: dict[str, Any]) -> str:
    """Compile condition groups, nesting them left to right."""
    sql = ""
    for index, group in enumerate(groups):
        joiner = f" {group.conjunction} "
        clause = "(" + joiner.join(_compile_condition(c, params) for c in group.conditions) + ")"
        sql = clause if index == 0 else f"({sql} {group.link} {clause})"
    return sql


def _column_definition(descriptor: FieldDescriptor) -> str:
    column_type = _COLUMN_TYPES[descriptor.type]
    length = descriptor.length
    if descriptor.type is FieldType.STRING and isinstance(length, int):
        column_type = f"{column_type}({length})"
    elif descriptor.type is FieldType.FLOAT and isinstance(length, tuple):
        column_type = f"NUMERIC({length[0]}, {length[1]})"

    parts = [quote_identifier(descriptor.name), column_type]
    if descriptor.primary:
        parts.append("PRIMARY KEY")
        if descriptor.auto_increment and descriptor.type is FieldType.INT:
            parts.append("AUTOINCREMENT")
    elif not descriptor.nullable:
        parts.append("NOT NULL")
    if descriptor.default is not None:
        parts.append(f"DEFAULT {SqliteAdapter.escape_literal(descriptor.default)}")
    return " ".join(parts)


class RowStream:
    """Iterates cursor rows as dicts. close() releases the cursor."""

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self._cursor = cursor

    def __iter__(self) -> Iterator[dict[str, Any]]:
        for row in self._cursor:
            yield dict(row)

    def close(self) -> None:
        self._cursor.close()


class SqliteAdapter(BaseAdapter):
    """Relational adapter backed by a single sqlite3 connection."""

    name = "SqliteAdapter"

    def __init__(
        self,
        config: ConnectionConfig | None = None,
        *,
        connection: sqlite3.Connection | None = None,
        logger: structlog.stdlib.BoundLogger | None = None,
    ) -> None:
        super().__init__(logger)
        self.config = config or ConnectionConfig(driver="sqlite")
        self._connection = connection
        if connection is not None:
            connection.row_factory = sqlite3.Row

    def connection(self) -> sqlite3.Connection:
        """Return the connection, opening it on first use."""
        if self._connection is None:
            try:
                self._connection = sqlite3.connect(
                    self.config.database, timeout=self.config.timeout
                )
            except sqlite3.Error as e:
                raise AdapterExecutionError("connect", str(e)) from e
            self._connection.row_factory = sqlite3.Row
        return self._connection

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None

    def _execute(
        self,
        operation: str,
        sql: str,
        params: Mapping[str, Any] | Sequence[Any] | None = None,
        *,
        commit: bool = False,
    ) -> sqlite3.Cursor:
        self._log_query(sql, params)
        conn = self.connection()
        try:
            cursor = conn.execute(sql, params or {})
            if commit:
                conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            raise AdapterExecutionError(operation, str(e)) from e
        return cursor

    # --- Data operations ---

    def create(self, source: str, data: Mapping[str, Any]) -> Any:
        params: dict[str, Any] = {}
        columns = ", ".join(quote_identifier(column) for column in data)
        values = ", ".join(_bind(params, value) for value in data.values())
        sql = f"INSERT INTO {quote_identifier(source)} ({columns}) VALUES ({values})"
        cursor = self._execute("create", sql, params, commit=True)
        return cursor.lastrowid

    def read(self, query: Query) -> Collection:
        sql, params = self.compile_select(query)
        cursor = self._execute("read", sql, params)
        return self.to_collection(query, RowStream(cursor))

    def compile_select(self, query: Query) -> tuple[str, dict[str, Any]]:
        """Compile a Query into a SELECT statement and its parameters."""
        if not query.source:
            raise QueryBuildError("Query has no source to select from")
        params: dict[str, Any] = {}
        columns = ", ".join(quote_identifier(f) for f in query.fields) if query.fields else "*"
        sql = f"SELECT {columns} FROM {quote_identifier(query.source)}"

        if query.conditions:
            sql += " WHERE " + compile_conditions(query.conditions, params)
        if query.group_by:
            sql += " GROUP BY " + ", ".join(quote_identifier(f) for f in query.group_by)
        if query.order_by:
            sql += " ORDER BY " + ", ".join(
                f"{quote_identifier(f)} {direction.value}"
                for f, direction in query.order_by.items()
            )
        if query.limit_count is not None or query.limit_offset is not None:
            limit = -1 if query.limit_count is None else query.limit_count
            sql += f" LIMIT {_bind(params, limit)}"
            if query.limit_offset:
                sql += f" OFFSET {_bind(params, query.limit_offset)}"
        return sql, params

    def update(
        self,
        source: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
    ) -> bool:
        if not data:
            raise QueryBuildError(f"Nothing to update in '{source}'")
        params: dict[str, Any] = {}
        assignments = ", ".join(
            f"{quote_identifier(column)} = {_bind(params, value)}"
            for column, value in data.items()
        )
        sql = f"UPDATE {quote_identifier(source)} SET {assignments}"
        sql += self._where(conditions, params)
        cursor = self._execute("update", sql, params, commit=True)
        return cursor.rowcount > 0

    def delete(self, source: str, conditions: Mapping[str, Any]) -> bool:
        params: dict[str, Any] = {}
        sql = f"DELETE FROM {quote_identifier(source)}" + self._where(conditions, params)
        cursor = self._execute("delete", sql, params, commit=True)
        return cursor.rowcount > 0

    def _where(self, conditions: Mapping[str, Any], params: dict[str, Any]) -> str:
        if not conditions:
            return ""
        group = ConditionGroup(conditions=parse_conditions(conditions))
        return " WHERE " + compile_conditions([group], params)

    def fetch(
        self,
        statement: str,
        binds: Mapping[str, Any] | Sequence[Any] | None = None,
    ) -> RowStream:
        """Run a raw statement and return its rows as a closable stream."""
        return RowStream(self._execute("fetch", statement, binds))

    # --- Structure ---

    def _table_exists(self, source: str) -> bool:
        cursor = self._execute(
            "migrate",
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name = :name",
            {"name": source},
        )
        try:
            return cursor.fetchone() is not None
        finally:
            cursor.close()

    def migrate(self, source: str, fields: Mapping[str, FieldDescriptor]) -> bool:
        """Create the table, or add columns missing from an existing one."""
        table = quote_identifier(source)
        if not self._table_exists(source):
            columns = ", ".join(_column_definition(d) for d in fields.values())
            self._execute("migrate", f"CREATE TABLE {table} ({columns})")
            self._logger.info("datasource_created", source=source, columns=len(fields))
        else:
            cursor = self._execute("migrate", f"PRAGMA table_info({table})")
            existing = {row["name"] for row in cursor.fetchall()}
            for name, descriptor in fields.items():
                if name in existing:
                    continue
                if descriptor.primary:
                    raise AdapterExecutionError(
                        "migrate", f"cannot add primary key column '{name}' to '{source}'"
                    )
                self._execute(
                    "migrate", f"ALTER TABLE {table} ADD COLUMN {_column_definition(descriptor)}"
                )
                self._logger.info("column_added", source=source, column=name)

        for name, descriptor in fields.items():
            if descriptor.primary or not (descriptor.index or descriptor.unique):
                continue
            unique = "UNIQUE " if descriptor.unique else ""
            index_name = quote_identifier(f"{source}_{name}_idx")
            self._execute(
                "migrate",
                f"CREATE {unique}INDEX IF NOT EXISTS {index_name} "
                f"ON {table} ({quote_identifier(name)})",
            )

        self.connection().commit()
        return True

    def truncate_datasource(self, source: str) -> bool:
        self._execute("truncate", f"DELETE FROM {quote_identifier(source)}")
        if self._table_exists("sqlite_sequence"):
            self._execute(
                "truncate",
                "DELETE FROM sqlite_sequence WHERE name = :name",
                {"name": source},
            )
        self.connection().commit()
        return True

    def drop_datasource(self, source: str) -> bool:
        self._execute("drop", f"DROP TABLE IF EXISTS {quote_identifier(source)}", commit=True)
        return True

    # --- Values ---

    @staticmethod
    def escape_literal(value: Any) -> str:
        """Render a value as an SQL literal."""
        if value is None:
            return "NULL"
        if isinstance(value, bool):
            return "1" if value else "0"
        if isinstance(value, (int, float)):
            return repr(value)
        return "'" + str(value).replace("'", "''") + "'"

    def escape(self, value: Any) -> str:
        return self.escape_literal(value)
