"""Backend-agnostic query builder.

A Query only records what to read. It is executed by handing it to the
owning mapper's read adapter, which is the single place where it is
translated for a backend::

    query = mapper.select().where({"status": "live"}).order("date_created", "DESC").limit(10)
    for post in query:
        ...
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from typing import TYPE_CHECKING, Any

from data_mapper.core.enums import SortDirection
from data_mapper.core.exceptions import QueryBuildError
from data_mapper.query.conditions import (
    Condition,
    ConditionGroup,
    normalize_conjunction,
    parse_conditions,
)

if TYPE_CHECKING:
    from data_mapper.core.mapper import Mapper
    from data_mapper.mapping.collection import Collection
    from data_mapper.mapping.entity import Entity

ConditionsInput = Mapping[str, Any] | Iterable[Condition | tuple[Any, ...]]


class Query:
    """Incrementally built description of a read operation.

    Every builder method mutates the query and returns it for chaining.
    """

    def __init__(self, mapper: Mapper) -> None:
        self.mapper = mapper
        self.source: str | None = None
        self.fields: list[str] = []
        self.conditions: list[ConditionGroup] = []
        self.order_by: dict[str, SortDirection] = {}
        self.group_by: list[str] = []
        self.limit_count: int | None = None
        self.limit_offset: int | None = None

    def select(self, fields: str | Iterable[str] = "*", source: str | None = None) -> Query:
        """Set the projection and the source to read from.

        ``"*"`` or an empty list selects every field.
        """
        if isinstance(fields, str):
            fields = [] if fields == "*" else [f.strip() for f in fields.split(",")]
        self.fields = [f for f in fields if f != "*"]
        if source is not None:
            self.source = source
        return self

    def from_(self, source: str) -> Query:
        self.source = source
        return self

    def where(
        self,
        conditions: ConditionsInput | None = None,
        conjunction: str = "AND",
        link: str = "AND",
    ) -> Query:
        """Add a group of conditions.

        Args:
            conditions: Mapping or ``(field, operator, value)`` tuples.
            conjunction: How conditions inside this group are joined.
            link: How this group joins the groups added before it.
        """
        if not conditions:
            return self
        group = ConditionGroup(
            conditions=parse_conditions(conditions),
            conjunction=normalize_conjunction(conjunction),
            link=normalize_conjunction(link),
        )
        self.conditions.append(group)
        return self

    def or_where(
        self, conditions: ConditionsInput | None = None, conjunction: str = "AND"
    ) -> Query:
        return self.where(conditions, conjunction, link="OR")

    def and_where(
        self, conditions: ConditionsInput | None = None, conjunction: str = "AND"
    ) -> Query:
        return self.where(conditions, conjunction, link="AND")

    def order(
        self,
        field: str | Mapping[str, str | SortDirection],
        direction: str | SortDirection = "ASC",
    ) -> Query:
        """Add sort keys. Earlier keys take precedence."""
        items = field.items() if isinstance(field, Mapping) else [(field, direction)]
        for name, value in items:
            self.order_by[name] = _sort_direction(value)
        return self

    def group(self, *fields: str) -> Query:
        """Group by the given fields. Adapters without grouping refuse the query."""
        self.group_by.extend(fields)
        return self

    def limit(self, count: int | None, offset: int | None = None) -> Query:
        if count is not None and count < 0:
            raise QueryBuildError(f"Limit must not be negative, got {count}")
        self.limit_count = count
        if offset is not None:
            self.offset(offset)
        return self

    def offset(self, offset: int) -> Query:
        if offset < 0:
            raise QueryBuildError(f"Offset must not be negative, got {offset}")
        self.limit_offset = offset
        return self

    # --- Execution ---

    def execute(self) -> Collection:
        """Run the query through the mapper's read adapter."""
        return self.mapper.adapter_read().read(self)

    def first(self) -> Entity | None:
        return self.execute().first()

    def __iter__(self) -> Iterator[Entity]:
        # One read per iteration
        return iter(self.execute())

    def __repr__(self) -> str:
        return (
            f"<Query source={self.source!r} fields={self.fields!r} "
            f"groups={len(self.conditions)} order={list(self.order_by)!r} "
            f"limit={self.limit_count!r} offset={self.limit_offset!r}>"
        )


def _sort_direction(value: str | SortDirection) -> SortDirection:
    if isinstance(value, SortDirection):
        return value
    try:
        return SortDirection(value.strip().upper())
    except ValueError:
        raise QueryBuildError(f"Sort direction must be ASC or DESC, got {value!r}") from None
