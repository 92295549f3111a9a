"""Storage adapter protocol.

Every adapter MUST implement this protocol. It is the only coupling point
between the mapper core and a backend: the core never branches on which
adapter it talks to.

An adapter that cannot perform an operation raises
UnsupportedOperationError instead of reporting a misleading success.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from data_mapper.mapping.collection import Collection
    from data_mapper.mapping.fields import FieldDescriptor
    from data_mapper.query.builder import Query


@runtime_checkable
class StorageAdapter(Protocol):
    """Storage backend protocol."""

    def create(self, source: str, data: Mapping[str, Any]) -> Any:
        """Insert a record and return its primary key."""
        ...

    def read(self, query: Query) -> Collection:
        """Execute a query and return the assembled collection."""
        ...

    def update(
        self,
        source: str,
        data: Mapping[str, Any],
        conditions: Mapping[str, Any],
    ) -> bool:
        """Update records matching conditions. False when none matched."""
        ...

    def delete(self, source: str, conditions: Mapping[str, Any]) -> bool:
        """Delete records matching conditions. False when none matched."""
        ...

    def migrate(self, source: str, fields: Mapping[str, FieldDescriptor]) -> bool:
        """Sync the source's structure with the field descriptors."""
        ...

    def truncate_datasource(self, source: str) -> bool:
        """Delete all records and reset generated keys."""
        ...

    def drop_datasource(self, source: str) -> bool:
        """Drop the source and all of its data."""
        ...

    def create_database(self, database: str) -> bool:
        ...

    def drop_database(self, database: str) -> bool:
        ...

    def date(self, value: Any = None) -> Any:
        """Return a backend-native date (today when value is None)."""
        ...

    def time(self, value: Any = None) -> Any:
        """Return a backend-native time (now when value is None)."""
        ...

    def datetime(self, value: Any = None) -> Any:
        """Return a backend-native datetime (now when value is None)."""
        ...

    def date_format(self) -> str:
        ...

    def time_format(self) -> str:
        ...

    def datetime_format(self) -> str:
        ...

    def escape(self, value: Any) -> Any:
        """Return value made safe for direct inclusion in a backend statement."""
        ...
