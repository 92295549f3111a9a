"""Process-wide query log.

Adapters append every statement they run together with its bound data.
The log is diagnostic only: nothing reads it to make control decisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class QueryLogEntry:
    """A single executed statement and the data bound to it."""

    query: str
    data: Any = None


class QueryLog:
    """Append-only log of executed queries."""

    def __init__(self) -> None:
        self._entries: list[QueryLogEntry] = []

    def log(self, query: str, data: Any = None) -> None:
        self._entries.append(QueryLogEntry(query=query, data=data))

    def count(self) -> int:
        return len(self._entries)

    def entries(self) -> list[QueryLogEntry]:
        """Return a copy of all logged entries, oldest first."""
        return list(self._entries)

    def clear(self) -> None:
        """Reset the log. Intended for test isolation."""
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


query_log = QueryLog()
