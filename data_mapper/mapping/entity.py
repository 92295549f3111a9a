"""Change-tracked entity records."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any


class Entity:
    """In-memory record holding current field values and a load snapshot.

    Fields are read and written as attributes or items::

        post = Entity(title="Hello")
        post.body = "..."
        post["title"]

    Field names that collide with methods (``data``, ``get``, ...) are only
    reachable through item access.
    """

    def __init__(self, data: Mapping[str, Any] | None = None, **fields: Any) -> None:
        object.__setattr__(self, "_data", {})
        object.__setattr__(self, "_original", {})
        object.__setattr__(self, "_loaded", False)
        self.set_data({**(data or {}), **fields})

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._data[name]
        except KeyError:
            raise AttributeError(f"{type(self).__name__} has no field '{name}'") from None

    def __setattr__(self, name: str, value: Any) -> None:
        if name.startswith("_") or isinstance(getattr(type(self), name, None), property):
            object.__setattr__(self, name, value)
        else:
            self._data[name] = value

    def __getitem__(self, name: str) -> Any:
        return self._data[name]

    def __setitem__(self, name: str, value: Any) -> None:
        self._data[name] = value

    def __contains__(self, name: object) -> bool:
        return name in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __repr__(self) -> str:
        state = "loaded" if self._loaded else "new"
        return f"<{type(self).__name__} {state} {self._data!r}>"

    def get(self, name: str, default: Any = None) -> Any:
        return self._data.get(name, default)

    def data(self) -> dict[str, Any]:
        """Return a copy of the current field values."""
        return dict(self._data)

    def set_data(self, data: Mapping[str, Any]) -> None:
        for name, value in data.items():
            self._data[name] = value

    def modified_fields(self) -> dict[str, Any]:
        """Return fields whose value differs from the load snapshot.

        For an entity that was never loaded every set field counts as modified.
        """
        modified: dict[str, Any] = {}
        for name, value in self._data.items():
            if name not in self._original:
                modified[name] = value
                continue
            original = self._original[name]
            if original is not value and original != value:
                modified[name] = value
        return modified

    @property
    def loaded(self) -> bool:
        """True once the entity was hydrated from (or written to) storage."""
        return self._loaded

    @loaded.setter
    def loaded(self, value: bool) -> None:
        if value:
            self.mark_loaded()
        else:
            object.__setattr__(self, "_loaded", False)

    def mark_loaded(self) -> None:
        """Flag the entity as loaded and take a new snapshot of its values."""
        object.__setattr__(self, "_original", dict(self._data))
        object.__setattr__(self, "_loaded", True)
