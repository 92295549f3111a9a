"""Adapter configuration.

ConnectionConfig is a Pydantic model for type-safe adapter config.
create_adapter() builds a storage adapter from it through an explicit
driver table.
"""

from __future__ import annotations

from typing import Any, Callable

import structlog
from pydantic import BaseModel

from data_mapper.core.exceptions import AdapterError


class ConnectionConfig(BaseModel):
    """Configuration for a storage adapter."""

    driver: str
    database: str = ":memory:"
    timeout: float = 5.0
    extra: dict[str, Any] = {}


def _sqlite_adapter(config: ConnectionConfig, logger: Any) -> Any:
    from data_mapper.adapters.sqlite import SqliteAdapter

    return SqliteAdapter(config, logger=logger)


def _memory_adapter(config: ConnectionConfig, logger: Any) -> Any:
    from data_mapper.adapters.memory import MemoryAdapter

    return MemoryAdapter(config, logger=logger)


# Driver name -> adapter factory
_ADAPTER_FACTORIES: dict[str, Callable[[ConnectionConfig, Any], Any]] = {
    "sqlite": _sqlite_adapter,
    "memory": _memory_adapter,
}


def create_adapter(
    config: ConnectionConfig,
    logger: structlog.stdlib.BoundLogger | None = None,
) -> Any:
    """Create a storage adapter for the configured driver.

    Raises:
        AdapterError: If the driver is unknown.
    """
    driver = config.driver.lower()
    if driver not in _ADAPTER_FACTORIES:
        raise AdapterError(f"Unsupported storage driver: {config.driver}")
    return _ADAPTER_FACTORIES[driver](config, logger)
