"""data_mapper exception hierarchy.

All exceptions are data_mapper-specific. Raw driver exceptions are never
exposed to callers; adapters wrap them in AdapterExecutionError.

Validation failures are not exceptions: they accumulate on the mapper and
``Mapper.save`` reports them by returning False.
"""

from __future__ import annotations


class DataMapperError(Exception):
    """Base exception for all data_mapper errors."""


# --- Configuration ---


class ConfigurationError(DataMapperError):
    """Base for mapper configuration errors."""


class MissingSourceError(ConfigurationError):
    """Raised when a mapper does not declare a source name."""

    def __init__(self, mapper_name: str) -> None:
        self.mapper_name = mapper_name
        super().__init__(
            f"Mapper '{mapper_name}' must define 'source' - a table name, "
            "collection name or file name, depending on the adapter"
        )


class MissingFieldsError(ConfigurationError):
    """Raised when a mapper declares no storage fields."""

    def __init__(self, mapper_name: str) -> None:
        self.mapper_name = mapper_name
        super().__init__(f"Mapper '{mapper_name}' must define at least one non-relation field")


class FieldDeclarationError(ConfigurationError):
    """Raised when a single field declaration is malformed."""

    def __init__(self, field_name: str, detail: str) -> None:
        self.field_name = field_name
        super().__init__(f"Invalid declaration for field '{field_name}': {detail}")


class MissingPrimaryKeyError(ConfigurationError):
    """Raised on primary-key operations against a mapper without a primary key."""

    def __init__(self, mapper_name: str) -> None:
        self.mapper_name = mapper_name
        super().__init__(f"Mapper '{mapper_name}' has no field declared with primary=True")


class DuplicatePrimaryKeyError(ConfigurationError):
    """Raised when more than one field is declared primary."""

    def __init__(self, first: str, second: str) -> None:
        self.first = first
        self.second = second
        super().__init__(
            f"Duplicate primary key: '{second}' declared primary after '{first}'"
        )


# --- Query ---


class QueryBuildError(DataMapperError):
    """Raised when a query cannot be built (bad operator, direction, identifier)."""


class UnsupportedOperationError(DataMapperError):
    """Raised when an adapter cannot perform the requested operation."""

    def __init__(self, adapter_name: str, operation: str) -> None:
        self.adapter_name = adapter_name
        self.operation = operation
        super().__init__(f"{adapter_name} does not support {operation}")


# --- Registry ---


class RegistryError(DataMapperError):
    """Base for mapper registry errors."""


class MapperNotFoundError(RegistryError):
    """Raised when a mapper name cannot be found in the registry."""

    def __init__(self, mapper_name: str) -> None:
        self.mapper_name = mapper_name
        super().__init__(f"Mapper not found: '{mapper_name}'")


class DuplicateMapperError(RegistryError):
    """Raised when two factories are registered under the same name."""

    def __init__(self, mapper_name: str) -> None:
        self.mapper_name = mapper_name
        super().__init__(f"Duplicate mapper name '{mapper_name}'")


# --- Adapter ---


class AdapterError(DataMapperError):
    """Base for adapter errors."""


class AdapterExecutionError(AdapterError):
    """Raised when a storage operation fails inside the backend."""

    def __init__(self, operation: str, detail: str) -> None:
        self.operation = operation
        super().__init__(f"Adapter {operation} failed: {detail}")
