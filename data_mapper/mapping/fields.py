"""Field metadata resolution.

Turns sparse field declarations into complete descriptors::

    fields = {
        "id": {"type": "int", "primary": True},
        "title": {"type": "string", "required": True},
        "comments": {
            "type": "relation",
            "relation": "HasMany",
            "mapper": "CommentMapper",
            "where": {"self.id": "foreign.post_id"},
        },
    }

Every storage field is merged as global defaults < type defaults < declared
options. Relation declarations are split into their own map and never
appear among the storage fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from data_mapper.core.enums import FieldType, RelationKind
from data_mapper.core.exceptions import (
    DuplicatePrimaryKeyError,
    FieldDeclarationError,
    MissingFieldsError,
)

# Type-specific defaults, applied underneath the declared options
_TYPE_DEFAULTS: dict[FieldType, dict[str, Any]] = {
    FieldType.STRING: {"length": 255},
    FieldType.FLOAT: {"length": (10, 2)},
    FieldType.INT: {"length": 10, "unsigned": True},
}

_SELF_PREFIX = "self."
_FOREIGN_PREFIX = "foreign."


class FieldDescriptor(BaseModel):
    """Complete description of one storage field.

    Model defaults are the global defaults. ``nullable`` is declared as
    ``null`` and ``index`` keeps its declared name.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    name: str
    type: FieldType = FieldType.STRING
    default: Any = None
    length: int | tuple[int, int] | None = None
    required: bool = False
    nullable: bool = Field(default=True, alias="null")
    unsigned: bool = False
    auto_increment: bool = False
    primary: bool = False
    index: bool = False
    unique: bool = False


class RelationDescriptor(BaseModel):
    """A declared association to another mapper.

    ``foreign_keys`` maps local column -> column on the related source.
    ``where`` holds extra literal conditions applied to the related query.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", arbitrary_types_allowed=True)

    name: str
    kind: RelationKind
    mapper: str | type
    foreign_keys: dict[str, str] = {}
    where: dict[str, Any] = {}
    through: str | type | None = None
    through_keys: dict[str, str] = {}


@dataclass(frozen=True)
class FieldMetadata:
    """Resolved metadata of one mapper class."""

    fields: dict[str, FieldDescriptor] = field(default_factory=dict)
    relations: dict[str, RelationDescriptor] = field(default_factory=dict)
    primary_key: str | None = None


def _field_descriptor(name: str, options: Mapping[str, Any]) -> FieldDescriptor:
    try:
        field_type = FieldType(options.get("type", FieldType.STRING.value))
    except ValueError:
        raise FieldDeclarationError(name, f"unknown type {options.get('type')!r}") from None

    merged = {**_TYPE_DEFAULTS.get(field_type, {}), **options, "type": field_type}
    try:
        return FieldDescriptor.model_validate({**merged, "name": name})
    except ValidationError as e:
        raise FieldDeclarationError(name, str(e)) from e


def _relation_descriptor(name: str, options: Mapping[str, Any]) -> RelationDescriptor:
    options = {key: value for key, value in options.items() if key != "type"}
    kind = options.pop("relation", None)
    if kind is None:
        raise FieldDeclarationError(name, "relation declarations require a 'relation' kind")

    foreign_keys = dict(options.pop("foreign_keys", None) or {})
    extra_where: dict[str, Any] = {}
    for key, value in dict(options.pop("where", None) or {}).items():
        # "self.id": "foreign.post_id" binds a key; anything else filters
        if (
            key.startswith(_SELF_PREFIX)
            and isinstance(value, str)
            and value.startswith(_FOREIGN_PREFIX)
        ):
            foreign_keys[key[len(_SELF_PREFIX) :]] = value[len(_FOREIGN_PREFIX) :]
        else:
            extra_where[key] = value

    try:
        descriptor = RelationDescriptor(
            name=name,
            kind=kind,
            foreign_keys=foreign_keys,
            where=extra_where,
            **options,
        )
    except (ValidationError, TypeError) as e:
        raise FieldDeclarationError(name, str(e)) from e

    if descriptor.kind is RelationKind.HAS_MANY_THROUGH and (
        descriptor.through is None or not descriptor.through_keys
    ):
        raise FieldDeclarationError(
            name, "HasManyThrough relations require 'through' and 'through_keys'"
        )
    return descriptor


def resolve_fields(
    declarations: Mapping[str, Mapping[str, Any]],
    mapper_name: str = "Mapper",
) -> FieldMetadata:
    """Resolve raw declarations into storage fields, relations and the primary key.

    Args:
        declarations: Field name -> declared options.
        mapper_name: Used in error messages.

    Raises:
        FieldDeclarationError: If a declaration is malformed.
        DuplicatePrimaryKeyError: If more than one field is declared primary.
        MissingFieldsError: If no storage fields remain.
    """
    fields: dict[str, FieldDescriptor] = {}
    relations: dict[str, RelationDescriptor] = {}
    primary_key: str | None = None

    for name, options in declarations.items():
        if options.get("type") in (FieldType.RELATION, FieldType.RELATION.value):
            relations[name] = _relation_descriptor(name, options)
            continue

        descriptor = _field_descriptor(name, options)
        if descriptor.primary:
            if primary_key is not None:
                raise DuplicatePrimaryKeyError(primary_key, name)
            primary_key = name
        fields[name] = descriptor

    if not fields:
        raise MissingFieldsError(mapper_name)

    return FieldMetadata(fields=fields, relations=relations, primary_key=primary_key)
