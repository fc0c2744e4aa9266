"""
Derive JSON-Schema-like parameter descriptions from Python types.

Supported shapes:

- dataclasses (``object``), one property per field
- ``list[T]``, ``Sequence[T]`` and ``tuple[T, ...]`` (``array``)
- ``str``, ``int``, ``float`` and ``bool``

Per-field metadata is declared with `param`, for example::

    @dataclass
    class Args:
        fruit: str = param(name="text", description="your favourite fruit",
                           enum=["apple", "banana", "orange"])
        consumption: list[int] = param(omitempty=True, default_factory=list,
                                       description="number of fruits eaten each day")

A field is required unless it is declared ``omitempty``.
"""

from __future__ import annotations

import collections.abc
import dataclasses
import json
import typing
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

from gptease._exceptions import UnsupportedTypeError

__all__ = [
    "FieldSpec",
    "param",
    "derive_schema",
    "schema_json",
    "serialized_name",
    "is_omitempty",
    "field_types",
    "sequence_item_type",
]

_META_NAME = "name"
_META_DESCRIPTION = "description"
_META_ENUM = "enum"
_META_OMITEMPTY = "omitempty"

_PRIMITIVES: dict[type, str] = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
}


@dataclass(frozen=True)
class FieldSpec:
    """Structural description of a value, as sent to the model."""

    type: str
    properties: dict[str, "FieldSpec"] = field(default_factory=dict)
    items: Optional["FieldSpec"] = None
    description: str = ""
    required: tuple[str, ...] = ()
    enum: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        """Wire form. Empty members are left out, so ``{}`` structs give ``{"type": "object"}``."""
        out: dict[str, Any] = {"type": self.type}
        if self.properties:
            out["properties"] = {k: v.to_dict() for k, v in self.properties.items()}
        if self.items is not None:
            out["items"] = self.items.to_dict()
        if self.description:
            out["description"] = self.description
        if self.required:
            out["required"] = list(self.required)
        if self.enum:
            out["enum"] = list(self.enum)
        return out


def param(
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    enum: Union[str, Iterable[str], None] = None,
    omitempty: bool = False,
    default: Any = dataclasses.MISSING,
    default_factory: Any = dataclasses.MISSING,
) -> Any:
    """
    Declare a dataclass field together with its schema metadata.

    Args:
        name: Property name on the wire; defaults to the attribute name.
        description: Text shown to the model for this property.
        enum: Allowed values, as a list or a comma separated string.
        omitempty: Mark the property optional and leave it out of encoded
            output when its value is empty.
        default: Passed through to ``dataclasses.field``.
        default_factory: Passed through to ``dataclasses.field``.
    """
    metadata: dict[str, Any] = {_META_OMITEMPTY: omitempty}
    if name:
        metadata[_META_NAME] = name
    if description:
        metadata[_META_DESCRIPTION] = description
    if enum:
        values = enum.split(",") if isinstance(enum, str) else list(enum)
        metadata[_META_ENUM] = tuple(values)
    return field(default=default, default_factory=default_factory, metadata=metadata)


def serialized_name(f: dataclasses.Field) -> str:
    return f.metadata.get(_META_NAME) or f.name


def is_omitempty(f: dataclasses.Field) -> bool:
    return bool(f.metadata.get(_META_OMITEMPTY, False))


def field_types(tp: type) -> dict[str, Any]:
    """Resolved annotations of a dataclass, keyed by attribute name."""
    try:
        return typing.get_type_hints(tp)
    except NameError as exc:
        raise UnsupportedTypeError(tp) from exc


def sequence_item_type(tp: Any) -> Optional[Any]:
    """Element type of a supported sequence annotation, or None if *tp* is not one."""
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin in (list, collections.abc.Sequence) and len(args) == 1:
        return args[0]
    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return args[0]
    return None


def derive_schema(tp: Any) -> FieldSpec:
    """
    Recursively describe *tp*.

    Raises:
        UnsupportedTypeError: *tp* (or something nested in it) has no schema,
            or a dataclass refers back to itself.
    """
    return _derive(tp, ())


def _derive(tp: Any, enclosing: tuple[type, ...]) -> FieldSpec:
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        if tp in enclosing:
            raise UnsupportedTypeError(tp)
        return _object_schema(tp, enclosing + (tp,))

    item_type = sequence_item_type(tp)
    if item_type is not None:
        return FieldSpec(type="array", items=_derive(item_type, enclosing))

    # Exact match, so bool is not taken for int and enums or other subclasses are refused.
    if isinstance(tp, type) and tp in _PRIMITIVES:
        return FieldSpec(type=_PRIMITIVES[tp])

    raise UnsupportedTypeError(tp)


def _object_schema(tp: type, enclosing: tuple[type, ...]) -> FieldSpec:
    hints = field_types(tp)
    properties: dict[str, FieldSpec] = {}
    required: list[str] = []
    for f in dataclasses.fields(tp):
        name = serialized_name(f)
        if not is_omitempty(f):
            required.append(name)
        spec = _derive(hints[f.name], enclosing)
        properties[name] = dataclasses.replace(
            spec,
            description=f.metadata.get(_META_DESCRIPTION, ""),
            enum=f.metadata.get(_META_ENUM, ()),
        )
    return FieldSpec(type="object", properties=properties, required=tuple(required))


def schema_json(spec: FieldSpec) -> str:
    """Canonical text form of *spec*; identical input gives identical text."""
    return json.dumps(spec.to_dict(), indent=2)
