"""
Conversion between JSON text and the typed values tools work with.

Decoding starts from the zero value of the target type, the way the model's
arguments are expected to fill in a blank form: members the model leaves out
keep their zero value (or the field's declared default), unknown members are
ignored and ``null`` means "leave it at zero". A member of the wrong kind is
an error.
"""

from __future__ import annotations

import dataclasses
import json
import typing
from typing import Any

from gptease._exceptions import ToolInputError, ToolOutputError, UnsupportedTypeError
from gptease.schema import field_types, is_omitempty, sequence_item_type, serialized_name

__all__ = ["zero_value", "decode", "decode_json", "encode", "encode_json"]

_ZEROS: dict[type, Any] = {str: "", int: 0, float: 0.0, bool: False}


def _is_dataclass_type(tp: Any) -> bool:
    return isinstance(tp, type) and dataclasses.is_dataclass(tp)


def _field_default(f: dataclasses.Field, tp: Any) -> Any:
    if f.default is not dataclasses.MISSING:
        return f.default
    if f.default_factory is not dataclasses.MISSING:
        return f.default_factory()
    return zero_value(tp)


def _sequence_factory(tp: Any) -> type:
    return tuple if typing.get_origin(tp) is tuple else list


def zero_value(tp: Any) -> Any:
    """The blank value of *tp*: empty strings and sequences, zero numbers, False."""
    if _is_dataclass_type(tp):
        hints = field_types(tp)
        return tp(**{
            f.name: _field_default(f, hints[f.name])
            for f in dataclasses.fields(tp)
            if f.init
        })
    if sequence_item_type(tp) is not None:
        return _sequence_factory(tp)()
    if isinstance(tp, type) and tp in _ZEROS:
        return _ZEROS[tp]
    raise UnsupportedTypeError(tp)


def decode(tp: Any, data: Any, path: str = "$") -> Any:
    """Build a value of type *tp* from parsed JSON *data*."""
    if data is None:
        return zero_value(tp)

    if _is_dataclass_type(tp):
        if not isinstance(data, dict):
            raise ToolInputError(f"{path}: expected object, got {type(data).__name__}")
        hints = field_types(tp)
        kwargs = {}
        for f in dataclasses.fields(tp):
            if not f.init:
                continue
            key = serialized_name(f)
            if key in data:
                kwargs[f.name] = decode(hints[f.name], data[key], f"{path}.{key}")
            else:
                kwargs[f.name] = _field_default(f, hints[f.name])
        return tp(**kwargs)

    item_type = sequence_item_type(tp)
    if item_type is not None:
        if not isinstance(data, list):
            raise ToolInputError(f"{path}: expected array, got {type(data).__name__}")
        items = (decode(item_type, v, f"{path}[{i}]") for i, v in enumerate(data))
        return _sequence_factory(tp)(items)

    if tp is bool:
        if not isinstance(data, bool):
            raise ToolInputError(f"{path}: expected boolean, got {type(data).__name__}")
        return data
    if tp is int:
        if isinstance(data, bool) or not isinstance(data, int):
            raise ToolInputError(f"{path}: expected integer, got {data!r}")
        return data
    if tp is float:
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            raise ToolInputError(f"{path}: expected number, got {data!r}")
        return float(data)
    if tp is str:
        if not isinstance(data, str):
            raise ToolInputError(f"{path}: expected string, got {type(data).__name__}")
        return data

    raise UnsupportedTypeError(tp)


def decode_json(tp: Any, text: str) -> Any:
    """Parse *text* and decode it into *tp*."""
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ToolInputError(f"invalid JSON: {exc}") from exc
    return decode(tp, data)


def _is_empty(value: Any) -> bool:
    if value is None or value is False:
        return True
    if isinstance(value, (int, float)) and value == 0:
        return True
    if isinstance(value, (str, list, tuple, dict)) and len(value) == 0:
        return True
    return False


def encode(value: Any) -> Any:
    """Turn a tool result into plain JSON-compatible data."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        out: dict[str, Any] = {}
        for f in dataclasses.fields(value):
            v = getattr(value, f.name)
            if is_omitempty(f) and _is_empty(v):
                continue
            out[serialized_name(f)] = encode(v)
        return out
    if isinstance(value, (list, tuple)):
        return [encode(v) for v in value]
    if isinstance(value, dict):
        return {str(k): encode(v) for k, v in value.items()}
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    raise ToolOutputError(f"cannot encode value of type {type(value).__name__}")


def encode_json(value: Any) -> str:
    try:
        return json.dumps(encode(value), indent=2, allow_nan=False)
    except ValueError as exc:
        if isinstance(exc, ToolOutputError):
            raise
        raise ToolOutputError(str(exc)) from exc
