"""
Turn plain Python functions into tools the model can call.

A tool function takes exactly one annotated argument and returns a value that
can be encoded as JSON. It signals failure by raising. Example::

    @dataclass
    class RollArgs:
        max_value: int = param(description="number of sides on the die")

    def roll_die(args: RollArgs) -> int:
        return random.randint(1, args.max_value)

    tool = make_tool(roll_die, "rollDie", "Returns a random number between 1 and max_value.")

The argument type is described with `gptease.schema.derive_schema` once, when
the tool is made; a type without a schema is refused right there rather than
when the model first calls the tool.
"""

from __future__ import annotations

import inspect
import json
import logging
import typing
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from gptease._exceptions import ToolSignatureError
from gptease.codec import decode_json, encode_json
from gptease.schema import derive_schema, schema_json

__all__ = ["Tool", "make_tool", "tool"]

logger = logging.getLogger(__name__)

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


@dataclass(frozen=True)
class Tool:
    """A function exposed to the model.

    Attributes:
        name: Unique name within a chat.
        description: What the tool does, written for the model.
        parameters: JSON text of the argument schema.
        handler: Decodes JSON arguments, calls the function, encodes the result.
    """

    name: str
    description: str
    parameters: str
    handler: Callable[[str], str] = field(repr=False, compare=False)

    @property
    def schema(self) -> dict[str, Any]:
        return json.loads(self.parameters)

    def __call__(self, arguments: str) -> str:
        return self.handler(arguments)


def _argument_type(fn: Callable[..., Any]) -> Any:
    try:
        sig = inspect.signature(fn)
    except (TypeError, ValueError) as exc:
        raise ToolSignatureError(f"cannot inspect signature of {fn!r}") from exc

    params = list(sig.parameters.values())
    if len(params) != 1 or params[0].kind not in _POSITIONAL:
        raise ToolSignatureError("not a function of one argument")

    try:
        hints = typing.get_type_hints(fn)
    except NameError as exc:
        raise ToolSignatureError(f"cannot resolve annotations: {exc}") from exc

    if params[0].name not in hints:
        raise ToolSignatureError(f"argument {params[0].name!r} is not annotated")
    if "return" not in hints:
        raise ToolSignatureError("function has no return annotation")
    return hints[params[0].name]


def make_tool(
    fn: Callable[[Any], Any],
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Tool:
    """
    Build a Tool from *fn* by examining its signature.

    Args:
        fn: Function of one annotated argument.
        name: Tool name; defaults to the function's name.
        description: Tool description; defaults to the function's docstring.

    Raises:
        ToolSignatureError: *fn* is not a one argument, annotated function.
        UnsupportedTypeError: No schema can be derived for the argument type.
    """
    if not callable(fn):
        raise ToolSignatureError("not a function")

    arg_type = _argument_type(fn)
    parameters = schema_json(derive_schema(arg_type))

    def handler(input_text: str) -> str:
        arg = decode_json(arg_type, input_text)
        return encode_json(fn(arg))

    tool_name = name or getattr(fn, "__name__", "")
    if not tool_name:
        raise ToolSignatureError("tool needs a name")

    logger.debug("Registered tool %s with parameters %s", tool_name, parameters)
    return Tool(
        name=tool_name,
        description=description if description is not None else inspect.getdoc(fn) or "",
        parameters=parameters,
        handler=handler,
    )


def tool(
    fn: Optional[Callable[[Any], Any]] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> Any:
    """Decorator form of `make_tool`; usable bare or with keyword arguments."""
    if fn is not None:
        return make_tool(fn, name, description)

    def decorate(f: Callable[[Any], Any]) -> Tool:
        return make_tool(f, name, description)

    return decorate
