"""Tool registry: registration, schema generation and dispatch by name."""

from __future__ import annotations

import asyncio
import dataclasses
import enum
import inspect
import json
import logging
import types
import typing
from dataclasses import dataclass, field
from typing import Annotated, Any, Awaitable, Callable, Literal, Optional, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

from agent_bridge._exceptions import (
    InvalidArgumentsError,
    RegistrationError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResultError,
)
from agent_bridge.tools.schema import generate_schema
from agent_bridge.types import FunctionDescription, Tool

__all__ = ["ToolDefinition", "ToolRegistry"]

_logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """A registered tool. Immutable once created."""

    name: str
    description: str
    args_type: type
    schema: dict[str, Any]
    handler: Callable[[Any], Any]
    # bound at registration so a call never re-inspects the handler
    decode: Callable[[str], Any] = field(repr=False, compare=False)
    invoke: Callable[[Any], Awaitable[Any]] = field(repr=False, compare=False)

    def to_tool(self) -> Tool:
        return Tool(
            function=FunctionDescription(
                name=self.name,
                description=self.description,
                parameters=self.schema,
            )
        )


class ToolRegistry:
    """
    Name -> ToolDefinition mapping.

    Register everything before conversations start; once registration is done
    the registry is read-only and can be shared between agents.
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._definitions: dict[str, ToolDefinition] = {}
        self.logger = logger or _logger

    def register(
        self, name: str, description: str, function: Callable[[Any], Any]
    ) -> ToolDefinition:
        """
        Add a function the model may call.

        The function must take exactly one argument annotated with an argument
        record (a pydantic model or a dataclass) and return ``str``; it may be
        a coroutine function.

        Example::

            class WeatherArgs(BaseModel):
                city: str = Field(description="The city name")

            def get_weather(args: WeatherArgs) -> str:
                return f"Sunny in {args.city}"

            registry.register("get_weather", "Get current weather", get_weather)

        Raises:
            RegistrationError: if ``function`` has the wrong shape.
        """
        if isinstance(function, type) or not callable(function):
            raise RegistrationError(f"tool {name}: {function!r} is not a valid function")

        try:
            signature = inspect.signature(function)
        except (TypeError, ValueError) as exc:
            raise RegistrationError(f"tool {name}: cannot inspect signature: {exc}") from exc

        params = list(signature.parameters.values())
        positional = (
            inspect.Parameter.POSITIONAL_ONLY,
            inspect.Parameter.POSITIONAL_OR_KEYWORD,
        )
        if len(params) != 1 or params[0].kind not in positional:
            raise RegistrationError(f"tool {name}: function must have exactly 1 argument")

        hints = _type_hints(name, function)
        args_type = hints.get(params[0].name)
        if not _is_record(args_type):
            raise RegistrationError(
                f"tool {name}: argument must be annotated with a pydantic model "
                f"or dataclass, got {args_type!r}"
            )

        return_type = hints.get("return")
        if return_type is not None and not (
            isinstance(return_type, type) and issubclass(return_type, str)
        ):
            raise RegistrationError(
                f"tool {name}: function must return str, annotated {return_type!r}"
            )

        if name in self._definitions:
            self.logger.warning("Replacing previously registered tool %s", name)

        definition = ToolDefinition(
            name=name,
            description=description,
            args_type=args_type,
            schema=generate_schema(args_type),
            handler=function,
            decode=_make_decoder(name, args_type),
            invoke=_make_invoker(function),
        )
        self._definitions[name] = definition
        return definition

    def get(self, name: str) -> ToolDefinition | None:
        return self._definitions.get(name)

    def get_all_tools(self) -> list[Tool]:
        """Every definition in the canonical Tool envelope; empty list when none."""
        return [definition.to_tool() for definition in self._definitions.values()]

    async def execute(self, name: str, arguments: str) -> str:
        """
        Run the tool ``name`` with JSON-encoded ``arguments``.

        Fields missing from the JSON are filled with zero values before
        validation, so only malformed JSON, a non-object payload or a type
        mismatch is reported as invalid arguments.

        Raises:
            ToolNotFoundError: no tool registered under ``name``.
            InvalidArgumentsError: the JSON cannot populate the argument record.
            ToolExecutionError: the tool itself raised.
            ToolResultError: the tool did not return a string.
        """
        definition = self._definitions.get(name)
        if definition is None:
            raise ToolNotFoundError(name)

        args = definition.decode(arguments)

        try:
            result = await definition.invoke(args)
        except ToolError:
            raise
        except Exception as exc:
            raise ToolExecutionError(name, exc) from exc

        if not isinstance(result, str):
            raise ToolResultError(name)
        return result

    def __contains__(self, name: object) -> bool:
        return name in self._definitions

    def __len__(self) -> int:
        return len(self._definitions)


def _type_hints(name: str, function: Callable[..., Any]) -> dict[str, Any]:
    target = function if inspect.isroutine(function) else type(function).__call__
    try:
        return typing.get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as exc:
        raise RegistrationError(f"tool {name}: cannot resolve type hints: {exc}") from exc


def _is_record(annotation: Any) -> bool:
    return isinstance(annotation, type) and (
        issubclass(annotation, BaseModel) or dataclasses.is_dataclass(annotation)
    )


def _is_async(function: Callable[..., Any]) -> bool:
    return inspect.iscoroutinefunction(function) or inspect.iscoroutinefunction(
        getattr(function, "__call__", None)
    )


def _make_invoker(function: Callable[[Any], Any]) -> Callable[[Any], Awaitable[Any]]:
    if _is_async(function):
        async def invoke(args: Any) -> Any:
            return await function(args)
    else:
        async def invoke(args: Any) -> Any:
            # keep the event loop responsive while a blocking tool runs
            return await asyncio.to_thread(function, args)
    return invoke


def _make_decoder(name: str, args_type: type) -> Callable[[str], Any]:
    adapter = TypeAdapter(args_type)

    def decode(arguments: str) -> Any:
        if not arguments or not arguments.strip():
            data: Any = {}
        else:
            try:
                data = json.loads(arguments)
            except json.JSONDecodeError as exc:
                raise InvalidArgumentsError(name, str(exc)) from exc
        if not isinstance(data, dict):
            raise InvalidArgumentsError(name, "arguments must be a JSON object")
        try:
            filled = json.dumps(_zero_fill(args_type, data))
            # strict: no "5" -> 5 or "yes" -> True coercion
            return adapter.validate_json(filled, strict=True)
        except ValidationError as exc:
            raise InvalidArgumentsError(name, str(exc)) from exc

    return decode


def _record_fields(record: type) -> dict[str, tuple[Any, bool]]:
    """Input key -> (annotation, required) for a pydantic model or dataclass."""
    if issubclass(record, BaseModel):
        return {
            (info.alias or field_name): (info.annotation, info.is_required())
            for field_name, info in record.model_fields.items()
        }
    hints = typing.get_type_hints(record, include_extras=True)
    return {
        f.name: (
            hints.get(f.name, Any),
            f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING,
        )
        for f in dataclasses.fields(record)
        if f.init
    }


def _zero_fill(record: type, data: dict[str, Any]) -> dict[str, Any]:
    filled = dict(data)
    for key, (annotation, required) in _record_fields(record).items():
        if key in filled:
            filled[key] = _fill_nested(annotation, filled[key])
        elif required:
            filled[key] = _zero_value(annotation)
    return filled


def _fill_nested(annotation: Any, value: Any) -> Any:
    """Zero-fill records found inside a present value, including inside containers."""
    annotation = _unwrap(annotation)
    if _is_record(annotation):
        return _zero_fill(annotation, value) if isinstance(value, dict) else value

    origin = typing.get_origin(annotation)
    args = typing.get_args(annotation)
    if origin in (list, set, frozenset) and args and isinstance(value, list):
        return [_fill_nested(args[0], item) for item in value]
    if origin is tuple and args and isinstance(value, list):
        if len(args) == 2 and args[1] is Ellipsis:
            return [_fill_nested(args[0], item) for item in value]
        return [
            _fill_nested(item_type, item) for item_type, item in zip(args, value)
        ] + value[len(args):]
    if origin is dict and len(args) == 2 and isinstance(value, dict):
        return {k: _fill_nested(args[1], v) for k, v in value.items()}
    return value


def _unwrap(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Annotated:
        return _unwrap(typing.get_args(annotation)[0])
    if origin in (Union, types.UnionType):
        members = [a for a in typing.get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return _unwrap(members[0])
    return annotation


def _zero_value(annotation: Any) -> Any:
    origin = typing.get_origin(annotation)
    if origin is Annotated:
        return _zero_value(typing.get_args(annotation)[0])
    if origin in (Union, types.UnionType):
        members = typing.get_args(annotation)
        if type(None) in members:
            return None
        return _zero_value(members[0])
    if origin is Literal:
        return typing.get_args(annotation)[0]
    if origin in (list, set, frozenset, tuple) or annotation in (list, set, frozenset, tuple):
        return []
    if origin is dict or annotation is dict:
        return {}
    if _is_record(annotation):
        return _zero_fill(annotation, {})
    if isinstance(annotation, type):
        if issubclass(annotation, enum.Enum):
            return next(iter(annotation)).value
        for base, zero in ((bool, False), (int, 0), (float, 0.0), (str, ""), (bytes, "")):
            if issubclass(annotation, base):
                return zero
    return None
