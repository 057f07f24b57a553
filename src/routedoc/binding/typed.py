from __future__ import annotations

import functools
import inspect
import json
import logging
import types
import typing
from dataclasses import dataclass
from typing import Any, Callable, Optional

from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel, ValidationError

from routedoc.binding.params import location_of, wire_name
from routedoc.routing.context import Context, is_async_callable


logger = logging.getLogger(__name__)

_SEQUENCE_ORIGINS = (list, tuple, set, frozenset)


@dataclass(frozen=True)
class RouteMeta:
    """What a typed handler declares about itself."""

    input_type: Optional[type[BaseModel]]
    output_type: Optional[Any]
    default_status_code: int
    handler_name: str


def _annotated_target(func: Callable[..., Any]) -> tuple[Callable[..., Any], str, set[str]]:
    """
    Find the function that carries the annotations of a handler.

    Returns that function, the handler's name and the parameter names already
    bound by partial keywords.
    """
    bound: set[str] = set()
    while isinstance(func, functools.partial):
        bound.update(func.keywords)
        func = func.func

    if inspect.isfunction(func) or inspect.ismethod(func):
        return func, func.__name__, bound
    # callable instance
    return type(func).__call__, type(func).__name__, bound


def _introspect(func: Callable[..., Any], status_code: int) -> RouteMeta:
    target, name, bound = _annotated_target(func)
    params = [p for p in inspect.signature(func).parameters.values() if p.name not in bound]
    if not params or len(params) > 2:
        raise TypeError(
            f"typed handler {name} must accept a context and an optional input model"
        )

    hints = typing.get_type_hints(target)

    input_type = None
    if len(params) == 2:
        input_type = hints.get(params[1].name)
        if not (inspect.isclass(input_type) and issubclass(input_type, BaseModel)):
            raise TypeError(f"input of typed handler {name} must be a pydantic model")

    output_type = hints.get("return")
    if output_type is type(None):
        output_type = None

    return RouteMeta(
        input_type=input_type,
        output_type=output_type,
        default_status_code=status_code,
        handler_name=name,
    )


def _is_sequence(annotation: Any) -> bool:
    origin = typing.get_origin(annotation)
    if origin in (typing.Union, types.UnionType):
        return any(_is_sequence(a) for a in typing.get_args(annotation))
    return origin in _SEQUENCE_ORIGINS or annotation in _SEQUENCE_ORIGINS


class BindingError(Exception):
    def __init__(self, message: str, details: Any = None):
        self.message = message
        self.details = details
        super().__init__(message)


class TypedHandler:
    """
    A business function turned into a chain handler.

    The function receives the request context and, when it declares one, an
    instance of its input model filled from the request. Its return value is
    written as JSON with the handler's default status code.
    """

    def __init__(self, func: Callable[..., Any], status_code: int = 200):
        self.func = func
        self.route = _introspect(func, status_code)
        self.__name__ = self.route.handler_name
        self.__doc__ = getattr(func, "__doc__", None)

    def __repr__(self) -> str:
        return f"TypedHandler({self.route.handler_name}, status_code={self.route.default_status_code})"

    async def __call__(self, c: Context) -> None:
        args: list[Any] = [c]
        if self.route.input_type is not None:
            try:
                args.append(await self._bind(c))
            except BindingError as e:
                logger.debug(f"Binding failed for {self.route.handler_name}: {e.message}")
                c.abort_with_json(400, {"error": e.message, "details": e.details})
                return

        if is_async_callable(self.func):
            result = await self.func(*args)
        else:
            result = await run_in_threadpool(self.func, *args)

        if c.is_aborted or c.response is not None:
            return

        status_code = self.route.default_status_code
        if result is None and self.route.output_type is None:
            c.status(status_code)
        else:
            c.json(status_code, result)

    async def _bind(self, c: Context) -> BaseModel:
        model = self.route.input_type
        request = c.request
        data: dict[str, Any] = {}

        has_body = any(location_of(f) == "body" for f in model.model_fields.values())
        if has_body:
            raw = await request.body()
            if raw:
                try:
                    payload = json.loads(raw)
                except ValueError as e:
                    raise BindingError("invalid JSON body", str(e)) from e
                if not isinstance(payload, dict):
                    raise BindingError("JSON body must be an object")
                data.update(payload)

        for name, field in model.model_fields.items():
            key = wire_name(name, field)
            location = location_of(field)
            if location == "path":
                if key in request.path_params:
                    data[key] = request.path_params[key]
            elif location == "query":
                if _is_sequence(field.annotation):
                    values = request.query_params.getlist(key)
                    if values:
                        data[key] = values
                elif key in request.query_params:
                    data[key] = request.query_params[key]
            elif location == "header":
                value = request.headers.get(key)
                if value is not None:
                    data[key] = value

        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise BindingError(
                "binding error",
                e.errors(include_url=False, include_context=False, include_input=False),
            ) from e


def typed(func: Callable[..., Any], status_code: int = 200) -> TypedHandler:
    return TypedHandler(func, status_code=status_code)


def recognize(handler: Any) -> Optional[RouteMeta]:
    """Return the route metadata of a typed handler, or None for anything else."""
    if isinstance(handler, TypedHandler):
        return handler.route
    return None
