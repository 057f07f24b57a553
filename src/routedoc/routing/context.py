from __future__ import annotations

import functools
import inspect
from typing import Any, Callable, Optional, Sequence

import yaml
from fastapi import Request
from fastapi.concurrency import run_in_threadpool
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse, Response


Handler = Callable[["Context"], Any]

YAML_MEDIA_TYPE = "application/x-yaml"


def is_async_callable(obj: Any) -> bool:
    while isinstance(obj, functools.partial):
        obj = obj.func
    return inspect.iscoroutinefunction(obj) or (
        callable(obj) and inspect.iscoroutinefunction(getattr(obj, "__call__", None))
    )


async def call_handler(handler: Handler, c: "Context") -> None:
    if is_async_callable(handler):
        await handler(c)
    else:
        await run_in_threadpool(handler, c)


class Context:
    """
    Per-request state shared by the handlers of one route.

    A new Context is built for every request, so values stored with `set`
    never leak between requests. Handlers run in registration order; a
    middleware may call `next()` to run the rest of the chain before it
    resumes, and `abort()` stops the chain.
    """

    def __init__(self, request: Request, handlers: Sequence[Handler]):
        self.request = request
        self.response: Optional[Response] = None
        self.keys: dict[str, Any] = {}
        self._handlers = tuple(handlers)
        self._index = -1
        self._aborted = False

    # ----------------------------
    # Key/value store
    # ----------------------------

    def set(self, key: str, value: Any) -> None:
        self.keys[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.keys.get(key, default)

    def __contains__(self, key: object) -> bool:
        return key in self.keys

    # ----------------------------
    # Chain control
    # ----------------------------

    async def next(self) -> None:
        self._index += 1
        while self._index < len(self._handlers) and not self._aborted:
            await call_handler(self._handlers[self._index], self)
            self._index += 1

    def abort(self, response: Optional[Response] = None) -> None:
        self._aborted = True
        if response is not None:
            self.response = response

    @property
    def is_aborted(self) -> bool:
        return self._aborted

    # ----------------------------
    # Response helpers
    # ----------------------------

    @property
    def params(self) -> dict[str, Any]:
        return dict(self.request.path_params)

    def status(self, code: int) -> None:
        self.response = Response(status_code=code)

    def json(self, code: int, payload: Any) -> None:
        self.response = JSONResponse(content=jsonable_encoder(payload), status_code=code)

    def yaml(self, code: int, payload: Any) -> None:
        text = yaml.safe_dump(jsonable_encoder(payload), sort_keys=False, allow_unicode=True)
        self.response = Response(content=text, status_code=code, media_type=YAML_MEDIA_TYPE)

    def abort_with_json(self, code: int, payload: Any) -> None:
        self.json(code, payload)
        self.abort()
