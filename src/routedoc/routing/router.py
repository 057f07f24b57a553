from __future__ import annotations

import logging
from typing import Sequence

from fastapi import FastAPI, Request
from fastapi.responses import Response

from routedoc.routing.context import Context, Handler
from routedoc.routing.paths import join_paths, to_starlette_path


logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD", "TRACE")


def build_endpoint(handlers: Sequence[Handler]):
    """Turn a handler chain into a Starlette request/response endpoint."""
    chain = tuple(handlers)

    async def endpoint(request: Request) -> Response:
        c = Context(request, chain)
        await c.next()
        if c.response is None:
            return Response(status_code=200)
        return c.response

    return endpoint


class RouterNode:
    """
    One level of the route tree: a base path plus the middleware that runs
    before every route registered under it.

    Routes are added to the wrapped app's router, so a node works with a plain
    FastAPI/Starlette app and mixes with routes declared the usual way.
    """

    def __init__(self, app: FastAPI, base_path: str = "/", handlers: Sequence[Handler] = ()):
        self.app = app
        self._base_path = base_path
        self._handlers: list[Handler] = list(handlers)

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def handlers(self) -> tuple[Handler, ...]:
        return tuple(self._handlers)

    def group(self, path: str, *handlers: Handler) -> "RouterNode":
        return RouterNode(
            self.app,
            join_paths(self._base_path, path),
            [*self._handlers, *handlers],
        )

    def use(self, *handlers: Handler) -> None:
        self._handlers.extend(handlers)

    def handle(self, method: str, path: str, *handlers: Handler) -> None:
        method = method.upper()
        if method not in HTTP_METHODS:
            raise ValueError(f"unsupported HTTP method: {method}")
        if not handlers:
            raise ValueError(f"no handler for route {method} {path}")

        full_path = join_paths(self._base_path, path)
        chain = [*self._handlers, *handlers]
        self.app.router.add_route(
            to_starlette_path(full_path),
            build_endpoint(chain),
            methods=[method],
            include_in_schema=False,
        )
        if method == "HEAD":
            # Starlette GET routes also answer HEAD; first match wins
            routes = self.app.router.routes
            routes.insert(0, routes.pop())
        logger.debug(f"Routed {method} {full_path} ({len(chain)} handlers)")
