from __future__ import annotations

from typing import Optional

from fastapi import FastAPI

from routedoc.config import Settings
from routedoc.docs.group import RouterGroup
from routedoc.errors import ConfigurationError
from routedoc.openapi.generator import Generator
from routedoc.openapi.model import Info, OpenAPI
from routedoc.routing.context import Context, Handler
from routedoc.routing.router import RouterNode


class RouteDoc(RouterGroup):
    """
    A FastAPI application whose routes document themselves.

        doc = RouteDoc()
        items = doc.group("/items", Tag(name="items"))
        items.get("/:id", [summary("Get an item")], typed(get_item))
        doc.get("/openapi.json", None, doc.document_handler("json"))

    The object is an ASGI application itself and can be served directly.
    """

    def __init__(self, app: Optional[FastAPI] = None, settings: Optional[Settings] = None):
        settings = settings or Settings.from_env()
        if app is None:
            # the generated document replaces FastAPI's own
            app = FastAPI(openapi_url=None, docs_url=None, redoc_url=None)
        self.app = app
        self.settings = settings
        self.generator = Generator(
            info=settings.info(),
            openapi_version=settings.openapi_version,
            media_type=settings.media_type,
        )
        super().__init__(RouterNode(app), self.generator)

    @classmethod
    def from_app(cls, app: FastAPI, settings: Optional[Settings] = None) -> "RouteDoc":
        return cls(app=app, settings=settings)

    @property
    def document(self) -> OpenAPI:
        return self.generator.api

    def set_info(self, info: Info) -> None:
        self.generator.set_info(info)

    def document_handler(self, content_type: Optional[str] = None) -> Handler:
        """
        Handler serving the document as JSON or YAML.

        An unknown content type raises ConfigurationError here, not when a
        request comes in.
        """
        if content_type is None:
            content_type = self.settings.document_format
        fmt = content_type.strip().lower() or "json"

        if fmt == "json":
            def serve_json(c: Context) -> None:
                c.json(200, self.generator.to_dict())

            return serve_json

        if fmt == "yaml":
            def serve_yaml(c: Context) -> None:
                c.yaml(200, self.generator.to_dict())

            return serve_yaml

        raise ConfigurationError(f"invalid content type {content_type!r}, use JSON or YAML")

    async def __call__(self, scope, receive, send) -> None:
        await self.app(scope, receive, send)
