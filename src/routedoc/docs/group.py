from __future__ import annotations

from typing import Optional, Sequence, Union

from routedoc.docs.assembler import assemble_operation
from routedoc.docs.options import OperationOption
from routedoc.openapi.generator import Generator
from routedoc.openapi.model import Tag
from routedoc.routing.context import Handler
from routedoc.routing.router import RouterNode


class RouterGroup:
    """
    A documented group of routes: a router node, the tags every operation
    registered under it receives, and the shared document generator.
    """

    def __init__(self, node: RouterNode, generator: Generator, tags: Sequence[Tag] = ()):
        self._node = node
        self._generator = generator
        self._tags: tuple[Tag, ...] = tuple(tags)

    @property
    def base_path(self) -> str:
        return self._node.base_path

    @property
    def tags(self) -> tuple[Tag, ...]:
        return self._tags

    @property
    def node(self) -> RouterNode:
        return self._node

    def group(
        self,
        path: str,
        tag: Union[Tag, str, None] = None,
        *handlers: Handler,
    ) -> "RouterGroup":
        """
        Create a child group under `path`.

        The child gets this group's tags plus `tag` (which is also added to
        the document). This group's own tags are left untouched.
        """
        tags = self._tags
        if tag is not None:
            tags = (*tags, self._generator.add_tag(tag))
        return RouterGroup(self._node.group(path, *handlers), self._generator, tags)

    def use(self, *handlers: Handler) -> None:
        self._node.use(*handlers)

    def handle(
        self,
        path: str,
        method: str,
        options: Optional[Sequence[OperationOption]],
        *handlers: Handler,
    ) -> "RouterGroup":
        chain = assemble_operation(
            self._generator,
            self._node.base_path,
            path,
            method,
            [t.name for t in self._tags],
            list(options or ()),
            handlers,
        )
        self._node.handle(method, path, *chain)
        return self

    def get(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "GET", options, *handlers)

    def post(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "POST", options, *handlers)

    def put(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "PUT", options, *handlers)

    def patch(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "PATCH", options, *handlers)

    def delete(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "DELETE", options, *handlers)

    def options(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "OPTIONS", options, *handlers)

    def head(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "HEAD", options, *handlers)

    def trace(self, path: str, options: Optional[Sequence[OperationOption]], *handlers: Handler) -> "RouterGroup":
        return self.handle(path, "TRACE", options, *handlers)
