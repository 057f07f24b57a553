from __future__ import annotations

import functools

from routedoc.errors import OperationNotFoundError, OperationTypeError
from routedoc.openapi.model import Operation
from routedoc.routing.context import Context, Handler, call_handler


OPERATION_CONTEXT_KEY = "_ctx_openapi_operation"


def publish_operation(handler: Handler, operation: Operation) -> Handler:
    """Wrap `handler` so every request it serves can see its documented operation."""

    @functools.wraps(handler)
    async def publisher(c: Context) -> None:
        c.set(OPERATION_CONTEXT_KEY, operation)
        await call_handler(handler, c)

    return publisher


def operation_from_context(c: Context) -> Operation:
    """
    Return the operation published for the current request.

    Raises OperationNotFoundError when the route has no documented typed
    handler, and OperationTypeError when something else sits under the key.
    """
    if OPERATION_CONTEXT_KEY not in c:
        raise OperationNotFoundError()
    value = c.get(OPERATION_CONTEXT_KEY)
    if not isinstance(value, Operation):
        raise OperationTypeError(value)
    return value
