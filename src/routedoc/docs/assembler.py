from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from routedoc.binding.typed import recognize
from routedoc.docs.options import OperationOption
from routedoc.docs.publisher import publish_operation
from routedoc.errors import OpenAPIError, RegistrationError
from routedoc.openapi.generator import Generator
from routedoc.openapi.model import Operation
from routedoc.openapi.operation import OperationInfo
from routedoc.routing.context import Handler
from routedoc.routing.paths import fallback_operation_id, join_paths


logger = logging.getLogger(__name__)


def _add_operation(
    generator: Generator,
    operation_path: str,
    method: str,
    path: str,
    input_type: Optional[type],
    output_type: object,
    info: OperationInfo,
    tags: Iterable[str],
) -> Optional[Operation]:
    try:
        return generator.add_operation(operation_path, method, input_type, output_type, info, tags)
    except OpenAPIError as e:
        raise RegistrationError(
            f"error while generating OpenAPI spec on operation {method} {path}: {e}"
        ) from e


def _fallback_id(generator: Generator, method: str, operation_path: str) -> str:
    """
    Derived id for a route without a typed handler.

    Paths differing only in punctuation (`/a-b`, `/a_b`) derive the same id;
    later ones get a numeric suffix.
    """
    base = fallback_operation_id(method, operation_path)
    candidate, n = base, 2
    while generator.operation_id_owner(candidate) not in (None, (method, operation_path)):
        candidate = f"{base}_{n}"
        n += 1
    return candidate


def assemble_operation(
    generator: Generator,
    base_path: str,
    path: str,
    method: str,
    tags: Iterable[str],
    options: Sequence[OperationOption],
    handlers: Sequence[Handler],
) -> list[Handler]:
    """
    Document one route and return the handler chain to register for it.

    At most one handler of the chain may be a typed handler. Its input and
    output types and its name complete the operation described by `options`,
    and it is replaced by a wrapper that publishes the operation into the
    request context. Without a typed handler the operation is documented from
    the options alone, and a route registered with neither is not documented.
    """
    method = method.upper()
    chain = list(handlers)

    info = OperationInfo()
    for option in options:
        option(info)

    matches = []
    for index, handler in enumerate(chain):
        meta = recognize(handler)
        if meta is not None:
            matches.append((index, meta))

    if len(matches) > 1:
        raise RegistrationError(f"multiple typed handlers used for operation {method} {path}")

    operation_path = join_paths(base_path, path)

    if not matches:
        if not options:
            logger.debug(f"Route {method} {operation_path} is not documented")
            return chain
        if not info.id:
            info.id = _fallback_id(generator, method, operation_path)
        _add_operation(generator, operation_path, method, path, info.input_model, None, info, tags)
        return chain

    index, meta = matches[0]
    if not info.id:
        info.id = meta.handler_name
    info.status_code = meta.default_status_code

    input_type = meta.input_type
    if info.input_model is not None:
        input_type = info.input_model

    operation = _add_operation(
        generator, operation_path, method, path, input_type, meta.output_type, info, tags
    )
    # the chain position recorded during the scan is the handler's identity
    if operation is not None:
        chain[index] = publish_operation(chain[index], operation)

    return chain
