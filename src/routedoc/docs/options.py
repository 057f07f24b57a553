"""
Operation options.

Each option is a function that fills part of an OperationInfo. Options are
applied in the order given; when two options touch the same field the later
one wins. Responses are keyed by status code and headers by name, so a later
option replaces an earlier entry with the same key instead of adding a second.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Optional

from routedoc.openapi.model import SecurityRequirement, XCodeSample
from routedoc.openapi.operation import OperationInfo, OperationResponse, ResponseHeader


OperationOption = Callable[[OperationInfo], None]


def operation_id(id: str) -> OperationOption:
    def option(o: OperationInfo) -> None:
        o.id = id

    return option


def summary(text: str) -> OperationOption:
    def option(o: OperationInfo) -> None:
        o.summary = text

    return option


def summaryf(fmt: str, *args: Any) -> OperationOption:
    return summary(fmt % args)


def description(text: str) -> OperationOption:
    def option(o: OperationInfo) -> None:
        o.description = text

    return option


def descriptionf(fmt: str, *args: Any) -> OperationOption:
    return description(fmt % args)


def deprecated(flag: bool = True) -> OperationOption:
    def option(o: OperationInfo) -> None:
        o.deprecated = flag

    return option


def status_description(text: str) -> OperationOption:
    """Description of the default (success) response."""

    def option(o: OperationInfo) -> None:
        o.status_description = text

    return option


def input_model(model: type) -> OperationOption:
    """Document `model` as the request input instead of the handler's own."""

    def option(o: OperationInfo) -> None:
        o.input_model = model

    return option


def _put_response(o: OperationInfo, resp: OperationResponse) -> None:
    o.responses = [r for r in o.responses if r.code != resp.code]
    o.responses.append(resp)


def response(
    code: int | str,
    desc: str,
    model: Any = None,
    headers: Iterable[ResponseHeader] = (),
    example: Any = None,
) -> OperationOption:
    def option(o: OperationInfo) -> None:
        _put_response(
            o,
            OperationResponse(
                code=str(code),
                description=desc,
                model=model,
                headers=tuple(headers),
                example=example,
            ),
        )

    return option


def response_with_examples(
    code: int | str,
    desc: str,
    model: Any = None,
    headers: Iterable[ResponseHeader] = (),
    examples: Optional[dict[str, Any]] = None,
) -> OperationOption:
    def option(o: OperationInfo) -> None:
        _put_response(
            o,
            OperationResponse(
                code=str(code),
                description=desc,
                model=model,
                headers=tuple(headers),
                examples=dict(examples or {}),
            ),
        )

    return option


def header(name: str, desc: str = "", model: Any = str) -> OperationOption:
    """Header sent with the default response."""

    def option(o: OperationInfo) -> None:
        o.headers = [h for h in o.headers if h.name != name]
        o.headers.append(ResponseHeader(name=name, description=desc, model=model))

    return option


def security(requirement: SecurityRequirement) -> OperationOption:
    def option(o: OperationInfo) -> None:
        if o.security is None:
            o.security = []
        o.security.append(dict(requirement))

    return option


def without_security() -> OperationOption:
    """Mark the operation as public, overriding document-wide security."""

    def option(o: OperationInfo) -> None:
        o.security = []

    return option


def x_code_sample(lang: str, source: str, label: Optional[str] = None) -> OperationOption:
    def option(o: OperationInfo) -> None:
        o.x_code_samples.append(XCodeSample(lang=lang, source=source, label=label))

    return option


def x_internal() -> OperationOption:
    def option(o: OperationInfo) -> None:
        o.x_internal = True

    return option
