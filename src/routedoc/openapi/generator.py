from __future__ import annotations

import json
import logging
from http import HTTPStatus
from typing import Any, Iterable, Optional, Union

import yaml

from routedoc.binding.params import location_of, wire_name
from routedoc.errors import (
    DuplicateOperationIDError,
    OpenAPIError,
    OperationConflictError,
    ResponseConflictError,
)
from routedoc.openapi.model import (
    Example,
    Header,
    Info,
    MediaType,
    OpenAPI,
    Operation,
    Parameter,
    PathItem,
    RequestBody,
    Response,
    Server,
    Tag,
)
from routedoc.openapi.operation import OperationInfo, ResponseHeader
from routedoc.openapi.schemas import SchemaRegistry, is_model


logger = logging.getLogger(__name__)

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "HEAD", "TRACE")


def _status_text(code: str) -> str:
    try:
        return HTTPStatus(int(code)).phrase
    except ValueError:
        return ""


class Generator:
    """
    Owns the OpenAPI document and is the only code that writes to it.

    Writes happen while routes are registered; once the application serves
    requests the document is only read.
    """

    def __init__(
        self,
        info: Optional[Info] = None,
        openapi_version: str = "3.0.3",
        media_type: str = "application/json",
    ):
        self._api = OpenAPI(openapi=openapi_version, info=info or Info())
        self._schemas = SchemaRegistry(self._api.components)
        # operation id -> (method, path)
        self._operation_ids: dict[str, tuple[str, str]] = {}
        self.media_type = media_type

    @property
    def api(self) -> OpenAPI:
        return self._api

    # ----------------------------
    # Document metadata
    # ----------------------------

    def set_info(self, info: Info) -> None:
        self._api.info = info

    def add_server(self, url: str, description: Optional[str] = None) -> None:
        servers = self._api.servers or []
        if any(s.url == url for s in servers):
            return
        servers.append(Server(url=url, description=description))
        self._api.servers = servers

    def add_security_scheme(self, name: str, scheme: dict[str, Any]) -> None:
        schemes = self._api.components.security_schemes or {}
        schemes[name] = scheme
        self._api.components.security_schemes = schemes

    def add_tag(self, tag: Union[Tag, str]) -> Tag:
        """Add a tag unless one with the same name exists; return the stored tag."""
        if isinstance(tag, str):
            tag = Tag(name=tag)
        for existing in self._api.tags:
            if existing.name == tag.name:
                if not existing.description and tag.description:
                    existing.description = tag.description
                return existing
        stored = tag.model_copy()
        self._api.tags.append(stored)
        logger.info(f"Added tag: {stored.name}")
        return stored

    # ----------------------------
    # Operations
    # ----------------------------

    def add_operation(
        self,
        path: str,
        method: str,
        input_type: Optional[type],
        output_type: Any,
        info: OperationInfo,
        tags: Iterable[str] = (),
    ) -> Optional[Operation]:
        """
        Document `method path` and return the new operation.

        Returns None when the exact same operation is already documented
        (replayed registration). Raises an OpenAPIError subclass on any
        conflict with what the document already holds.
        """
        method = method.upper()
        if method not in HTTP_METHODS:
            raise OpenAPIError(f"unsupported HTTP method: {method}")
        if not info.id:
            raise OpenAPIError(f"operation {method} {path} has no ID")

        op = Operation(
            operation_id=info.id,
            summary=info.summary or None,
            description=info.description or None,
            deprecated=True if info.deprecated else None,
            tags=list(dict.fromkeys(tags)) or None,
            security=[dict(s) for s in info.security] if info.security is not None else None,
            x_code_samples=list(info.x_code_samples) or None,
            x_internal=True if info.x_internal else None,
        )
        if input_type is not None:
            self._set_operation_input(op, input_type)

        status_code = str(info.status_code or 200)
        self._set_operation_response(
            op,
            status_code,
            output_type,
            info.status_description,
            info.headers,
        )
        for resp in info.responses:
            self._set_operation_response(
                op,
                resp.code,
                resp.model,
                resp.description,
                resp.headers,
                resp.example,
                resp.examples,
            )

        item = self._api.paths.get(path)
        existing = item.operation(method) if item is not None else None
        if existing is not None:
            if existing == op:
                logger.warning(f"Operation {method} {path} registered twice with identical content; keeping the first")
                return None
            raise OperationConflictError(method, path)

        owner = self._operation_ids.get(op.operation_id)
        if owner is not None:
            raise DuplicateOperationIDError(op.operation_id, method, path)

        if item is None:
            item = PathItem()
            self._api.paths[path] = item
        item.set_operation(method, op)
        self._operation_ids[op.operation_id] = (method, path)

        logger.debug(f"Documented {method} {path} as {op.operation_id}")
        return op

    def operation_id_owner(self, operation_id: str) -> Optional[tuple[str, str]]:
        """(method, path) of the operation using `operation_id`, if any."""
        return self._operation_ids.get(operation_id)

    def operation(self, path: str, method: str) -> Optional[Operation]:
        item = self._api.paths.get(path)
        return item.operation(method) if item is not None else None

    def _set_operation_input(self, op: Operation, input_type: type) -> None:
        if not is_model(input_type):
            # non-model input: the whole body has that schema
            op.request_body = RequestBody(
                required=True,
                content={self.media_type: MediaType(schema_=self._schemas.schema_for(input_type))},
            )
            return

        properties, required = self._schemas.model_properties(input_type)
        parameters: list[Parameter] = []
        body_fields: list[str] = []

        for name, field in input_type.model_fields.items():
            key = wire_name(name, field)
            location = location_of(field)
            if location == "body":
                body_fields.append(key)
                continue
            parameters.append(
                Parameter(
                    name=key,
                    in_=location,
                    description=field.description,
                    required=True if location == "path" else key in required,
                    schema_=properties.get(key),
                )
            )

        if parameters:
            op.parameters = parameters
        if not body_fields:
            return

        if len(body_fields) == len(input_type.model_fields):
            schema = self._schemas.schema_for(input_type)
        else:
            schema = {
                "type": "object",
                "properties": {k: properties[k] for k in body_fields if k in properties},
            }
            body_required = [k for k in body_fields if k in required]
            if body_required:
                schema["required"] = body_required

        op.request_body = RequestBody(
            required=any(k in required for k in body_fields),
            content={self.media_type: MediaType(schema_=schema)},
        )

    def _set_operation_response(
        self,
        op: Operation,
        code: str,
        model: Any,
        description: str,
        headers: Iterable[ResponseHeader],
        example: Any = None,
        examples: Optional[dict[str, Any]] = None,
    ) -> None:
        code = str(code)
        if code in op.responses:
            raise ResponseConflictError(code)

        response = Response(description=description or _status_text(code))

        if headers:
            response.headers = {
                h.name: Header(
                    description=h.description or None,
                    schema_=self._schemas.schema_for(h.model),
                )
                for h in headers
            }

        if model is not None:
            media = MediaType(schema_=self._schemas.schema_for(model))
            if examples:
                media.examples = {name: Example(value=value) for name, value in examples.items()}
            elif example is not None:
                media.example = example
            response.content = {self.media_type: media}

        op.responses[code] = response

    # ----------------------------
    # Serialization
    # ----------------------------

    def to_dict(self) -> dict[str, Any]:
        return self._api.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self, indent: Optional[int] = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    def to_yaml(self) -> str:
        return yaml.safe_dump(self.to_dict(), sort_keys=False, allow_unicode=True)
