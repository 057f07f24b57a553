from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class _Model(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class Contact(_Model):
    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class License(_Model):
    name: str
    url: Optional[str] = None


class Info(_Model):
    title: str = "API"
    version: str = "1.0"
    description: Optional[str] = None
    terms_of_service: Optional[str] = Field(default=None, alias="termsOfService")
    contact: Optional[Contact] = None
    license: Optional[License] = None


class Server(_Model):
    url: str
    description: Optional[str] = None


class Tag(_Model):
    name: str
    description: Optional[str] = None


class Example(_Model):
    summary: Optional[str] = None
    value: Any = None


class MediaType(_Model):
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")
    example: Any = None
    examples: Optional[dict[str, Example]] = None


class Header(_Model):
    description: Optional[str] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class Response(_Model):
    description: str
    headers: Optional[dict[str, Header]] = None
    content: Optional[dict[str, MediaType]] = None


class Parameter(_Model):
    name: str
    in_: str = Field(alias="in")
    description: Optional[str] = None
    required: Optional[bool] = None
    deprecated: Optional[bool] = None
    schema_: Optional[dict[str, Any]] = Field(default=None, alias="schema")


class RequestBody(_Model):
    description: Optional[str] = None
    required: Optional[bool] = None
    content: dict[str, MediaType] = Field(default_factory=dict)


class XCodeSample(_Model):
    lang: str
    source: str
    label: Optional[str] = None


SecurityRequirement = dict[str, list[str]]


class Operation(_Model):
    """One documented endpoint, as it appears under a path item."""

    tags: Optional[list[str]] = None
    summary: Optional[str] = None
    description: Optional[str] = None
    operation_id: str = Field(alias="operationId")
    parameters: Optional[list[Parameter]] = None
    request_body: Optional[RequestBody] = Field(default=None, alias="requestBody")
    responses: dict[str, Response] = Field(default_factory=dict)
    deprecated: Optional[bool] = None
    security: Optional[list[SecurityRequirement]] = None
    x_code_samples: Optional[list[XCodeSample]] = Field(default=None, alias="x-codeSamples")
    x_internal: Optional[bool] = Field(default=None, alias="x-internal")


class PathItem(_Model):
    get: Optional[Operation] = None
    put: Optional[Operation] = None
    post: Optional[Operation] = None
    delete: Optional[Operation] = None
    options: Optional[Operation] = None
    head: Optional[Operation] = None
    patch: Optional[Operation] = None
    trace: Optional[Operation] = None

    def operation(self, method: str) -> Optional[Operation]:
        return getattr(self, method.lower())

    def set_operation(self, method: str, operation: Operation) -> None:
        setattr(self, method.lower(), operation)

    def operations(self) -> dict[str, Operation]:
        out = {}
        for method in ("get", "put", "post", "delete", "options", "head", "patch", "trace"):
            op = getattr(self, method)
            if op is not None:
                out[method.upper()] = op
        return out


class Components(_Model):
    schemas: dict[str, dict[str, Any]] = Field(default_factory=dict)
    security_schemes: Optional[dict[str, dict[str, Any]]] = Field(
        default=None, alias="securitySchemes"
    )


class OpenAPI(_Model):
    openapi: str = "3.0.3"
    info: Info = Field(default_factory=Info)
    servers: Optional[list[Server]] = None
    tags: list[Tag] = Field(default_factory=list)
    paths: dict[str, PathItem] = Field(default_factory=dict)
    components: Components = Field(default_factory=Components)
