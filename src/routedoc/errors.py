from __future__ import annotations


class RouteDocError(Exception):
    """Base class for every error raised by routedoc."""


class RegistrationError(RouteDocError, RuntimeError):
    """
    A route could not be documented.

    Raised while routes are registered at startup. Nothing in routedoc catches
    it: an application with an inconsistent document must not start serving.
    """


class ConfigurationError(RouteDocError, ValueError):
    """Invalid settings, document handler arguments or CLI targets."""


class OpenAPIError(RouteDocError):
    """The document model refused an operation, tag or schema."""


class SchemaConflictError(OpenAPIError):
    def __init__(self, name: str):
        self.name = name
        super().__init__(f"schema {name!r} is already registered with a different definition")


class OperationConflictError(OpenAPIError):
    def __init__(self, method: str, path: str, message: str | None = None):
        self.method = method
        self.path = path
        super().__init__(message or f"operation {method} {path} is already registered")


class DuplicateOperationIDError(OperationConflictError):
    def __init__(self, operation_id: str, method: str, path: str):
        self.operation_id = operation_id
        super().__init__(
            method,
            path,
            f"ID {operation_id} is already used by another operation",
        )


class ResponseConflictError(OpenAPIError):
    def __init__(self, code: str):
        self.code = code
        super().__init__(f"response with code {code} already exists")


class OperationLookupError(RouteDocError, LookupError):
    """No usable operation in a request context. Callers are expected to handle it."""


class OperationNotFoundError(OperationLookupError):
    def __init__(self) -> None:
        super().__init__("operation not found")


class OperationTypeError(OperationLookupError, TypeError):
    def __init__(self, value: object):
        self.value = value
        super().__init__(f"invalid type: not an operation ({type(value).__name__})")
