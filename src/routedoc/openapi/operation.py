from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional

from routedoc.openapi.model import SecurityRequirement, XCodeSample


@dataclass(frozen=True)
class ResponseHeader:
    name: str
    description: str = ""
    model: Any = str


@dataclass(frozen=True)
class OperationResponse:
    code: str
    description: str
    model: Any = None
    headers: tuple[ResponseHeader, ...] = ()
    example: Any = None
    examples: Optional[dict[str, Any]] = None


@dataclass
class OperationInfo:
    """
    Everything known about an operation before it is added to a document.

    Built empty for each registration and filled by operation options, then
    completed from the typed handler (if any).
    """

    id: str = ""
    summary: str = ""
    description: str = ""
    deprecated: bool = False
    status_code: int = 0
    status_description: str = ""
    input_model: Optional[type] = None
    responses: list[OperationResponse] = field(default_factory=list)
    headers: list[ResponseHeader] = field(default_factory=list)
    security: Optional[list[SecurityRequirement]] = None
    x_code_samples: list[XCodeSample] = field(default_factory=list)
    x_internal: bool = False
