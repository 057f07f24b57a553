from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from pydantic.fields import FieldInfo


Location = Literal["path", "query", "header", "body"]


@dataclass(frozen=True)
class Param:
    """
    Annotated marker telling where an input field is read from:

        class GetItem(BaseModel):
            id: Annotated[int, InPath]
            verbose: Annotated[bool, InQuery] = False
            request_id: Annotated[str | None, InHeader] = Field(None, alias="X-Request-ID")

    Unmarked fields are read from the JSON body.
    """

    location: Location


InPath = Param("path")
InQuery = Param("query")
InHeader = Param("header")


def location_of(field: FieldInfo) -> Location:
    for meta in field.metadata:
        if isinstance(meta, Param):
            return meta.location
    return "body"


def wire_name(name: str, field: FieldInfo) -> str:
    return field.alias or name
