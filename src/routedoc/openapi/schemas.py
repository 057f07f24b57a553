from __future__ import annotations

import inspect
from typing import Any, Optional

from pydantic import BaseModel, TypeAdapter
from pydantic.json_schema import models_json_schema

from routedoc.errors import SchemaConflictError
from routedoc.openapi.model import Components


REF_TEMPLATE = "#/components/schemas/{model}"


def is_model(tp: Any) -> bool:
    return inspect.isclass(tp) and issubclass(tp, BaseModel)


class SchemaRegistry:
    """
    Turns Python types into JSON schemas and keeps the named ones in the
    document components. A name maps to exactly one schema.
    """

    def __init__(self, components: Components):
        self._components = components

    @property
    def schemas(self) -> dict[str, dict[str, Any]]:
        return self._components.schemas

    def register(self, name: str, schema: dict[str, Any]) -> None:
        existing = self.schemas.get(name)
        if existing is not None and existing != schema:
            raise SchemaConflictError(name)
        self.schemas[name] = schema

    def schema_for(self, tp: Any) -> Optional[dict[str, Any]]:
        """Schema of `tp`; models come back as a $ref to their component."""
        if tp is None:
            return None
        if is_model(tp):
            refs, top = models_json_schema([(tp, "validation")], ref_template=REF_TEMPLATE)
            self._hoist(top)
            return dict(refs[(tp, "validation")])

        schema = TypeAdapter(tp).json_schema(ref_template=REF_TEMPLATE)
        self._hoist(schema)
        return schema

    def model_properties(self, model: type[BaseModel]) -> tuple[dict[str, Any], list[str]]:
        """Inline properties and required names of a model, keyed by wire name."""
        schema = model.model_json_schema(ref_template=REF_TEMPLATE)
        self._hoist(schema)
        return schema.get("properties", {}), list(schema.get("required", []))

    def _hoist(self, schema: dict[str, Any]) -> None:
        for name, definition in schema.pop("$defs", {}).items():
            self.register(name, definition)
