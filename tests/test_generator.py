from typing import Annotated, Optional

import pytest
import yaml
from pydantic import BaseModel, Field

from routedoc.binding.params import InHeader, InPath, InQuery
from routedoc.errors import (
    DuplicateOperationIDError,
    OpenAPIError,
    OperationConflictError,
    ResponseConflictError,
    SchemaConflictError,
)
from routedoc.openapi.generator import Generator
from routedoc.openapi.model import Info, Tag
from routedoc.openapi.operation import OperationInfo, OperationResponse, ResponseHeader


class Item(BaseModel):
    id: int
    name: str


class GetItem(BaseModel):
    id: Annotated[int, InPath] = Field(description="Item identifier")
    verbose: Annotated[bool, InQuery] = False
    request_id: Annotated[Optional[str], InHeader] = Field(None, alias="X-Request-ID")


class CreateItem(BaseModel):
    name: str
    price: float = 0.0


class UpdateItem(BaseModel):
    id: Annotated[int, InPath]
    name: str


def test_add_operation_builds_parameters_and_response():
    gen = Generator()
    op = gen.add_operation("/items/:id", "get", GetItem, Item, OperationInfo(id="getItem"), ["items"])

    assert op is not None
    assert gen.operation("/items/:id", "GET") is op

    doc = gen.to_dict()
    get = doc["paths"]["/items/:id"]["get"]
    assert get["operationId"] == "getItem"
    assert get["tags"] == ["items"]

    params = {p["name"]: p for p in get["parameters"]}
    assert params["id"]["in"] == "path"
    assert params["id"]["required"] is True
    assert params["id"]["description"] == "Item identifier"
    assert params["verbose"]["in"] == "query"
    assert params["verbose"]["required"] is False
    assert params["X-Request-ID"]["in"] == "header"
    assert "requestBody" not in get

    ok = get["responses"]["200"]
    assert ok["description"] == "OK"
    assert ok["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/Item"}
    assert "Item" in doc["components"]["schemas"]


def test_body_only_model_is_referenced():
    gen = Generator()
    info = OperationInfo(id="createItem", status_code=201, status_description="Created")
    gen.add_operation("/items", "POST", CreateItem, Item, info)

    post = gen.to_dict()["paths"]["/items"]["post"]
    body = post["requestBody"]
    assert body["required"] is True
    assert body["content"]["application/json"]["schema"] == {"$ref": "#/components/schemas/CreateItem"}
    assert post["responses"]["201"]["description"] == "Created"


def test_mixed_model_splits_path_and_body():
    gen = Generator()
    gen.add_operation("/items/{id}", "PUT", UpdateItem, Item, OperationInfo(id="updateItem"))

    put = gen.to_dict()["paths"]["/items/{id}"]["put"]
    assert [p["name"] for p in put["parameters"]] == ["id"]
    schema = put["requestBody"]["content"]["application/json"]["schema"]
    assert schema["type"] == "object"
    assert list(schema["properties"]) == ["name"]
    assert schema["required"] == ["name"]


def test_list_output_hoists_model():
    gen = Generator()
    gen.add_operation("/items", "GET", None, list[Item], OperationInfo(id="listItems"))

    doc = gen.to_dict()
    schema = doc["paths"]["/items"]["get"]["responses"]["200"]["content"]["application/json"]["schema"]
    assert schema["type"] == "array"
    assert schema["items"] == {"$ref": "#/components/schemas/Item"}
    assert "Item" in doc["components"]["schemas"]


def test_no_output_type_means_no_content():
    gen = Generator()
    gen.add_operation("/items/:id", "DELETE", None, None, OperationInfo(id="deleteItem", status_code=204))

    resp = gen.to_dict()["paths"]["/items/:id"]["delete"]["responses"]["204"]
    assert resp == {"description": "No Content"}


def test_additional_responses_headers_and_examples():
    gen = Generator()
    info = OperationInfo(
        id="getItem",
        headers=[ResponseHeader(name="X-Rate-Limit", description="calls left", model=int)],
        responses=[
            OperationResponse(code="404", description="not found", model=Item, example={"id": 0, "name": ""}),
            OperationResponse(code="409", description="conflict", model=Item, examples={"dup": {"id": 1, "name": "a"}}),
        ],
    )
    gen.add_operation("/items/:id", "GET", None, Item, info)

    responses = gen.to_dict()["paths"]["/items/:id"]["get"]["responses"]
    assert responses["200"]["headers"]["X-Rate-Limit"] == {
        "description": "calls left",
        "schema": {"type": "integer"},
    }
    assert responses["404"]["content"]["application/json"]["example"] == {"id": 0, "name": ""}
    assert responses["409"]["content"]["application/json"]["examples"] == {"dup": {"value": {"id": 1, "name": "a"}}}


def test_response_code_clash_with_default_is_rejected():
    gen = Generator()
    info = OperationInfo(id="getItem", responses=[OperationResponse(code="200", description="again")])
    with pytest.raises(ResponseConflictError):
        gen.add_operation("/items", "GET", None, Item, info)


def test_identical_replay_returns_none():
    gen = Generator()
    first = gen.add_operation("/items", "GET", None, Item, OperationInfo(id="listItems", summary="List"), ["items"])
    second = gen.add_operation("/items", "GET", None, Item, OperationInfo(id="listItems", summary="List"), ["items"])

    assert first is not None
    assert second is None
    assert gen.operation("/items", "GET") is first


def test_conflicting_replay_is_rejected():
    gen = Generator()
    gen.add_operation("/items", "GET", None, Item, OperationInfo(id="listItems", summary="List"))
    with pytest.raises(OperationConflictError):
        gen.add_operation("/items", "GET", None, Item, OperationInfo(id="listItems", summary="Other"))


def test_operation_ids_are_unique():
    gen = Generator()
    gen.add_operation("/a", "GET", None, None, OperationInfo(id="same"))
    with pytest.raises(DuplicateOperationIDError) as exc:
        gen.add_operation("/b", "GET", None, None, OperationInfo(id="same"))
    assert "same" in str(exc.value)


def _same_name_other_shape():
    class Item(BaseModel):
        sku: str

    return Item


def test_schema_name_conflict_is_rejected():
    gen = Generator()
    gen.add_operation("/a", "GET", None, Item, OperationInfo(id="a"))

    with pytest.raises(SchemaConflictError):
        gen.add_operation("/b", "GET", None, _same_name_other_shape(), OperationInfo(id="b"))


def test_unknown_method_and_missing_id_are_rejected():
    gen = Generator()
    with pytest.raises(OpenAPIError):
        gen.add_operation("/a", "FETCH", None, None, OperationInfo(id="a"))
    with pytest.raises(OpenAPIError):
        gen.add_operation("/a", "GET", None, None, OperationInfo())


def test_tags_are_unique_by_name():
    gen = Generator()
    gen.add_tag("items")
    gen.add_tag(Tag(name="items", description="Item operations"))
    gen.add_tag(Tag(name="items", description="ignored"))
    gen.add_tag(Tag(name="users"))

    assert [t.model_dump(exclude_none=True) for t in gen.api.tags] == [
        {"name": "items", "description": "Item operations"},
        {"name": "users"},
    ]


def test_document_metadata_and_serialization():
    gen = Generator(info=Info(title="Shop", version="2.0"))
    gen.add_server("https://api.example.com", "production")
    gen.add_server("https://api.example.com")
    gen.add_security_scheme("bearer", {"type": "http", "scheme": "bearer"})
    gen.add_operation("/ping", "GET", None, None, OperationInfo(id="ping", security=[{"bearer": []}], x_internal=True))

    doc = yaml.safe_load(gen.to_yaml())
    assert doc["openapi"] == "3.0.3"
    assert doc["info"] == {"title": "Shop", "version": "2.0"}
    assert doc["servers"] == [{"url": "https://api.example.com", "description": "production"}]
    assert doc["components"]["securitySchemes"]["bearer"]["scheme"] == "bearer"
    assert doc["paths"]["/ping"]["get"]["security"] == [{"bearer": []}]
    assert doc["paths"]["/ping"]["get"]["x-internal"] is True

    gen.set_info(Info(title="Replaced", version="3"))
    assert '"title": "Replaced"' in gen.to_json()
