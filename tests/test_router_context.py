import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from routedoc.routing.context import Context
from routedoc.routing.router import RouterNode


def test_group_base_paths_and_middleware_order():
    app = FastAPI()
    calls = []

    def root_mw(c: Context) -> None:
        calls.append("root")

    def api_mw(c: Context) -> None:
        calls.append("api")

    def handler(c: Context) -> None:
        calls.append("handler")
        c.json(200, {"path": c.request.url.path, "id": c.params["id"]})

    root = RouterNode(app)
    root.use(root_mw)
    api = root.group("/api", api_mw).group("v1")
    assert api.base_path == "/api/v1"

    api.handle("get", "/users/:id", handler)
    resp = TestClient(app).get("/api/v1/users/42")

    assert resp.status_code == 200
    assert resp.json() == {"path": "/api/v1/users/42", "id": "42"}
    assert calls == ["root", "api", "handler"]


def test_next_runs_rest_of_chain_then_resumes():
    app = FastAPI()
    order = []

    async def wrap(c: Context) -> None:
        order.append("before")
        await c.next()
        order.append("after")

    async def handler(c: Context) -> None:
        order.append("handler")
        c.json(201, {"ok": True})

    RouterNode(app).handle("POST", "/things", wrap, handler)
    resp = TestClient(app).post("/things")

    assert resp.status_code == 201
    assert order == ["before", "handler", "after"]


def test_abort_stops_chain():
    app = FastAPI()
    reached = []

    def guard(c: Context) -> None:
        if c.request.headers.get("authorization") is None:
            c.abort_with_json(401, {"error": "unauthorized"})

    def handler(c: Context) -> None:
        reached.append(True)
        c.json(200, {"ok": True})

    RouterNode(app).handle("GET", "/private", guard, handler)
    client = TestClient(app)

    resp = client.get("/private")
    assert resp.status_code == 401
    assert reached == []

    resp = client.get("/private", headers={"Authorization": "Bearer x"})
    assert resp.status_code == 200
    assert reached == [True]


def test_context_values_do_not_leak_between_requests():
    app = FastAPI()

    def handler(c: Context) -> None:
        seen = "counter" in c
        c.set("counter", 1)
        c.json(200, {"seen_before": seen, "value": c.get("counter")})

    RouterNode(app).handle("GET", "/count", handler)
    client = TestClient(app)

    assert client.get("/count").json() == {"seen_before": False, "value": 1}
    assert client.get("/count").json() == {"seen_before": False, "value": 1}


def test_yaml_response_and_default_empty_response():
    app = FastAPI()

    def as_yaml(c: Context) -> None:
        c.yaml(200, {"name": "routedoc"})

    def nothing(c: Context) -> None:
        return None

    node = RouterNode(app)
    node.handle("GET", "/yaml", as_yaml)
    node.handle("GET", "/nothing", nothing)
    client = TestClient(app)

    resp = client.get("/yaml")
    assert resp.headers["content-type"].startswith("application/x-yaml")
    assert resp.text == "name: routedoc\n"

    resp = client.get("/nothing")
    assert resp.status_code == 200
    assert resp.content == b""


def test_handle_rejects_unknown_method_and_empty_chain():
    node = RouterNode(FastAPI())
    with pytest.raises(ValueError):
        node.handle("FETCH", "/x", lambda c: None)
    with pytest.raises(ValueError):
        node.handle("GET", "/x")
