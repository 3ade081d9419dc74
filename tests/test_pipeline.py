# tests/test_pipeline.py
import asyncio
import json

from productapi.database import ProductStore
from productapi.errors import NotFoundError
from productapi.handlers import ProductHandlers
from productapi.pipeline import HandlerResult, Pipeline, PipelineRequest, default_stages

SECRET = "test-key"


def make_pipeline(debug=False):
    store = ProductStore()
    pipeline = Pipeline(default_stages(SECRET), debug=debug)
    ProductHandlers(store).register(pipeline)
    return pipeline, store


def run(pipeline, method, path, query=None, headers=None, body=None):
    raw = body if isinstance(body, bytes) else (json.dumps(body).encode() if body is not None else b"")
    request = PipelineRequest(method=method, path=path, query=query or {}, headers=headers or {}, body=raw)
    return asyncio.run(pipeline.handle(request))


def test_static_routes_win_over_id_pattern():
    pipeline, _ = make_pipeline()
    route, params = pipeline.resolve("GET", "/api/products/search")
    assert route.path == "/api/products/search"
    route, params = pipeline.resolve("GET", "/api/products/stats/")
    assert route.path == "/api/products/stats"
    route, params = pipeline.resolve("GET", "/api/products/7")
    assert route.path == "/api/products/{id}"
    assert params == {"id": "7"}


def test_unmatched_route_names_the_path():
    pipeline, _ = make_pipeline()
    resp = run(pipeline, "GET", "/nope")
    assert resp.status_code == 404
    assert resp.body == {"success": False, "error": "Route /nope not found"}
    assert run(pipeline, "PATCH", "/api/products/1").status_code == 404


def test_auth_runs_before_validation():
    pipeline, store = make_pipeline()
    resp = run(pipeline, "POST", "/api/products", body={"price": -1})
    assert resp.status_code == 401
    assert len(store) == 5


def test_header_names_are_case_insensitive():
    pipeline, store = make_pipeline()
    body = {"name": "Pen", "price": 1.5, "category": "Office"}
    resp = run(pipeline, "POST", "/api/products", headers={"X-API-Key": SECRET}, body=body)
    assert resp.status_code == 201
    assert resp.body["data"]["id"] == 6
    assert len(store) == 6


def test_malformed_json_is_a_validation_failure():
    pipeline, _ = make_pipeline()
    resp = run(pipeline, "POST", "/api/products", headers={"x-api-key": SECRET}, body=b"{not json")
    assert resp.status_code == 400
    assert resp.body["error"] == "Malformed JSON body"


def test_handler_errors_are_normalized():
    pipeline, _ = make_pipeline()
    resp = run(pipeline, "GET", "/api/products/99")
    assert resp.status_code == 404
    assert resp.body == {"success": False, "error": "Product with ID 99 not found"}


def _boom(ctx):
    raise RuntimeError("secret internals")


async def _async_boom(ctx):
    raise KeyError("also secret")


async def _async_ok(ctx):
    return HandlerResult({"success": True}, status_code=202)


async def _async_missing(ctx):
    raise NotFoundError("gone")


def test_unexpected_faults_become_generic_500():
    pipeline, _ = make_pipeline()
    pipeline.add_route("GET", "/boom", _boom)
    pipeline.add_route("GET", "/async-boom", _async_boom)
    for path in ("/boom", "/async-boom"):
        resp = run(pipeline, "GET", path)
        assert resp.status_code == 500
        assert resp.body == {"success": False, "error": "Internal Server Error"}


def test_debug_mode_adds_stack():
    pipeline, _ = make_pipeline(debug=True)
    pipeline.add_route("GET", "/boom", _boom)
    resp = run(pipeline, "GET", "/boom")
    assert resp.status_code == 500
    assert "RuntimeError" in resp.body["stack"]


def test_async_handlers_are_awaited():
    pipeline, _ = make_pipeline()
    pipeline.add_route("GET", "/ok", _async_ok)
    pipeline.add_route("GET", "/missing", _async_missing)
    assert run(pipeline, "GET", "/ok").status_code == 202
    assert run(pipeline, "GET", "/missing").status_code == 404


def test_custom_stage_can_short_circuit():
    pipeline, store = make_pipeline()
    calls = []

    def block_everything(ctx):
        calls.append(ctx.request.path)
        return NotFoundError("blocked")

    pipeline.stages.insert(1, block_everything)
    resp = run(pipeline, "DELETE", "/api/products/1", headers={"x-api-key": SECRET})
    assert resp.status_code == 404
    assert resp.body["error"] == "blocked"
    assert calls == ["/api/products/1"]
    assert len(store) == 5


def _not_a_number(ctx):
    return {"success": True, "data": float("nan")}


def test_bodies_are_rendered_inside_the_pipeline():
    pipeline, _ = make_pipeline()
    pipeline.add_route("GET", "/nan", _not_a_number)
    ok = run(pipeline, "GET", "/api/products/1")
    assert json.loads(ok.content) == ok.body
    resp = run(pipeline, "GET", "/nan")
    assert resp.status_code == 500
    assert json.loads(resp.content) == {"success": False, "error": "Internal Server Error"}
