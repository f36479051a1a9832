from __future__ import annotations

import pytest
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from study_server.errors import DuplicateNameError, NotFoundError
from study_server.web.routing import RouteTable, normalize_path


def make_request(method: str, path: str, query: bytes = b"") -> Request:
    return Request(
        {
            "type": "http",
            "method": method,
            "path": path,
            "raw_path": path.encode(),
            "query_string": query,
            "headers": [(b"host", b"testserver")],
            "scheme": "http",
            "server": ("testserver", 80),
        }
    )


async def hello(request):
    return PlainTextResponse("hello", status_code=201, headers={"X-Handler": "hello"})


async def fallback(request):
    return PlainTextResponse(f"missing {request.url.path}", status_code=404)


@pytest.fixture
def table():
    table = RouteTable(fallback=fallback)
    table.get("/hello", hello, "Greeting")
    return table


@pytest.mark.parametrize(
    "raw, expected",
    [("/users", "/users"), ("/users?x=1", "/users"), ("/?a=b", "/"), ("", "/")],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == expected


def test_duplicate_route_rejected(table):
    with pytest.raises(DuplicateNameError):
        table.register("get", "/hello", hello)


def test_duplicate_detection_ignores_query(table):
    with pytest.raises(DuplicateNameError):
        table.get("/hello?x=1", hello)


def test_same_path_other_method_allowed(table):
    table.register("POST", "/hello", hello)
    assert [(r.method, r.path) for r in table.routes()] == [("GET", "/hello"), ("POST", "/hello")]


def test_lookup(table):
    route = table.lookup("get", "/hello?x=1")
    assert route.handler is hello
    assert route.description == "Greeting"

    with pytest.raises(NotFoundError) as exc_info:
        table.lookup("GET", "/hello/")
    assert exc_info.value.path == "/hello/"


@pytest.mark.asyncio
async def test_dispatch_hit_returns_handler_response_untouched(table):
    response = await table.dispatch(make_request("GET", "/hello", b"x=1"))
    assert response.status_code == 201
    assert response.body == b"hello"
    assert response.headers["x-handler"] == "hello"


@pytest.mark.asyncio
async def test_dispatch_miss_uses_fallback(table):
    response = await table.dispatch(make_request("DELETE", "/hello"))
    assert response.status_code == 404
    assert response.body == b"missing /hello"
