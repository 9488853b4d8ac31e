"""Shared test fixtures and configuration."""

from typing import Callable, Generator, Union

import httpx
import pytest

from slot_probe import CookieStore, HttpClient, RequestConfig, Response


Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]

BINARY_PAYLOAD = bytes(range(256)) * 4


class StubServer:
    """In-memory HTTP server for httpx.MockTransport.

    Routes requests by URL path and records every request it sees.
    Unknown paths get a 404.
    """

    def __init__(self) -> None:
        self.routes: dict[str, Route] = {}
        self.requests: list[httpx.Request] = []

    def route(self, path: str, response: Route) -> None:
        self.routes[path] = response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        if callable(route):
            return route(request)
        # Fresh copy so a route can be served more than once
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)


def _echo(request: httpx.Request) -> httpx.Response:
    return httpx.Response(
        200,
        json={
            "method": request.method,
            "headers": dict(request.headers),
            "body": request.content.decode("latin-1"),
        },
    )


def _whoami(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, text=request.headers.get("cookie", ""))


def _refuse(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("Connection refused", request=request)


# ============== Server Fixtures ==============

@pytest.fixture
def server() -> StubServer:
    """Stub server with the standard routes."""
    stub = StubServer()
    stub.route("/ok", httpx.Response(200, text="hello"))
    stub.route("/blocked", httpx.Response(403, text="forbidden"))
    stub.route("/broken", httpx.Response(500, text="<h1>Server Error</h1>"))
    stub.route("/start", httpx.Response(302, headers={"Location": "/final"}, text="moved"))
    stub.route("/final", httpx.Response(200, text="done"))
    stub.route("/loop", httpx.Response(302, headers={"Location": "/loop"}))
    stub.route(
        "/login",
        httpx.Response(200, headers={"Set-Cookie": "session=abc; Path=/"}, text="welcome"),
    )
    stub.route(
        "/hop",
        httpx.Response(302, headers={"Location": "/whoami", "Set-Cookie": "hop=1; Path=/"}),
    )
    stub.route("/whoami", _whoami)
    stub.route("/echo", _echo)
    stub.route("/latin", httpx.Response(200, content="café".encode("iso-8859-1")))
    stub.route("/utf8", httpx.Response(200, content="café".encode("utf-8")))
    stub.route("/file", httpx.Response(200, content=BINARY_PAYLOAD))
    stub.route("/down", _refuse)
    return stub


@pytest.fixture
def transport(server: StubServer) -> httpx.MockTransport:
    """Mock transport backed by the stub server."""
    return httpx.MockTransport(server)


@pytest.fixture
def binary_payload() -> bytes:
    """Bytes served by /file."""
    return BINARY_PAYLOAD


# ============== Client Fixtures ==============

@pytest.fixture
def default_config() -> RequestConfig:
    """Default request configuration."""
    return RequestConfig()


@pytest.fixture
def client(transport: httpx.MockTransport) -> Generator[HttpClient, None, None]:
    """HttpClient talking to the stub server."""
    client = HttpClient(transport=transport)
    yield client
    client.close()


# ============== Cookie Fixtures ==============

@pytest.fixture
def cookie_store() -> CookieStore:
    """Empty cookie store."""
    return CookieStore()


@pytest.fixture
def populated_cookie_store() -> CookieStore:
    """Cookie store with test cookies."""
    store = CookieStore()
    store.set("session_id", "abc123", domain="example.com")
    store.set("user_token", "xyz789", domain="example.com", path="/api")
    store.set("other_cookie", "value", domain="other.com")
    return store


# ============== Response Fixtures ==============

@pytest.fixture
def sample_response() -> Response:
    """Sample successful response."""
    return Response(
        status_code=200,
        headers={"Content-Type": "application/json"},
        content=b'{"success": true}',
        url="https://example.com/api/test",
        cookies={"session": "abc123"},
        elapsed=0.5,
    )


# ============== Backend Fixtures ==============

@pytest.fixture
def httpx_client_calls(monkeypatch, transport: httpx.MockTransport) -> list[dict]:
    """Record the keyword arguments of every httpx.Client the backend opens.

    The real client is still built, but routed to the stub server with no
    proxy and no environment lookups.
    """
    calls: list[dict] = []
    real_client = httpx.Client

    def recording_client(**kwargs):
        calls.append(kwargs)
        return real_client(**{**kwargs, "proxy": None, "transport": transport, "trust_env": False})

    monkeypatch.setattr(httpx, "Client", recording_client)
    return calls
