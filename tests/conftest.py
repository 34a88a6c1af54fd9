from typing import Callable

import httpx
import pytest
from fastapi.testclient import TestClient

from registry_proxy import config, create_app
from registry_proxy.routes import RouteTable, build_default_routes

DOCKER_HOST = "docker.example.com"
QUAY_HOST = "quay.example.com"

DOCKER_CHALLENGE = (
    'Bearer realm="https://auth.docker.io/token",service="registry.docker.io"'
)


class Upstream:
    """Records requests sent upstream and answers them with ``handler``."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.handler: Callable[[httpx.Request], httpx.Response] = lambda r: httpx.Response(200)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self.handler(request)
        # Real transports hand back unread bodies; the relay streams them raw
        return httpx.Response(
            response.status_code,
            headers=response.headers,
            stream=response.stream,
        )

    @property
    def urls(self) -> list[str]:
        return [str(r.url) for r in self.requests]


@pytest.fixture(autouse=True)
def prod_mode(monkeypatch):
    monkeypatch.setattr(config, "MODE", "prod")


@pytest.fixture
def route_table() -> RouteTable:
    return RouteTable(routes=build_default_routes("example.com"))


@pytest.fixture
def upstream() -> Upstream:
    return Upstream()


@pytest.fixture
def make_client(route_table, upstream):
    clients = []

    def _make(host: str = DOCKER_HOST, **kwargs) -> TestClient:
        app = create_app(route_table, transport=httpx.MockTransport(upstream))
        client = TestClient(app, base_url=f"http://{host}", **kwargs)
        client.__enter__()
        clients.append(client)
        return client

    yield _make

    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def docker_client(make_client) -> TestClient:
    return make_client(DOCKER_HOST)


@pytest.fixture
def quay_client(make_client) -> TestClient:
    return make_client(QUAY_HOST)
