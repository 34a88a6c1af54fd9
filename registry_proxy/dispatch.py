"""Request classification and routing to the handlers."""

from dataclasses import dataclass

import httpx
import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, Response

from .handlers import (
    forward_request,
    handle_auth,
    handle_dockerhub_redirect,
    handle_registry_root,
)
from .redirect import should_redirect
from .routes import RouteTable

logger = structlog.stdlib.get_logger(__name__)

ROOT_PATH = "/v2/"
AUTH_PATH = "/v2/auth"


@dataclass(frozen=True)
class RootProbe:
    upstream: str
    host: str
    authorization: str | None


@dataclass(frozen=True)
class AuthRequest:
    upstream: str
    is_dockerhub: bool
    scope: str | None
    authorization: str | None


@dataclass(frozen=True)
class Forward:
    upstream: str
    is_dockerhub: bool
    path: str
    query: str


Route = RootProbe | AuthRequest | Forward


def raw_path(request: Request) -> str:
    """The request path exactly as the client sent it, percent-encoding intact."""
    raw = request.scope.get("raw_path")
    if raw is None:
        return request.url.path
    return raw.decode("latin-1")


def classify(request: Request, upstream: str, is_dockerhub: bool) -> Route:
    """Map a request onto exactly one handler by its path."""
    path = raw_path(request)
    authorization = request.headers.get("Authorization")

    if path == ROOT_PATH:
        return RootProbe(upstream, request.url.hostname or "", authorization)
    if path == AUTH_PATH:
        return AuthRequest(
            upstream,
            is_dockerhub,
            request.query_params.get("scope"),
            authorization,
        )
    return Forward(upstream, is_dockerhub, path, request.url.query)


async def dispatch(
    request: Request,
    route_table: RouteTable,
    client: httpx.AsyncClient,
) -> Response:
    host = request.url.hostname
    upstream = route_table.lookup(host)

    if upstream is None:
        logger.info("No route for host", host=host)
        return JSONResponse(status_code=404, content={"routes": route_table.as_dict()})

    route = classify(request, upstream, route_table.is_default_registry(upstream))
    structlog.contextvars.bind_contextvars(upstream=upstream)

    if isinstance(route, RootProbe):
        return await handle_registry_root(
            client, route.upstream, route.host, route.authorization
        )

    if isinstance(route, AuthRequest):
        return await handle_auth(
            client,
            route.upstream,
            route.is_dockerhub,
            route.scope,
            route.authorization,
        )

    if route.is_dockerhub and should_redirect(route.path):
        return handle_dockerhub_redirect(request, route.path, route.query)

    return await forward_request(client, route.upstream, route.path, route.query, request)
