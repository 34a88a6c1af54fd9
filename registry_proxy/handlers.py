"""Handlers for the three request shapes the proxy distinguishes."""

import httpx
import structlog
from fastapi import Request
from fastapi.responses import JSONResponse, RedirectResponse, Response

from . import config
from .challenge import parse_www_authenticate
from .redirect import build_redirect_url
from .scope import rewrite_scope
from .upstream import (
    BODY_METHODS,
    fetch_with_client,
    filter_headers,
    relay_response,
    stream_request_body,
)

logger = structlog.stdlib.get_logger(__name__)

PROXY_SERVICE = "cloudflare-docker-proxy"


def response_unauthorized(host: str) -> JSONResponse:
    """Return a 401 pointing the client at our own /v2/auth endpoint."""
    scheme = config.auth_realm_scheme()
    www_auth = f'Bearer realm="{scheme}://{host}/v2/auth",service="{PROXY_SERVICE}"'

    return JSONResponse(
        status_code=401,
        content={"message": "UNAUTHORIZED"},
        headers={"WWW-Authenticate": www_auth},
    )


async def handle_registry_root(
    client: httpx.AsyncClient,
    upstream: str,
    host: str,
    authorization: str | None,
) -> Response:
    headers = {}
    if authorization:
        headers["Authorization"] = authorization

    resp = await fetch_with_client(client, f"{upstream}/v2/", headers=headers)

    if resp.status_code == 401:
        await resp.aclose()
        logger.info("Upstream requires auth, redirecting challenge", upstream=upstream)
        return response_unauthorized(host)

    return relay_response(resp)


async def fetch_token(
    client: httpx.AsyncClient,
    realm: str,
    service: str | None,
    scope: str | None,
    authorization: str | None,
) -> httpx.Response:
    """Request a token from the registry authentication server."""
    params = {}
    if service:
        params["service"] = service
    if scope:
        params["scope"] = scope

    headers = {}
    if authorization:
        headers["Authorization"] = authorization

    return await fetch_with_client(client, realm, headers=headers, params=params)


async def handle_auth(
    client: httpx.AsyncClient,
    upstream: str,
    is_dockerhub: bool,
    scope: str | None,
    authorization: str | None,
) -> Response:
    # The probe is unauthenticated so the upstream always shows its challenge
    probe = await fetch_with_client(client, f"{upstream}/v2/")

    if probe.status_code != 401:
        return relay_response(probe)

    auth_header = probe.headers.get("WWW-Authenticate")
    if auth_header is None:
        logger.warning("Upstream 401 without challenge", upstream=upstream)
        return relay_response(probe)

    await probe.aclose()
    challenge = parse_www_authenticate(auth_header)

    scope = rewrite_scope(scope, is_dockerhub)
    logger.info(
        "Fetching token",
        realm=challenge.realm,
        service=challenge.service,
        scope=scope,
        authenticated=authorization is not None,
    )

    token_resp = await fetch_token(
        client, challenge.realm, challenge.service, scope, authorization
    )
    return relay_response(token_resp)


def handle_dockerhub_redirect(request: Request, path: str, query: str) -> RedirectResponse:
    # Example: /v2/busybox/manifests/latest -> /v2/library/busybox/manifests/latest
    new_url = build_redirect_url(request.url, path, query)
    logger.debug("Redirecting to library namespace", location=new_url)
    return RedirectResponse(url=new_url, status_code=301)


async def forward_request(
    client: httpx.AsyncClient,
    upstream: str,
    path: str,
    query: str,
    request: Request,
) -> Response:
    upstream_url = upstream + path
    if query:
        upstream_url += f"?{query}"

    content = None
    if request.method in BODY_METHODS:
        content = stream_request_body(request)

    logger.info("Proxying request", method=request.method, upstream_url=upstream_url)

    resp = await fetch_with_client(
        client,
        upstream_url,
        method=request.method,
        headers=filter_headers(request.headers.items()),
        content=content,
    )
    return relay_response(resp)
