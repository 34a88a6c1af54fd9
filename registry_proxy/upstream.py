"""Thin layer over the shared httpx client: send upstream, relay back."""

from typing import AsyncIterator, Iterable

import httpx
import structlog
from fastapi import Request
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

logger = structlog.stdlib.get_logger(__name__)

# Hop-by-hop headers must not be forwarded
HOP_BY_HOP = frozenset(
    [
        "connection",
        "keep-alive",
        "proxy-authenticate",
        "proxy-authorization",
        "te",
        "trailers",
        "transfer-encoding",
        "upgrade",
        "host",
    ]
)

BODY_METHODS = frozenset(["POST", "PUT", "PATCH"])


def filter_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    return [(k, v) for k, v in headers if k.lower() not in HOP_BY_HOP]


async def stream_request_body(request: Request) -> AsyncIterator[bytes]:
    async for chunk in request.stream():
        yield chunk


async def fetch_with_client(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    headers: list[tuple[str, str]] | dict[str, str] | None = None,
    params: dict[str, str] | None = None,
    content: AsyncIterator[bytes] | None = None,
    follow_redirects: bool = True,
) -> httpx.Response:
    """Send a request upstream and return the response with its body unread.

    The caller owns the response: either hand it to :func:`relay_response`
    or ``await response.aclose()``.
    """
    upstream_request = client.build_request(
        method,
        url,
        headers=headers,
        params=params,
        content=content,
    )
    logger.debug("Upstream request", method=method, url=str(upstream_request.url))
    response = await client.send(
        upstream_request,
        stream=True,
        follow_redirects=follow_redirects,
    )
    logger.debug(
        "Upstream response",
        method=method,
        url=str(upstream_request.url),
        status_code=response.status_code,
    )
    return response


def relay_response(response: httpx.Response) -> StreamingResponse:
    """Stream an upstream response back untouched (raw bytes, same headers)."""
    relayed = StreamingResponse(
        response.aiter_raw(),
        status_code=response.status_code,
        background=BackgroundTask(response.aclose),
    )
    for key, value in filter_headers(response.headers.multi_items()):
        relayed.headers.append(key, value)
    return relayed
