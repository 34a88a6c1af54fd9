from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Request

from . import config
from .dispatch import dispatch
from .logging import setup_logger
from .routes import RouteTable

ALL_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def create_app(
    route_table: RouteTable | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> FastAPI:
    """Build the proxy application.

    Args:
        route_table: Hostname routing; defaults to the table built from
            ``CUSTOM_DOMAIN``. Never mutated after this call.
        transport: Optional httpx transport for the upstream client, mainly
            for tests (``httpx.MockTransport``).
    """
    routes = route_table if route_table is not None else config.load_route_table()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initializes the shared upstream HTTP client and closes it on shutdown."""
        app.state.client = httpx.AsyncClient(
            timeout=config.UPSTREAM_TIMEOUT,
            transport=transport,
        )
        try:
            yield
        finally:
            await app.state.client.aclose()

    app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)
    app.state.route_table = routes
    setup_logger(app)

    @app.api_route("/{full_path:path}", methods=ALL_METHODS)
    async def proxy(full_path: str, request: Request):
        """Main reverse-proxy entrypoint."""
        return await dispatch(request, request.app.state.route_table, request.app.state.client)

    return app
