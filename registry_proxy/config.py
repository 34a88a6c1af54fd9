"""Process-level settings, read once from the environment (and ``.env``)."""

import os

import dotenv

from .routes import DOCKER_HUB, RouteTable, build_default_routes

dotenv.load_dotenv()

CUSTOM_DOMAIN = os.getenv("CUSTOM_DOMAIN", "example.com")
MODE = os.getenv("MODE", "prod")
TARGET_UPSTREAM = os.getenv("TARGET_UPSTREAM", DOCKER_HUB)
UPSTREAM_TIMEOUT = float(os.getenv("UPSTREAM_TIMEOUT", "30"))

HOST = os.getenv("HOST", "127.0.0.1")
PORT = int(os.getenv("PORT", "5000"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = os.getenv("LOG_FORMAT", "json")


def is_debug() -> bool:
    return MODE == "debug"


def auth_realm_scheme() -> str:
    # TLS is terminated in front of us in production
    return "http" if is_debug() else "https"


def load_route_table() -> RouteTable:
    return RouteTable(
        routes=build_default_routes(CUSTOM_DOMAIN),
        fallback=TARGET_UPSTREAM if is_debug() else None,
    )
