"""Multi-upstream reverse proxy for the Docker Registry HTTP API V2.

One frontend host per upstream registry; the upstream is picked from the
request hostname and the bearer-token handshake is relayed through the
frontend's own ``/v2/auth`` endpoint.
"""

from .app import create_app
from .challenge import AuthChallenge, parse_www_authenticate
from .errors import ProtocolError, RegistryProxyError
from .redirect import build_redirect_url, should_redirect
from .routes import DOCKER_HUB, RouteTable
from .scope import rewrite_scope

__all__ = [
    "create_app",
    "AuthChallenge",
    "parse_www_authenticate",
    "ProtocolError",
    "RegistryProxyError",
    "build_redirect_url",
    "should_redirect",
    "DOCKER_HUB",
    "RouteTable",
    "rewrite_scope",
]
