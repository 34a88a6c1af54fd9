"""Parsing of ``WWW-Authenticate: Bearer ...`` challenges.

Example::

    Bearer realm="https://auth.docker.io/token",service="registry.docker.io"

Parameters are extracted by name, so upstreams listing ``service`` before
``realm`` are handled the same way.
"""

import re
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from .errors import ProtocolError

_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_SCHEME_RE = re.compile(rf"\s*({_TOKEN})(?:\s+|$)")
_PARAM_RE = re.compile(
    rf"\s*({_TOKEN})\s*=\s*(\"(?:[^\"\\]|\\.)*\"|{_TOKEN})\s*(?:,|$)"
)
_ESCAPE_RE = re.compile(r"\\(.)")


@dataclass(frozen=True)
class AuthChallenge:
    realm: str
    service: str | None = None
    params: dict[str, str] = field(default_factory=dict)


def _unquote(value: str) -> str:
    if value.startswith('"'):
        return _ESCAPE_RE.sub(r"\1", value[1:-1])
    return value


def _parse_params(header: str, pos: int) -> dict[str, str]:
    params: dict[str, str] = {}
    while pos < len(header):
        match = _PARAM_RE.match(header, pos)
        if match is None:
            # Either trailing garbage or the start of another challenge
            break
        key, value = match.group(1).lower(), _unquote(match.group(2))
        params.setdefault(key, value)
        pos = match.end()
    return params


def parse_www_authenticate(auth_header: str | None) -> AuthChallenge:
    """Parse the WWW-Authenticate header for Bearer auth.

    Raises:
        ProtocolError: not a Bearer challenge, or ``realm``/``service`` is
            missing, or ``realm`` is not an absolute URL.
    """
    if not auth_header:
        raise ProtocolError("cannot parse authenticate header: empty")

    scheme = _SCHEME_RE.match(auth_header)
    if scheme is None or scheme.group(1).lower() != "bearer":
        raise ProtocolError(f"cannot parse authenticate header: {auth_header}")

    params = _parse_params(auth_header, scheme.end())
    realm = params.pop("realm", None)
    service = params.pop("service", None)
    if not realm or service is None:
        raise ProtocolError(f"cannot parse authenticate header: {auth_header}")

    parts = urlsplit(realm)
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise ProtocolError(f"cannot parse authenticate header: realm {realm!r} is not absolute")

    return AuthChallenge(realm=realm, service=service, params=params)
