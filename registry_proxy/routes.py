"""Hostname to upstream registry mapping."""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping
from urllib.parse import urlsplit

DOCKER_HUB = "https://registry-1.docker.io"


@dataclass(frozen=True)
class RouteTable:
    """Immutable frontend hostname -> upstream base URL table.

    ``fallback`` is returned for unknown hosts; it is only set in debug mode.
    """

    routes: Mapping[str, str]
    default_registry: str = DOCKER_HUB
    fallback: str | None = None
    _index: Mapping[str, str] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        for host, upstream in self.routes.items():
            parts = urlsplit(upstream)
            if parts.scheme not in ("http", "https") or not parts.netloc:
                raise ValueError(f"Upstream for {host!r} is not an absolute URL: {upstream!r}")
            if parts.path not in ("", "/"):
                raise ValueError(f"Upstream for {host!r} must not carry a path: {upstream!r}")

        routes = {host: upstream.rstrip("/") for host, upstream in self.routes.items()}
        object.__setattr__(self, "routes", MappingProxyType(routes))
        object.__setattr__(
            self,
            "_index",
            MappingProxyType({host.lower(): upstream for host, upstream in routes.items()}),
        )

    def lookup(self, host: str | None) -> str | None:
        """Return the upstream registry for a given hostname."""
        if host:
            upstream = self._index.get(host.split(":")[0].lower())
            if upstream is not None:
                return upstream
        return self.fallback

    def is_default_registry(self, upstream: str) -> bool:
        return upstream == self.default_registry

    def as_dict(self) -> dict[str, str]:
        return dict(self.routes)


def build_default_routes(custom_domain: str) -> dict[str, str]:
    return {
        f"docker.{custom_domain}": DOCKER_HUB,
        f"quay.{custom_domain}": "https://quay.io",
        f"gcr.{custom_domain}": "https://gcr.io",
        f"k8s-gcr.{custom_domain}": "https://k8s.gcr.io",
        f"k8s.{custom_domain}": "https://registry.k8s.io",
        f"ghcr.{custom_domain}": "https://ghcr.io",
        f"cloudsmith.{custom_domain}": "https://docker.cloudsmith.io",
        f"ecr.{custom_domain}": "https://public.ecr.aws",
        f"docker-staging.{custom_domain}": DOCKER_HUB,
    }
