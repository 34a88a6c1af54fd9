"""DockerHub implicit ``library/`` namespace redirect.

Detection is a plain segment count over the request path. It matches the
current ``/v2/<name>/<resource>/<reference>`` shape of the registry API and
has to be revisited if new single-name endpoints appear.
"""

from starlette.datastructures import URL

from .scope import LIBRARY_NAMESPACE

# "", "v2", name, resource, reference
_IMPLICIT_NAMESPACE_SEGMENTS = 5


def should_redirect(path: str) -> bool:
    parts = path.split("/")
    return len(parts) == _IMPLICIT_NAMESPACE_SEGMENTS and parts[1] == "v2"


def build_redirect_url(url: URL, path: str, query: str = "") -> str:
    """Insert ``library`` right after ``v2`` keeping scheme, host and query.

    ``path`` and ``query`` are taken raw from the request, since ``url.path``
    has already been unquoted.
    """
    parts = path.split("/")
    parts.insert(2, LIBRARY_NAMESPACE)
    new_path = "/".join(parts)
    location = f"{url.scheme}://{url.netloc}{new_path}"
    if query:
        location += f"?{query}"
    return location
