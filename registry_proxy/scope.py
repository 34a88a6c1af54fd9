LIBRARY_NAMESPACE = "library"


def rewrite_scope(scope: str | None, is_default_registry: bool) -> str | None:
    """Autocomplete repository scope for DockerHub library images.

    ``repository:busybox:pull`` -> ``repository:library/busybox:pull``.
    Namespaced, malformed and non-DockerHub scopes are returned unchanged.
    """
    if not scope or not is_default_registry:
        return scope

    parts = scope.split(":")
    if len(parts) == 3 and "/" not in parts[1]:
        parts[1] = f"{LIBRARY_NAMESPACE}/{parts[1]}"
        return ":".join(parts)
    return scope
