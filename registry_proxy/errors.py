class RegistryProxyError(Exception):
    """Base class for errors raised by the registry proxy."""


class ProtocolError(RegistryProxyError):
    """An upstream registry answered with something we cannot interpret."""
