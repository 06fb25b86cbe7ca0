# ABOUTME: Exception types raised at the metadata transport boundary.
# ABOUTME: Sources catch these and report "no data" instead of propagating them.


class MetadataFetchError(Exception):
    """Raised when an HTTP request to a metadata proxy fails."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ProxyPolicyError(MetadataFetchError):
    """Raised when a request would target a host outside the proxy allow-list."""
