# ABOUTME: Proxy configuration injected into every metadata source.
# ABOUTME: Holds the allow-listed proxy prefixes, credentials, and origin rewriting rules.

import os
from dataclasses import dataclass

import httpx

from folio.metadata.errors import ProxyPolicyError

DEFAULT_BASE_URL = "http://localhost:5173"
DEFAULT_TIMEOUT = 10.0

GOODREADS_COVER_ORIGINS = (
    "https://images-na.ssl-images-amazon.com",
    "https://m.media-amazon.com",
)
GOOGLE_ORIGIN = "https://www.googleapis.com"
GOOGLE_COVER_ORIGINS = ("http://books.google.com", "https://books.google.com")
HARDCOVER_COVER_ORIGINS = ("https://assets.hardcover.app",)

_DEFAULT_PORTS = {"http": 80, "https": 443}


def _effective_port(url: httpx.URL) -> int | None:
    return url.port or _DEFAULT_PORTS.get(url.scheme)


@dataclass(frozen=True)
class ProxyConfig:
    """Where the book-data proxies live and how to authenticate through them.

    Sources never talk to third-party hosts directly. Each one is handed this
    config and builds every request URL from one of its prefixes.
    """

    base_url: str = DEFAULT_BASE_URL
    goodreads_prefix: str = "/goodreads-proxy"
    goodreads_cover_prefix: str = "/goodreads-cover-proxy"
    google_prefix: str = "/google-proxy"
    google_cover_prefix: str = "/google-cover-proxy"
    hardcover_prefix: str = "/hardcover-proxy"
    hardcover_cover_prefix: str = "/hardcover-cover-proxy"
    google_api_key: str | None = None
    hardcover_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT

    @classmethod
    def from_env(cls, **overrides: object) -> "ProxyConfig":
        """Build a config from FOLIO_* environment variables.

        Keyword overrides win over the environment; None overrides are ignored.
        """
        values: dict[str, object] = {}
        base_url = os.environ.get("FOLIO_PROXY_BASE_URL")
        if base_url:
            values["base_url"] = base_url
        api_key = os.environ.get("FOLIO_GOOGLE_API_KEY")
        if api_key:
            values["google_api_key"] = api_key
        token = os.environ.get("FOLIO_HARDCOVER_TOKEN")
        if token:
            values["hardcover_token"] = token
        timeout = os.environ.get("FOLIO_HTTP_TIMEOUT")
        if timeout:
            try:
                values["timeout"] = float(timeout)
            except ValueError as exc:
                raise ValueError(f"FOLIO_HTTP_TIMEOUT must be a number, got {timeout!r}") from exc
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]

    @property
    def allowed_prefixes(self) -> tuple[str, ...]:
        """Absolute URL prefixes that outbound requests may target."""
        return tuple(
            self.proxy_url(prefix)
            for prefix in (
                self.goodreads_prefix,
                self.goodreads_cover_prefix,
                self.google_prefix,
                self.google_cover_prefix,
                self.hardcover_prefix,
                self.hardcover_cover_prefix,
            )
        )

    def proxy_url(self, prefix: str, path: str = "") -> str:
        """Join the base URL, a proxy prefix, and an optional path."""
        url = self.base_url.rstrip("/") + "/" + prefix.strip("/")
        if path:
            url += "/" + path.lstrip("/")
        return url

    def is_allowed(self, url: str | httpx.URL) -> bool:
        """Whether url sits under one of the allow-listed proxy prefixes.

        Both sides are compared as parsed URLs, so host case and an explicit
        default port make no difference.
        """
        try:
            target = httpx.URL(url)
        except httpx.InvalidURL:
            return False
        for allowed in self.allowed_prefixes:
            base = httpx.URL(allowed)
            if (target.scheme, target.host, _effective_port(target)) != (
                base.scheme,
                base.host,
                _effective_port(base),
            ):
                continue
            prefix_path = base.path.rstrip("/")
            if target.path == prefix_path or target.path.startswith(prefix_path + "/"):
                return True
        return False

    def rewrite_origin(self, url: str, origins: str | tuple[str, ...], prefix: str) -> str:
        """Move a third-party URL onto the proxy prefix that fronts its origin.

        URLs that already point at an allow-listed proxy are returned unchanged.

        Raises:
            ProxyPolicyError: If the URL belongs to none of the given origins.
        """
        if self.is_allowed(url):
            return url
        if isinstance(origins, str):
            origins = (origins,)
        for origin in origins:
            if url == origin or url.startswith(origin + "/"):
                return self.proxy_url(prefix) + url[len(origin):]
        raise ProxyPolicyError(f"Refusing to rewrite {url}: origin is not proxied by {prefix}")
