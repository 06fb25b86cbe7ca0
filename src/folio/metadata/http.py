# ABOUTME: Async HTTP client abstraction for calls routed through the book-data proxies.
# ABOUTME: Enforces the proxy allow-list, a per-request timeout, and an injectable transport.

import json
import logging
from typing import Any, Protocol, runtime_checkable

import httpx

from folio.metadata.config import ProxyConfig
from folio.metadata.errors import MetadataFetchError, ProxyPolicyError

logger = logging.getLogger(__name__)

_BROWSER_HEADERS = {
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,application/json;q=0.8,*/*;q=0.7",
    "Accept-Language": "en-US,en;q=0.9",
    "User-Agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36 folio/0.1.0"
    ),
}


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the proxy-bound HTTP operations metadata sources need."""

    async def get_text(self, url: str) -> str: ...

    async def get_json(self, url: str, params: dict[str, str] | None = None) -> Any: ...

    async def get_bytes(self, url: str) -> bytes: ...

    async def post_json(
        self, url: str, payload: dict[str, Any], headers: dict[str, str] | None = None
    ) -> Any: ...


class FolioHttpClient:
    """HTTP client for metadata lookups through the allow-listed proxies.

    Wraps httpx.AsyncClient with browser-like headers, redirect following and
    a per-request timeout. Every URL is checked against the proxy allow-list
    before any I/O happens. Failures are raised as MetadataFetchError; there
    are no retries.
    """

    def __init__(
        self,
        config: ProxyConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": _BROWSER_HEADERS,
            "timeout": config.timeout,
            "follow_redirects": True,
            "event_hooks": {"request": [self._enforce_policy]},
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.AsyncClient(**client_kwargs)
        self._config = config

    @property
    def config(self) -> ProxyConfig:
        return self._config

    async def __aenter__(self) -> "FolioHttpClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_text(self, url: str) -> str:
        """GET a page and return its decoded body."""
        response = await self._send("GET", url)
        return response.text

    async def get_json(self, url: str, params: dict[str, str] | None = None) -> Any:
        """GET a URL and return the parsed JSON body.

        Raises:
            MetadataFetchError: On policy violation, transport failure,
                non-2xx status, or an unparseable body.
        """
        response = await self._send("GET", url, params=params)
        return _decode_json(response, url)

    async def get_bytes(self, url: str) -> bytes:
        response = await self._send("GET", url)
        return response.content

    async def post_json(
        self, url: str, payload: dict[str, Any], headers: dict[str, str] | None = None
    ) -> Any:
        """POST a JSON payload and return the parsed JSON response."""
        request_headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if headers:
            request_headers.update(headers)
        response = await self._send("POST", url, json=payload, headers=request_headers)
        return _decode_json(response, url)

    async def _enforce_policy(self, request: httpx.Request) -> None:
        # Redirect hops are requests too; a Location outside the proxy is refused.
        if not self._config.is_allowed(request.url):
            raise ProxyPolicyError(
                f"Refusing {request.method} {request.url}: not an allow-listed proxy URL"
            )

    async def _send(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        if not self._config.is_allowed(url):
            raise ProxyPolicyError(f"Refusing {method} {url}: not an allow-listed proxy URL")

        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, **kwargs)
        except httpx.HTTPError as exc:
            raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

        if not response.is_success:
            raise MetadataFetchError(
                f"HTTP {response.status_code} from {url}", status_code=response.status_code
            )
        return response


def _decode_json(response: httpx.Response, url: str) -> Any:
    try:
        return response.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise MetadataFetchError(f"Invalid JSON from {url}: {exc}") from exc
