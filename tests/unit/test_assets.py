# ABOUTME: Unit tests for the best-effort cover image fetcher.
# ABOUTME: Verifies every failure mode yields None instead of an exception.

import asyncio
import logging

import httpx
import pytest

from folio.metadata.assets import fetch_cover, fetch_thumbnail
from folio.metadata.config import GOOGLE_COVER_ORIGINS, ProxyConfig
from folio.metadata.http import FolioHttpClient
from tests.fixtures.fake_proxy import BASE_URL, FakeProxy, image_response

CONFIG = ProxyConfig(base_url=BASE_URL)
COVER_URL = f"{BASE_URL}/google-cover-proxy/books/content?id=1"


def _fetch(proxy: FakeProxy, url: str = COVER_URL) -> bytes | None:
    async def go() -> bytes | None:
        async with FolioHttpClient(CONFIG, transport=proxy.transport()) as client:
            return await fetch_thumbnail(client, url)

    return asyncio.run(go())


class TestFetchThumbnail:
    """Tests for fetch_thumbnail."""

    def test_success_returns_bytes(self) -> None:
        """A 2xx image response yields its body."""
        proxy = FakeProxy({"/google-cover-proxy/": image_response(b"jpeg-bytes")})
        assert _fetch(proxy) == b"jpeg-bytes"

    def test_not_found_returns_none(self, caplog: pytest.LogCaptureFixture) -> None:
        """A 404 is logged at warning level and reported as no image."""
        proxy = FakeProxy({"/google-cover-proxy/": httpx.Response(404)})
        with caplog.at_level(logging.WARNING, logger="folio.metadata.assets"):
            assert _fetch(proxy) is None
        assert "Thumbnail fetch failed" in caplog.text

    def test_network_error_returns_none(self) -> None:
        """A connection failure is reported as no image."""
        proxy = FakeProxy({"/google-cover-proxy/": httpx.ConnectError("down")})
        assert _fetch(proxy) is None

    def test_timeout_returns_none(self) -> None:
        """A timeout is reported as no image."""
        proxy = FakeProxy({"/google-cover-proxy/": httpx.ReadTimeout("slow")})
        assert _fetch(proxy) is None

    def test_empty_body_returns_none(self) -> None:
        """An empty 2xx body counts as no image."""
        proxy = FakeProxy({"/google-cover-proxy/": httpx.Response(200, content=b"")})
        assert _fetch(proxy) is None

    def test_off_proxy_url_returns_none_without_request(self) -> None:
        """A URL outside the allow-list is refused, not fetched."""
        proxy = FakeProxy()
        assert _fetch(proxy, "http://books.google.com/books/content?id=1") is None
        assert proxy.requests == []


class TestFetchCover:
    """Tests for fetch_cover, which rewrites the origin first."""

    def _fetch_cover(self, proxy: FakeProxy, url: str) -> bytes | None:
        async def go() -> bytes | None:
            async with FolioHttpClient(CONFIG, transport=proxy.transport()) as client:
                return await fetch_cover(
                    client, CONFIG, url, GOOGLE_COVER_ORIGINS, CONFIG.google_cover_prefix
                )

        return asyncio.run(go())

    def test_rewrites_then_fetches(self) -> None:
        """A third-party cover URL is fetched through its cover proxy."""
        proxy = FakeProxy({"/google-cover-proxy/": image_response(b"img")})
        data = self._fetch_cover(proxy, "http://books.google.com/books/content?id=1&zoom=1")
        assert data == b"img"
        assert proxy.urls == [f"{BASE_URL}/google-cover-proxy/books/content?id=1&zoom=1"]

    def test_unproxied_origin_is_skipped(self) -> None:
        """A cover on an unproxied origin is skipped without a request."""
        proxy = FakeProxy()
        assert self._fetch_cover(proxy, "https://cdn.example/cover.jpg") is None
        assert proxy.requests == []
