# ABOUTME: Unit tests for the Google Books parser and GoogleBooksSource.
# ABOUTME: Covers the search-then-detail flow, field mapping, and fail-soft behavior.

import asyncio
import copy

import httpx

from folio.metadata.config import ProxyConfig
from folio.metadata.google_books import GoogleBooksSource
from folio.metadata.google_books_parser import (
    GoogleVolume,
    first_self_link,
    parse_volume_response,
    published_year,
    to_book_details,
)
from folio.metadata.http import FolioHttpClient
from folio.metadata.types import BookDetails
from tests.fixtures.book_responses import (
    COVER_BYTES,
    GOOGLE_SEARCH_EMPTY,
    GOOGLE_SEARCH_RESPONSE,
    GOOGLE_VOLUME_RESPONSE,
    ISBN,
)
from tests.fixtures.fake_proxy import BASE_URL, FakeProxy, image_response, json_response

CONFIG = ProxyConfig(base_url=BASE_URL, google_api_key="test-key")


def _fetch(proxy: FakeProxy, config: ProxyConfig = CONFIG) -> BookDetails | None:
    async def go() -> BookDetails | None:
        async with FolioHttpClient(config, transport=proxy.transport()) as client:
            return await GoogleBooksSource(client, config).fetch(ISBN)

    return asyncio.run(go())


def _routes(**overrides: object) -> dict:
    routes = {
        "/google-proxy/books/v1/volumes?": json_response(GOOGLE_SEARCH_RESPONSE),
        "/google-proxy/books/v1/volumes/Xr8DAAAAYAAJ": json_response(GOOGLE_VOLUME_RESPONSE),
        "/google-cover-proxy/": image_response(COVER_BYTES),
    }
    routes.update(overrides)
    return routes


class TestGoogleBooksParsing:
    """Tests for the pure parsing helpers."""

    def test_first_self_link(self) -> None:
        """The first search item's selfLink is returned."""
        assert first_self_link(GOOGLE_SEARCH_RESPONSE) == (
            "https://www.googleapis.com/books/v1/volumes/Xr8DAAAAYAAJ"
        )
        assert first_self_link(GOOGLE_SEARCH_EMPTY) is None

    def test_published_year(self) -> None:
        """Only the year of a published date is kept."""
        assert published_year("1994-09-28") == "1994"
        assert published_year("2001") == "2001"
        assert published_year(None) is None

    def test_volume_mapping(self) -> None:
        """A volume detail maps to BookDetails with an uppercased language."""
        volume = parse_volume_response(GOOGLE_VOLUME_RESPONSE)
        assert volume is not None
        details = to_book_details(volume)
        assert details == BookDetails(
            title="The Name of the Rose",
            authors="Umberto Eco, William Weaver",
            publisher="Houghton Mifflin Harcourt",
            published_date="1994",
            language="EN",
            page_count=552,
        )

    def test_missing_fields_unresolved(self) -> None:
        """Absent volumeInfo fields stay unresolved."""
        details = to_book_details(GoogleVolume.from_json({"title": "Only a title"}))
        assert details.authors is None
        assert details.page_count is None
        assert details.language is None

    def test_missing_volume_info(self) -> None:
        """A detail without volumeInfo yields None."""
        assert parse_volume_response({"id": "x"}) is None

    def test_wrongly_typed_fields_become_unresolved(self) -> None:
        """Fields of the wrong type are dropped while the rest still map."""
        volume = GoogleVolume.from_json(
            {
                "title": "The Name of the Rose",
                "authors": "Umberto Eco",
                "publishedDate": 1983,
                "language": ["en"],
                "pageCount": 552,
                "imageLinks": "none",
            }
        )
        details = to_book_details(volume)
        assert details == BookDetails(title="The Name of the Rose", page_count=552)
        assert volume.thumbnail_url is None


class TestGoogleBooksFetch:
    """Tests for GoogleBooksSource.fetch."""

    def test_full_flow(self) -> None:
        """Search, detail and cover together give a full record."""
        proxy = FakeProxy(_routes())
        details = _fetch(proxy)
        assert details is not None
        assert details.authors == "Umberto Eco, William Weaver"
        assert details.thumbnail == COVER_BYTES

    def test_search_query_and_key(self) -> None:
        """The search uses q=isbn:<isbn> and the configured key."""
        proxy = FakeProxy(_routes())
        _fetch(proxy)
        params = proxy.requests[0].url.params
        assert params["q"] == f"isbn:{ISBN}"
        assert params["key"] == "test-key"

    def test_key_omitted_when_unset(self) -> None:
        """No key parameter is sent without an API key."""
        proxy = FakeProxy(_routes())
        _fetch(proxy, ProxyConfig(base_url=BASE_URL))
        assert "key" not in proxy.requests[0].url.params

    def test_detail_and_cover_fetched_through_proxy(self) -> None:
        """The detail and cover requests both go through the proxies."""
        proxy = FakeProxy(_routes())
        _fetch(proxy)
        assert proxy.urls[1] == f"{BASE_URL}/google-proxy/books/v1/volumes/Xr8DAAAAYAAJ"
        assert proxy.urls[2].startswith(f"{BASE_URL}/google-cover-proxy/books/content?")

    def test_zero_results_returns_none(self) -> None:
        """An empty search returns None without a detail request."""
        proxy = FakeProxy(
            _routes(**{"/google-proxy/books/v1/volumes?": json_response(GOOGLE_SEARCH_EMPTY)})
        )
        assert _fetch(proxy) is None
        assert len(proxy.requests) == 1

    def test_search_error_returns_none(self) -> None:
        """A failing search is reported as no data."""
        proxy = FakeProxy(
            _routes(**{"/google-proxy/books/v1/volumes?": httpx.Response(403)})
        )
        assert _fetch(proxy) is None

    def test_detail_error_returns_none(self) -> None:
        """A failing detail request is reported as no data."""
        proxy = FakeProxy(
            _routes(**{"/google-proxy/books/v1/volumes/Xr8DAAAAYAAJ": httpx.Response(500)})
        )
        assert _fetch(proxy) is None

    def test_detail_without_volume_info_returns_none(self) -> None:
        """A detail body without volumeInfo is reported as no data."""
        proxy = FakeProxy(
            _routes(**{"/google-proxy/books/v1/volumes/Xr8DAAAAYAAJ": json_response({})})
        )
        assert _fetch(proxy) is None

    def test_no_thumbnail_link(self) -> None:
        """A volume without image links has no thumbnail."""
        volume = copy.deepcopy(GOOGLE_VOLUME_RESPONSE)
        del volume["volumeInfo"]["imageLinks"]
        proxy = FakeProxy(
            _routes(**{"/google-proxy/books/v1/volumes/Xr8DAAAAYAAJ": json_response(volume)})
        )
        details = _fetch(proxy)
        assert details is not None
        assert details.thumbnail is None
        assert proxy.hits("/google-cover-proxy/") == 0

    def test_cover_failure_keeps_record(self) -> None:
        """A failed cover fetch loses only the image."""
        proxy = FakeProxy(_routes(**{"/google-cover-proxy/": httpx.ConnectError("down")}))
        details = _fetch(proxy)
        assert details is not None
        assert details.thumbnail is None
        assert details.page_count == 552
