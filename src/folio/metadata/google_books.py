# ABOUTME: Google Books metadata source.
# ABOUTME: Searches volumes by ISBN through the proxy, then fetches the full volume resource.

import logging

from folio.metadata.assets import fetch_cover
from folio.metadata.config import GOOGLE_COVER_ORIGINS, GOOGLE_ORIGIN, ProxyConfig
from folio.metadata.errors import MetadataFetchError
from folio.metadata.google_books_parser import (
    first_self_link,
    parse_volume_response,
    to_book_details,
)
from folio.metadata.http import HttpClient
from folio.metadata.types import BookDetails

logger = logging.getLogger(__name__)

_VOLUMES_PATH = "books/v1/volumes"


class GoogleBooksSource:
    """Metadata source backed by the Google Books volumes API.

    Takes two requests per lookup: the ISBN search, whose first item is
    incomplete, and that item's selfLink for the full volume.
    """

    def __init__(self, http_client: HttpClient, config: ProxyConfig) -> None:
        self._http = http_client
        self._config = config

    @property
    def name(self) -> str:
        return "google_books"

    async def fetch(self, isbn: str) -> BookDetails | None:
        """Look up a volume by ISBN. Returns None on no match or any failure."""
        logger.info("Fetching Google Books details for ISBN %s", isbn)
        try:
            return await self._fetch(isbn)
        except MetadataFetchError as exc:
            logger.warning("Google Books lookup failed for %s: %s", isbn, exc)
            return None
        except Exception:
            logger.exception("Error reading Google Books data for %s", isbn)
            return None

    async def _fetch(self, isbn: str) -> BookDetails | None:
        params = {"q": f"isbn:{isbn}"}
        if self._config.google_api_key:
            params["key"] = self._config.google_api_key
        url = self._config.proxy_url(self._config.google_prefix, _VOLUMES_PATH)
        search = await self._http.get_json(url, params=params)

        self_link = first_self_link(search) if isinstance(search, dict) else None
        if not self_link:
            logger.info("No Google Books volume found for ISBN %s", isbn)
            return None

        detail_url = self._config.rewrite_origin(
            self_link, GOOGLE_ORIGIN, self._config.google_prefix
        )
        detail = await self._http.get_json(detail_url)
        volume = parse_volume_response(detail) if isinstance(detail, dict) else None
        if volume is None:
            logger.info("No volumeInfo in Google Books detail for ISBN %s", isbn)
            return None

        details = to_book_details(volume)
        if volume.thumbnail_url:
            thumbnail = await fetch_cover(
                self._http,
                self._config,
                volume.thumbnail_url,
                GOOGLE_COVER_ORIGINS,
                self._config.google_cover_prefix,
            )
            if thumbnail is not None:
                details = details.merge(BookDetails(thumbnail=thumbnail))
        return details
