# ABOUTME: Goodreads metadata source backed by scraped book pages.
# ABOUTME: Fetches /book/isbn/{isbn} through the proxy and maps the embedded Apollo state.

import logging

from folio.metadata.assets import fetch_cover
from folio.metadata.config import GOODREADS_COVER_ORIGINS, ProxyConfig
from folio.metadata.errors import MetadataFetchError
from folio.metadata.goodreads_parser import (
    apollo_state,
    build_contributor_index,
    extract_next_data,
    find_book,
    to_book_details,
)
from folio.metadata.http import HttpClient
from folio.metadata.types import BookDetails

logger = logging.getLogger(__name__)


class GoodreadsSource:
    """Metadata source that scrapes Goodreads book pages.

    The page for an ISBN redirects to the canonical book page; the proxy and
    transport follow that redirect. Book data lives in the Next.js
    __NEXT_DATA__ script as a flat Apollo cache.
    """

    def __init__(self, http_client: HttpClient, config: ProxyConfig) -> None:
        self._http = http_client
        self._config = config

    @property
    def name(self) -> str:
        return "goodreads"

    async def fetch(self, isbn: str) -> BookDetails | None:
        """Look up a book page by ISBN-13.

        Returns None when the page is missing, carries no matching edition,
        or anything goes wrong while parsing it.
        """
        url = self._config.proxy_url(self._config.goodreads_prefix, f"book/isbn/{isbn}")
        logger.info("Fetching Goodreads details for ISBN %s", isbn)
        try:
            return await self._fetch(url, isbn)
        except MetadataFetchError as exc:
            logger.warning("Goodreads lookup failed for %s: %s", isbn, exc)
            return None
        except Exception:
            logger.exception("Error parsing Goodreads page for %s", isbn)
            return None

    async def _fetch(self, url: str, isbn: str) -> BookDetails | None:
        html = await self._http.get_text(url)

        next_data = extract_next_data(html)
        if next_data is None:
            logger.warning("No __NEXT_DATA__ script found on Goodreads page for %s", isbn)
            return None

        state = apollo_state(next_data)
        if state is None:
            logger.warning("No apolloState in Goodreads page data for %s", isbn)
            return None

        contributors = build_contributor_index(state)
        logger.debug("Goodreads contributors: %s", contributors)

        book = find_book(state, isbn)
        if book is None:
            logger.warning("No Goodreads Book entry matches ISBN %s", isbn)
            return None

        details = to_book_details(book, contributors)
        if book.image_url:
            thumbnail = await fetch_cover(
                self._http,
                self._config,
                book.image_url,
                GOODREADS_COVER_ORIGINS,
                self._config.goodreads_cover_prefix,
            )
            if thumbnail is not None:
                details = details.merge(BookDetails(thumbnail=thumbnail))
        return details
