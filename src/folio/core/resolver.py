# ABOUTME: Resolves an ISBN into one BookRecord by consulting sources in priority order.
# ABOUTME: Goodreads first, then Google Books, then Hardcover, filling only unresolved fields.

import logging
import re
from dataclasses import dataclass, field

import httpx

from folio.metadata.config import ProxyConfig
from folio.metadata.goodreads import GoodreadsSource
from folio.metadata.google_books import GoogleBooksSource
from folio.metadata.hardcover import HardcoverSource
from folio.metadata.http import FolioHttpClient, HttpClient
from folio.metadata.provider import BookSource, TitleSearchSource
from folio.metadata.types import BookDetails, BookRecord

logger = logging.getLogger(__name__)

_ISBN_SEPARATORS_RE = re.compile(r"[\s-]")
_ISBN_RE = re.compile(r"^(\d{9}[\dX]|\d{13})$")


class BookResolutionError(Exception):
    """Base class for errors that end a lookup without a record."""


class InvalidIsbnError(BookResolutionError):
    """Raised when the input cannot be an ISBN at all."""


class BookNotFoundError(BookResolutionError):
    """Raised when every source came back empty for an ISBN."""

    def __init__(self, isbn: str) -> None:
        super().__init__(f"Could not resolve book details for ISBN {isbn}")
        self.isbn = isbn


@dataclass
class ResolutionTrace:
    """Which sources a lookup consulted and which of them returned data."""

    isbn: str
    consulted: list[str] = field(default_factory=list)
    answered: list[str] = field(default_factory=list)

    def record(self, source: str, details: BookDetails | None) -> None:
        self.consulted.append(source)
        if details is not None:
            self.answered.append(source)


def isbn10_to_isbn13(isbn10: str) -> str:
    """Convert a bare ISBN-10 to its 978-prefixed ISBN-13."""
    core = "978" + isbn10[:9]
    total = sum(int(digit) * (1 if i % 2 == 0 else 3) for i, digit in enumerate(core))
    return core + str((10 - total % 10) % 10)


def normalize_isbn(isbn: str) -> str:
    """Strip separators and return the ISBN-13 form of an ISBN.

    ISBN-10 input is converted, since every source matches on ISBN-13.

    Raises:
        InvalidIsbnError: If what remains is not 10 or 13 ISBN characters.
    """
    clean = _ISBN_SEPARATORS_RE.sub("", isbn or "").upper()
    if not _ISBN_RE.match(clean):
        raise InvalidIsbnError(f"Not an ISBN: {isbn!r}")
    if len(clean) == 10:
        return isbn10_to_isbn13(clean)
    return clean


class BookResolver:
    """Merges book details from three sources in a fixed priority order.

    Each later source is consulted only while the accumulated details are
    incomplete, and may only fill fields still unresolved. Sources run one
    at a time; all state lives in the resolve call, so concurrent resolves
    on one event loop do not interact.
    """

    def __init__(
        self,
        goodreads: BookSource,
        google_books: BookSource,
        hardcover: TitleSearchSource,
    ) -> None:
        self._goodreads = goodreads
        self._google_books = google_books
        self._hardcover = hardcover

    async def resolve(self, isbn: str) -> BookRecord:
        """Resolve an ISBN into a BookRecord.

        Partial records are returned as-is.

        Raises:
            InvalidIsbnError: If isbn is not shaped like an ISBN.
            BookNotFoundError: If no source returned anything.
        """
        record, _ = await self.resolve_with_trace(isbn)
        return record

    async def resolve_with_trace(self, isbn: str) -> tuple[BookRecord, ResolutionTrace]:
        """Resolve an ISBN and also report which sources were consulted."""
        isbn = normalize_isbn(isbn)
        trace = ResolutionTrace(isbn=isbn)

        working = BookDetails()

        details = await self._goodreads.fetch(isbn)
        trace.record(self._goodreads.name, details)
        working = working.merge(details)

        if working.is_incomplete():
            logger.info("Goodreads data missing or incomplete; falling back to Google Books")
            details = await self._google_books.fetch(isbn)
            trace.record(self._google_books.name, details)
            working = working.merge(details)

        if working.is_incomplete():
            logger.info("Still incomplete; falling back to Hardcover by ISBN")
            details = await self._hardcover.fetch(isbn=isbn)
            trace.record(self._hardcover.name, details)
            working = working.merge(details)

            # Only a title some source actually reported is worth searching on.
            if details is None and working.is_incomplete() and working.title:
                logger.info("Retrying Hardcover by title %r", working.title)
                details = await self._hardcover.fetch(title=working.title)
                trace.record(f"{self._hardcover.name}:title", details)
                working = working.merge(details)

        if not trace.answered:
            logger.warning("No source returned data for ISBN %s", isbn)
            raise BookNotFoundError(isbn)

        if working.is_incomplete():
            logger.info(
                "Returning partial record for %s; unresolved: %s",
                isbn,
                ", ".join(working.unresolved_fields()),
            )
        return working.to_record(), trace


def create_resolver(http_client: HttpClient, config: ProxyConfig) -> BookResolver:
    """Wire the default sources onto one shared HTTP client."""
    return BookResolver(
        goodreads=GoodreadsSource(http_client, config),
        google_books=GoogleBooksSource(http_client, config),
        hardcover=HardcoverSource(http_client, config),
    )


async def resolve_book(
    isbn: str,
    config: ProxyConfig | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BookRecord:
    """Resolve one ISBN with a short-lived client.

    Raises:
        BookResolutionError: If the ISBN is malformed or no source knows it.
    """
    config = config or ProxyConfig.from_env()
    async with FolioHttpClient(config, transport=transport) as http_client:
        return await create_resolver(http_client, config).resolve(isbn)
