# ABOUTME: Parsing functions for Google Books API volume responses.
# ABOUTME: Converts search results and volume detail payloads into BookDetails.

from dataclasses import dataclass, field
from typing import Any

from folio.metadata.types import BookDetails


@dataclass
class GoogleVolume:
    """The volumeInfo fields of a Google Books volume that Folio uses."""

    title: str | None = None
    authors: list[str] = field(default_factory=list)
    publisher: str | None = None
    published_date: str | None = None
    language: str | None = None
    page_count: int | None = None
    thumbnail_url: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "GoogleVolume":
        """Build from a volume detail payload's volumeInfo object."""
        image_links = data.get("imageLinks")
        if not isinstance(image_links, dict):
            image_links = {}
        raw_authors = data.get("authors")
        authors = [
            a for a in (raw_authors if isinstance(raw_authors, list) else [])
            if isinstance(a, str) and a.strip()
        ]
        page_count = data.get("pageCount")
        return cls(
            title=_str_or_none(data.get("title")),
            authors=authors,
            publisher=_str_or_none(data.get("publisher")),
            published_date=_str_or_none(data.get("publishedDate")),
            language=_str_or_none(data.get("language")),
            page_count=(
                page_count
                if isinstance(page_count, int) and not isinstance(page_count, bool)
                else None
            ),
            thumbnail_url=(
                _str_or_none(image_links.get("thumbnail"))
                or _str_or_none(image_links.get("smallThumbnail"))
            ),
        )


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def first_self_link(data: dict[str, Any]) -> str | None:
    """Return the selfLink of the first search result, if there is one.

    Search results carry abbreviated volumeInfo; the selfLink points at the
    full volume resource.
    """
    items = data.get("items") or []
    if not items or not isinstance(items[0], dict):
        return None
    return _str_or_none(items[0].get("selfLink"))


def parse_volume_response(data: dict[str, Any]) -> GoogleVolume | None:
    """Parse a volume detail response. Returns None if volumeInfo is absent."""
    info = data.get("volumeInfo")
    if not isinstance(info, dict):
        return None
    return GoogleVolume.from_json(info)


def published_year(value: Any) -> str | None:
    """First segment of a hyphenated date: "2004-05-01" -> "2004"."""
    if not isinstance(value, str) or not value:
        return None
    return value.split("-")[0] or None


def to_book_details(volume: GoogleVolume) -> BookDetails:
    """Map a parsed volume into BookDetails, without the cover image."""
    return BookDetails(
        title=volume.title,
        authors=", ".join(volume.authors) if volume.authors else None,
        publisher=volume.publisher,
        published_date=published_year(volume.published_date),
        language=volume.language.upper() if volume.language else None,
        page_count=volume.page_count,
    )
