# ABOUTME: Parsing functions for Goodreads book pages.
# ABOUTME: Pulls the embedded Apollo state out of the page and maps it into BookDetails.

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

from bs4 import BeautifulSoup

from folio.metadata.types import BookDetails

_NEXT_DATA_ID = "__NEXT_DATA__"
_YEAR_RE = re.compile(r"\b(\d{4})\b")

_BOOK_PREFIX = "Book:"
_CONTRIBUTOR_PREFIX = "Contributor:"
_AUTHOR_ROLE = "Author"
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass
class ContributorEdge:
    """A link from a book to a contributor, with the contributor's role."""

    contributor_id: str | None
    role: str | None

    @classmethod
    def from_json(cls, data: Any) -> "ContributorEdge | None":
        if not isinstance(data, dict):
            return None
        node = data.get("node") or {}
        ref = node.get("__ref") if isinstance(node, dict) else None
        contributor_id = None
        if isinstance(ref, str):
            contributor_id = ref.removeprefix(_CONTRIBUTOR_PREFIX)
        return cls(contributor_id=contributor_id, role=data.get("role"))


@dataclass
class GoodreadsBook:
    """The fields of a Goodreads `Book:` Apollo entry that Folio uses."""

    title: str | None
    isbn13: str | None
    image_url: str | None = None
    publisher: str | None = None
    publication_time: Any = None
    language: str | None = None
    num_pages: int | None = None
    contributor_edges: list[ContributorEdge] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "GoodreadsBook":
        """Build from a raw `Book:` entry. Missing sections become None."""
        details = data.get("details")
        if not isinstance(details, dict):
            details = {}
        language = details.get("language") or {}

        edges: list[ContributorEdge] = []
        primary = ContributorEdge.from_json(data.get("primaryContributorEdge"))
        if primary is not None:
            edges.append(primary)
        secondary = data.get("secondaryContributorEdges")
        for raw_edge in secondary if isinstance(secondary, list) else []:
            edge = ContributorEdge.from_json(raw_edge)
            if edge is not None:
                edges.append(edge)

        num_pages = details.get("numPages")
        image_url = data.get("imageUrl")
        return cls(
            title=data.get("title") or data.get("titleComplete"),
            isbn13=details.get("isbn13"),
            image_url=image_url if isinstance(image_url, str) else None,
            publisher=details.get("publisher"),
            publication_time=details.get("publicationTime"),
            language=language.get("name") if isinstance(language, dict) else None,
            num_pages=_page_count(num_pages),
            contributor_edges=edges,
        )


def _page_count(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return None
    return value


def extract_next_data(html: str) -> dict[str, Any] | None:
    """Find and parse the __NEXT_DATA__ JSON script embedded in a page.

    Returns None if the script tag is missing. Raises ValueError (via
    json.JSONDecodeError) if the tag is present but its body is not JSON.
    """
    soup = BeautifulSoup(html, "html.parser")
    script = soup.find("script", id=_NEXT_DATA_ID)
    if script is None or not script.string:
        return None
    body = script.string.strip()
    if not body:
        return None
    data = json.loads(body)
    return data if isinstance(data, dict) else None


def apollo_state(next_data: dict[str, Any]) -> dict[str, Any] | None:
    """Return the flat Apollo cache from props.pageProps.apolloState."""
    props = next_data.get("props") or {}
    page_props = props.get("pageProps") or {}
    state = page_props.get("apolloState")
    return state if isinstance(state, dict) else None


def build_contributor_index(state: dict[str, Any]) -> dict[str, str]:
    """Map contributor id to display name for every `Contributor:` entry."""
    index: dict[str, str] = {}
    for key, value in state.items():
        if not key.startswith(_CONTRIBUTOR_PREFIX) or not isinstance(value, dict):
            continue
        name = value.get("name")
        if not isinstance(name, str) or not name:
            continue
        contributor_id = value.get("id") or key.removeprefix(_CONTRIBUTOR_PREFIX)
        index[str(contributor_id)] = name
    return index


def find_book(state: dict[str, Any], isbn: str) -> GoodreadsBook | None:
    """Locate the `Book:` entry whose details.isbn13 equals isbn exactly.

    A page usually caches several editions; only the exact match is used.
    """
    for key, value in state.items():
        if not key.startswith(_BOOK_PREFIX) or not isinstance(value, dict):
            continue
        details = value.get("details")
        if isinstance(details, dict) and details.get("isbn13") == isbn:
            return GoodreadsBook.from_json(value)
    return None


def author_names(book: GoodreadsBook, contributors: dict[str, str]) -> list[str]:
    """Resolve names for every edge with the Author role, primary edge first."""
    names: list[str] = []
    for edge in book.contributor_edges:
        if edge.role != _AUTHOR_ROLE or not edge.contributor_id:
            continue
        name = contributors.get(edge.contributor_id)
        if name:
            names.append(name)
    return names


def publication_year(value: Any) -> str | None:
    """Extract the year from a Goodreads publicationTime.

    Goodreads stores epoch milliseconds; ISO-ish strings are accepted as well.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdecimal():
            value = int(stripped)
        else:
            match = _YEAR_RE.search(stripped)
            return match.group(1) if match else None
    if isinstance(value, (int, float)):
        # Pre-1970 editions carry negative timestamps.
        try:
            moment = _EPOCH + timedelta(milliseconds=value)
        except (OverflowError, ValueError):
            return None
        return str(moment.year)
    return None


def to_book_details(book: GoodreadsBook, contributors: dict[str, str]) -> BookDetails:
    """Map a parsed Goodreads book into BookDetails, without the cover image."""
    authors = author_names(book, contributors)
    return BookDetails(
        title=book.title,
        authors=", ".join(authors) if authors else None,
        publisher=book.publisher,
        published_date=publication_year(book.publication_time),
        language=book.language,
        page_count=book.num_pages,
    )
