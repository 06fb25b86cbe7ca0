# ABOUTME: GraphQL queries and response parsing for the Hardcover catalog API.
# ABOUTME: Builds the editions query by ISBN or title and maps the first edition into BookDetails.

from dataclasses import dataclass, field
from typing import Any

from folio.metadata.types import BookDetails

_EDITION_FIELDS = """
    id
    title
    edition_format
    pages
    release_date
    isbn_10
    isbn_13
    publisher {
      name
    }
    image {
      url
    }
    contributions {
      author {
        name
      }
    }
    language {
      code2
    }
"""

EDITIONS_BY_ISBN = (
    "query GetBookInfoFromISBN($isbn: String!) {\n"
    "  editions(where: {isbn_13: {_eq: $isbn}}) {" + _EDITION_FIELDS + "  }\n}\n"
)

EDITIONS_BY_TITLE = (
    "query GetEditionsFromTitle($title: String!) {\n"
    "  editions(where: {title: {_eq: $title}}) {" + _EDITION_FIELDS + "  }\n}\n"
)


@dataclass
class HardcoverEdition:
    """The fields of a Hardcover edition that Folio uses."""

    title: str | None = None
    pages: int | None = None
    release_date: str | None = None
    isbn_13: str | None = None
    publisher: str | None = None
    image_url: str | None = None
    author_names: list[str] = field(default_factory=list)
    language_code: str | None = None

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> "HardcoverEdition":
        """Build from one edition object. Wrongly typed fields become None."""
        names: list[str] = []
        contributions = data.get("contributions")
        for contribution in contributions if isinstance(contributions, list) else []:
            name = _nested_str(contribution, "author", "name")
            if name:
                names.append(name)

        pages = data.get("pages")
        return cls(
            title=_str_or_none(data.get("title")),
            pages=pages if isinstance(pages, int) and not isinstance(pages, bool) else None,
            release_date=_str_or_none(data.get("release_date")),
            isbn_13=_str_or_none(data.get("isbn_13")),
            publisher=_nested_str(data, "publisher", "name"),
            image_url=_nested_str(data, "image", "url"),
            author_names=names,
            language_code=_nested_str(data, "language", "code2"),
        )


def _str_or_none(value: Any) -> str | None:
    return value if isinstance(value, str) else None


def _nested_str(data: Any, key: str, inner: str) -> str | None:
    outer = data.get(key) if isinstance(data, dict) else None
    return _str_or_none(outer.get(inner)) if isinstance(outer, dict) else None


def build_query(
    isbn: str | None = None, title: str | None = None
) -> tuple[str, dict[str, str]] | None:
    """Pick the editions query for the identifier supplied.

    ISBN wins when both are given. Returns None when neither is.
    """
    if isbn:
        return EDITIONS_BY_ISBN, {"isbn": isbn}
    if title:
        return EDITIONS_BY_TITLE, {"title": title}
    return None


def first_edition(payload: dict[str, Any]) -> HardcoverEdition | None:
    """Return the first edition from a GraphQL response body, if any."""
    data = payload.get("data")
    editions = data.get("editions") if isinstance(data, dict) else None
    if not isinstance(editions, list) or not editions or not isinstance(editions[0], dict):
        return None
    return HardcoverEdition.from_json(editions[0])


def release_year(value: Any) -> str | None:
    """First segment of a hyphenated release date."""
    if not isinstance(value, str) or not value:
        return None
    return value.split("-")[0] or None


def to_book_details(edition: HardcoverEdition) -> BookDetails:
    """Map a parsed edition into BookDetails, without the cover image."""
    return BookDetails(
        title=edition.title,
        authors=", ".join(edition.author_names) if edition.author_names else None,
        publisher=edition.publisher,
        published_date=release_year(edition.release_date),
        language=edition.language_code.upper() if edition.language_code else None,
        page_count=edition.pages,
    )
