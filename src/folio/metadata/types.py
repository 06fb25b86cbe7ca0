# ABOUTME: Core book record structures shared by every metadata source.
# ABOUTME: BookDetails is the nullable merge form; BookRecord is the sentinel display form.

from dataclasses import dataclass, fields, replace

UNKNOWN = "Unknown"

# Fields that gate whether a record is worth handing to the next source.
# Published date and language are enrichments only.
_COMPLETENESS_FIELDS = ("title", "authors", "publisher", "page_count", "thumbnail")


def _clean_str(value: object) -> str | None:
    """Collapse non-strings, empty strings and the display sentinel to None."""
    if not isinstance(value, str):
        return None
    value = value.strip()
    if not value or value == UNKNOWN:
        return None
    return value


@dataclass(frozen=True)
class BookRecord:
    """Canonical book metadata as returned to callers.

    Unresolved string fields hold "Unknown", an unresolved page count is 0 and
    a missing cover is None. Instances are never mutated after construction.
    """

    title: str = UNKNOWN
    authors: str = UNKNOWN
    publisher: str = UNKNOWN
    published_date: str = UNKNOWN
    language: str = UNKNOWN
    page_count: int = 0
    thumbnail: bytes | None = None

    @property
    def has_thumbnail(self) -> bool:
        """Whether cover image data is present."""
        return self.thumbnail is not None and len(self.thumbnail) > 0

    def unresolved_fields(self) -> list[str]:
        """Names of fields still holding their sentinel value."""
        return BookDetails.from_record(self).unresolved_fields()

    def is_incomplete(self) -> bool:
        return BookDetails.from_record(self).is_incomplete()


@dataclass(frozen=True)
class BookDetails:
    """Book metadata with explicit None for every field a source did not supply.

    Sources map their payloads into this shape and the resolver merges at this
    level, so "not reported" never gets confused with a real value. Conversion
    to the sentinel form happens once, in to_record().
    """

    title: str | None = None
    authors: str | None = None
    publisher: str | None = None
    published_date: str | None = None
    language: str | None = None
    page_count: int | None = None
    thumbnail: bytes | None = None

    def __post_init__(self) -> None:
        for name in ("title", "authors", "publisher", "published_date", "language"):
            object.__setattr__(self, name, _clean_str(getattr(self, name)))
        # A reported page count of zero is indistinguishable from a missing one.
        page_count = self.page_count
        if isinstance(page_count, bool) or not isinstance(page_count, int) or page_count <= 0:
            object.__setattr__(self, "page_count", None)
        if not isinstance(self.thumbnail, bytes) or not self.thumbnail:
            object.__setattr__(self, "thumbnail", None)

    @classmethod
    def from_record(cls, record: BookRecord) -> "BookDetails":
        """Build a BookDetails from a sentinel-form record."""
        return cls(
            title=record.title,
            authors=record.authors,
            publisher=record.publisher,
            published_date=record.published_date,
            language=record.language,
            page_count=record.page_count,
            thumbnail=record.thumbnail,
        )

    def merge(self, other: "BookDetails | None") -> "BookDetails":
        """Fill unresolved fields from other, never overwriting resolved ones.

        Returns a new BookDetails; neither operand is modified.
        """
        if other is None:
            return self
        updates = {
            f.name: getattr(other, f.name)
            for f in fields(self)
            if getattr(self, f.name) is None and getattr(other, f.name) is not None
        }
        return replace(self, **updates) if updates else self

    def unresolved_fields(self) -> list[str]:
        return [f.name for f in fields(self) if getattr(self, f.name) is None]

    def is_incomplete(self) -> bool:
        """True when any field the resolver waits on is still unresolved."""
        return any(getattr(self, name) is None for name in _COMPLETENESS_FIELDS)

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in fields(self))

    def to_record(self) -> BookRecord:
        """Convert to the caller-facing form, substituting display sentinels."""
        return BookRecord(
            title=self.title or UNKNOWN,
            authors=self.authors or UNKNOWN,
            publisher=self.publisher or UNKNOWN,
            published_date=self.published_date or UNKNOWN,
            language=self.language or UNKNOWN,
            page_count=self.page_count or 0,
            thumbnail=self.thumbnail,
        )
