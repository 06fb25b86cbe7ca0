# ABOUTME: BookSource protocol defining the contract for metadata sources.
# ABOUTME: Goodreads, Google Books and Hardcover adapters all implement this.

from typing import Protocol, runtime_checkable

from folio.metadata.types import BookDetails


@runtime_checkable
class BookSource(Protocol):
    """Protocol for ISBN-keyed metadata sources.

    fetch() returns None when the source has no data for the ISBN or failed in
    any way. Implementations must never raise past this boundary.
    """

    @property
    def name(self) -> str: ...

    async def fetch(self, isbn: str) -> BookDetails | None: ...


@runtime_checkable
class TitleSearchSource(Protocol):
    """A source that can also be queried by exact title."""

    @property
    def name(self) -> str: ...

    async def fetch(
        self, isbn: str | None = None, title: str | None = None
    ) -> BookDetails | None: ...
