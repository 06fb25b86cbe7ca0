# ABOUTME: Folio - book metadata resolution across scraped and catalog sources.
# ABOUTME: Exposes the caller-facing resolve_book coroutine and the canonical record type.

from folio.core.resolver import BookNotFoundError, BookResolutionError, resolve_book
from folio.metadata.types import BookRecord

__version__ = "0.1.0"

__all__ = [
    "BookNotFoundError",
    "BookRecord",
    "BookResolutionError",
    "resolve_book",
]
