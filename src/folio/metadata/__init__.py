# ABOUTME: Metadata package for book sources, proxy transport, and the canonical record.
# ABOUTME: Exports the record types and source protocol used throughout Folio.

from folio.metadata.config import ProxyConfig
from folio.metadata.provider import BookSource, TitleSearchSource
from folio.metadata.types import UNKNOWN, BookDetails, BookRecord

__all__ = [
    "UNKNOWN",
    "BookDetails",
    "BookRecord",
    "BookSource",
    "ProxyConfig",
    "TitleSearchSource",
]
