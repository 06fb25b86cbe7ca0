# ABOUTME: Hardcover metadata source backed by its GraphQL catalog API.
# ABOUTME: Queries editions by ISBN-13 or exact title through the bearer-authenticated proxy.

import logging

from folio.metadata.assets import fetch_cover
from folio.metadata.config import HARDCOVER_COVER_ORIGINS, ProxyConfig
from folio.metadata.errors import MetadataFetchError
from folio.metadata.hardcover_parser import build_query, first_edition, to_book_details
from folio.metadata.http import HttpClient
from folio.metadata.types import BookDetails

logger = logging.getLogger(__name__)

_GRAPHQL_PATH = "v1/graphql"


class HardcoverSource:
    """Metadata source backed by the Hardcover GraphQL API.

    Supports lookup by ISBN-13 or by exact title. Only the first matching
    edition is used.
    """

    def __init__(self, http_client: HttpClient, config: ProxyConfig) -> None:
        self._http = http_client
        self._config = config

    @property
    def name(self) -> str:
        return "hardcover"

    async def fetch(
        self, isbn: str | None = None, title: str | None = None
    ) -> BookDetails | None:
        """Look up the first edition matching isbn, or title when isbn is absent.

        Calling with neither is a caller error; it is logged and treated as
        "no data" so the surrounding lookup can carry on.
        """
        query = build_query(isbn, title)
        if query is None:
            logger.error("Hardcover lookup needs an ISBN or a title")
            return None

        key = isbn or title
        logger.info("Querying Hardcover for %s", key)
        try:
            return await self._fetch(*query)
        except MetadataFetchError as exc:
            logger.warning("Hardcover lookup failed for %s: %s", key, exc)
            return None
        except Exception:
            logger.exception("Error reading Hardcover data for %s", key)
            return None

    async def _fetch(self, query: str, variables: dict[str, str]) -> BookDetails | None:
        headers: dict[str, str] = {}
        if self._config.hardcover_token:
            headers["Authorization"] = f"Bearer {self._config.hardcover_token}"
        else:
            logger.warning("No Hardcover token configured; the request will likely be rejected")

        url = self._config.proxy_url(self._config.hardcover_prefix, _GRAPHQL_PATH)
        payload = await self._http.post_json(
            url, {"query": query, "variables": variables}, headers=headers
        )
        if not isinstance(payload, dict):
            return None
        if payload.get("errors") and not payload.get("data"):
            logger.warning("Hardcover returned errors: %s", payload["errors"])
            return None

        edition = first_edition(payload)
        if edition is None:
            logger.info("No Hardcover edition found for %s", variables)
            return None

        details = to_book_details(edition)
        if edition.image_url:
            thumbnail = await fetch_cover(
                self._http,
                self._config,
                edition.image_url,
                HARDCOVER_COVER_ORIGINS,
                self._config.hardcover_cover_prefix,
            )
            if thumbnail is not None:
                details = details.merge(BookDetails(thumbnail=thumbnail))
        return details
