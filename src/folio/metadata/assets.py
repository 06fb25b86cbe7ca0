# ABOUTME: Best-effort cover image fetching through the cover proxies.
# ABOUTME: Any failure is logged and reported as "no image"; nothing is raised.

import logging

from folio.metadata.config import ProxyConfig
from folio.metadata.errors import MetadataFetchError, ProxyPolicyError
from folio.metadata.http import HttpClient

logger = logging.getLogger(__name__)


async def fetch_thumbnail(http: HttpClient, url: str) -> bytes | None:
    """Fetch cover image bytes from an already proxy-rewritten URL.

    Returns None on non-2xx responses, network errors, timeouts, policy
    violations, or an empty body. A missing cover must never abort a lookup.
    """
    logger.info("Fetching thumbnail from %s", url)
    try:
        data = await http.get_bytes(url)
    except MetadataFetchError as exc:
        logger.warning("Thumbnail fetch failed for %s: %s", url, exc)
        return None
    except Exception:
        logger.exception("Unexpected error fetching thumbnail from %s", url)
        return None

    if not data:
        logger.warning("Thumbnail at %s returned an empty body", url)
        return None
    return data


async def fetch_cover(
    http: HttpClient,
    config: ProxyConfig,
    url: str,
    origins: tuple[str, ...],
    prefix: str,
) -> bytes | None:
    """Rewrite a source's cover URL onto its cover proxy, then fetch it.

    A cover hosted somewhere the proxy does not front is skipped rather than
    requested directly.
    """
    try:
        proxied = config.rewrite_origin(url, origins, prefix)
    except ProxyPolicyError as exc:
        logger.warning("Skipping cover image: %s", exc)
        return None
    return await fetch_thumbnail(http, proxied)
