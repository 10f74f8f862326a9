from __future__ import annotations

from typing import Any, List, Mapping, Optional

import requests

from ..models import Article, ProviderQuery
from ..processors.normalize import clean_provider_text, normalize_plain_text, parse_date_to_iso
from ..utils.logging import get_logger
from .base import DEFAULT_HEADERS, ProviderError

logger = get_logger("dd.fetchers.apitube")

APITUBE_BASE_URL = "https://api.apitube.io/v1/news"


def _nested(raw: Mapping[str, Any], key: str, field: str) -> Optional[str]:
    value = raw.get(key)
    if isinstance(value, Mapping):
        return value.get(field) or None
    return None


def map_apitube_article(raw: Mapping[str, Any]) -> Optional[Article]:
    """Map one APITube article to :class:`Article`; ``None`` if it has no URL.

    APITube nests the image and source (``image.url``, ``source.name``) and
    calls the short text ``summary``. ``href`` is the newer name for ``url``.
    """
    link = (raw.get("url") or raw.get("href") or "").strip()
    if not link:
        return None
    description = clean_provider_text(raw.get("summary") or raw.get("description"))
    content = clean_provider_text(raw.get("content") or raw.get("body")) or description
    return Article(
        title=normalize_plain_text(raw.get("title")),
        link=link,
        published_at=parse_date_to_iso(raw.get("published_at")),
        source_name=_nested(raw, "source", "name") or _nested(raw, "source", "domain") or "",
        image_url=_nested(raw, "image", "url"),
        description=description,
        content=content,
    )


def fetch_apitube_articles(
    query: ProviderQuery,
    *,
    api_key: str,
    since: str | None = None,
    timeout: int = 30,
) -> List[Article]:
    """Fetch one APITube query. Raises on HTTP or API errors."""
    params = dict(query.params)
    if since:
        params.setdefault("published_at.start", since)

    url = f"{APITUBE_BASE_URL}/{query.endpoint}"
    headers = {**DEFAULT_HEADERS, "X-API-Key": api_key}
    logger.debug("Fetching APITube %s params=%s", url, params)
    resp = requests.get(url, params=params, headers=headers, timeout=timeout)
    if resp.status_code >= 400:
        logger.warning("APITube request failed (%s): %s", resp.status_code, resp.text[:200])
        resp.raise_for_status()

    data = resp.json()
    if not isinstance(data, dict):
        raise ProviderError("Unexpected format in APITube response.")
    raw_articles = data.get("results", data.get("data"))
    if not isinstance(raw_articles, list):
        errors = data.get("errors")
        if isinstance(errors, list) and errors:
            first = errors[0] if isinstance(errors[0], Mapping) else {}
            raise ProviderError(f"APITube API Error: {first.get('message') or 'Unknown error'}")
        raise ProviderError("Unexpected format in APITube response.")

    articles = [a for a in (map_apitube_article(r) for r in raw_articles if isinstance(r, Mapping)) if a]
    logger.info("Fetched %d APITube articles from /%s", len(articles), query.endpoint)
    return articles
