from __future__ import annotations

from typing import Any, List, Mapping, Optional

import requests

from ..models import Article, ProviderQuery
from ..processors.normalize import clean_provider_text, normalize_plain_text, parse_date_to_iso
from ..utils.logging import get_logger
from .base import DEFAULT_HEADERS, ProviderError

logger = get_logger("dd.fetchers.newsapi")

NEWSAPI_BASE_URL = "https://newsapi.org/v2"


def map_newsapi_article(raw: Mapping[str, Any]) -> Optional[Article]:
    """Map one NewsAPI.org article to :class:`Article`; ``None`` if it has no URL."""
    link = (raw.get("url") or "").strip()
    if not link:
        return None
    source = raw.get("source") or {}
    description = clean_provider_text(raw.get("description"))
    content = clean_provider_text(raw.get("content")) or description
    return Article(
        title=normalize_plain_text(raw.get("title")),
        link=link,
        published_at=parse_date_to_iso(raw.get("publishedAt")),
        source_name=(source.get("name") if isinstance(source, Mapping) else None) or "",
        image_url=raw.get("urlToImage") or None,
        description=description,
        content=content,
    )


def fetch_newsapi_articles(
    query: ProviderQuery,
    *,
    api_key: str,
    since: str | None = None,
    timeout: int = 30,
) -> List[Article]:
    """Fetch one NewsAPI.org query. Raises on HTTP or API errors."""
    params = dict(query.params)
    if since and query.endpoint == "everything":
        params.setdefault("from", since)

    url = f"{NEWSAPI_BASE_URL}/{query.endpoint}"
    headers = {**DEFAULT_HEADERS, "X-Api-Key": api_key}
    logger.debug("Fetching NewsAPI %s params=%s", url, params)
    resp = requests.get(url, params=params, headers=headers, timeout=timeout)
    if resp.status_code >= 400:
        logger.warning("NewsAPI request failed (%s): %s", resp.status_code, resp.text[:200])
        resp.raise_for_status()

    data = resp.json()
    if not isinstance(data, dict) or data.get("status") != "ok":
        message = data.get("message") if isinstance(data, dict) else None
        raise ProviderError(f"NewsAPI.org API Error: {message or 'unknown error'}")
    raw_articles = data.get("articles")
    if not isinstance(raw_articles, list):
        raise ProviderError("Unexpected format from NewsAPI.org.")

    articles = [a for a in (map_newsapi_article(r) for r in raw_articles if isinstance(r, Mapping)) if a]
    logger.info("Fetched %d NewsAPI articles from /%s", len(articles), query.endpoint)
    return articles
