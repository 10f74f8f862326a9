from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from ..models import Article, ProviderQuery, Topic
from ..processors.dedup import dedupe_by_link
from ..utils.logging import get_logger
from .apitube import fetch_apitube_articles
from .base import since_date
from .newsapi import fetch_newsapi_articles

logger = get_logger("dd.fetchers.gateway")

ProviderFetcher = Callable[..., List[Article]]

DEFAULT_FETCHERS: Dict[str, ProviderFetcher] = {
    "newsapi": fetch_newsapi_articles,
    "apitube": fetch_apitube_articles,
}


@dataclass(slots=True)
class ProviderCall:
    provider: str
    topic: str
    query: ProviderQuery


class ArticleGateway:
    """Gather one deduplicated article pool from both news providers."""

    def __init__(
        self,
        *,
        api_keys: Mapping[str, str],
        lookback_days: int = 2,
        timeout: int = 30,
        max_workers: int = 8,
        fetchers: Optional[Mapping[str, ProviderFetcher]] = None,
    ) -> None:
        self.api_keys = dict(api_keys)
        self.lookback_days = lookback_days
        self.timeout = timeout
        self.max_workers = max_workers
        self.fetchers = dict(fetchers or DEFAULT_FETCHERS)

    def plan(self, topics: Iterable[Topic]) -> List[ProviderCall]:
        """One call per (topic, provider) that has both a query and an API key."""
        calls: List[ProviderCall] = []
        skipped: set[str] = set()
        for topic in topics:
            for provider in self.fetchers:
                query = getattr(topic, provider, None)
                if query is None:
                    continue
                if not self.api_keys.get(provider):
                    skipped.add(provider)
                    continue
                calls.append(ProviderCall(provider=provider, topic=topic.type, query=query))
        for provider in sorted(skipped):
            logger.warning("No API key configured for %s; skipping its queries", provider)
        return calls

    def _fetch(self, call: ProviderCall, since: str) -> List[Article]:
        fetcher = self.fetchers[call.provider]
        try:
            return fetcher(
                call.query,
                api_key=self.api_keys[call.provider],
                since=since,
                timeout=self.timeout,
            ) or []
        except Exception as exc:  # noqa: BLE001 - one provider must not sink the batch
            logger.warning("%s request for '%s' failed: %s", call.provider, call.topic, exc)
            return []

    def gather(self, topics: Iterable[Topic]) -> List[Article]:
        """Fetch every call concurrently and merge in plan order.

        Joining in submission order keeps "first occurrence wins" stable
        across runs regardless of which provider answers first.
        """
        calls = self.plan(topics)
        if not calls:
            logger.warning("No provider calls planned; article pool is empty")
            return []

        since = since_date(self.lookback_days)
        workers = max(1, min(self.max_workers, len(calls)))
        logger.debug("Starting concurrent fetch for %d calls (workers=%d)", len(calls), workers)
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._fetch, call, since) for call in calls]
            batches = [fut.result() for fut in futures]

        merged: List[Article] = [art for batch in batches for art in batch]
        unique, stats = dedupe_by_link(merged)
        logger.info(
            "Gathered %d articles (%d unique, %d duplicates, %d without link) from %d calls",
            stats.total,
            stats.kept,
            stats.duplicates,
            stats.missing_link,
            len(calls),
        )
        return unique
