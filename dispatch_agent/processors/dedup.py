from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Tuple

from ..models import Article


@dataclass(slots=True)
class DedupStats:
    total: int
    kept: int
    duplicates: int
    missing_link: int


def canonical_link(link: str | None) -> str:
    return (link or "").strip()


def dedupe_by_link(articles: Iterable[Article]) -> Tuple[List[Article], DedupStats]:
    """Drop repeated links, keeping the first occurrence.

    Articles without a link cannot be referenced later and are dropped too.
    """
    unique: List[Article] = []
    seen: set[str] = set()
    total = 0
    duplicates = 0
    missing = 0
    for art in articles:
        total += 1
        key = canonical_link(art.link)
        if not key:
            missing += 1
            continue
        if key in seen:
            duplicates += 1
            continue
        seen.add(key)
        unique.append(art)
    stats = DedupStats(total=total, kept=len(unique), duplicates=duplicates, missing_link=missing)
    return unique, stats
