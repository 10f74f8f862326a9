from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Mapping, Optional


@dataclass(slots=True)
class Article:
    title: str
    link: str
    published_at: Optional[str] = None
    source_name: str = ""
    image_url: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None

    @property
    def body(self) -> str:
        return self.content or self.description or ""


@dataclass(slots=True)
class ArticleAnalysis:
    """Model verdict on one selected article.

    ``original_article_index`` points into the pool that was sent to the model.
    It is not checked here; the orchestrator bounds-checks it when consuming.
    """

    original_article_index: Any
    category: str
    headline: str
    highlight_phrases: List[str] = field(default_factory=list)
    image_prompt: str = ""
    caption: str = ""
    source_name: str = ""

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | Any) -> "ArticleAnalysis":
        if not isinstance(data, Mapping):
            data = {}
        phrases = data.get("highlightPhrases") or []
        if not isinstance(phrases, list):
            phrases = [phrases]
        return cls(
            original_article_index=data.get("originalArticleId"),
            category=str(data.get("category") or ""),
            headline=str(data.get("headline") or ""),
            highlight_phrases=[str(p) for p in phrases if p],
            image_prompt=str(data.get("imagePrompt") or ""),
            caption=str(data.get("caption") or ""),
            source_name=str(data.get("sourceName") or ""),
        )


@dataclass(slots=True)
class TaskResult:
    headline: str
    image_url: str
    caption: str
    source_url: str
    source_name: str
