from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from ..models import Article
from ..utils.logging import get_logger
from .ai import AIClient, create_ai_client
from .ai.parsing import parse_json_array
from .ai.retry import with_retries

logger = get_logger("dd.processors.translate")

TRANSLATION_SCHEMA: Dict[str, Any] = {
    "type": "ARRAY",
    "items": {
        "type": "OBJECT",
        "properties": {
            "originalId": {"type": "INTEGER"},
            "translatedTitle": {"type": "STRING"},
            "translatedContent": {"type": "STRING"},
        },
        "required": ["originalId", "translatedTitle", "translatedContent"],
    },
}


@dataclass(slots=True)
class _Translation:
    index: int
    title: str
    content: str


def build_translation_prompt(articles: Sequence[Article]) -> str:
    listing = "\n".join(
        f"\nARTICLE {i}:\nID: {i}\nTitle: {a.title}\nContent: {a.body}\n---"
        for i, a in enumerate(articles)
    )
    return (
        "You are an expert translator. Your task is to translate the 'Title' and 'Content' "
        "of the following list of news articles into high-quality, fluent English.\n\n"
        "**Instructions:**\n"
        "1.  Review all articles. Some may not be in English.\n"
        "2.  If an article is NOT in English, translate its Title and Content.\n"
        "3.  If an article IS ALREADY in English, return its original Title and Content without modification.\n"
        "4.  Return a JSON array where each object corresponds to an article from the original list. "
        "Maintain the original order.\n\n"
        f"**List of Articles:**\n{listing}\n\n"
        "**Output Format:**\n"
        "Return a JSON array that strictly adheres to the provided schema. Each object must contain "
        "the original ID, the translated title, and the translated content.\n"
    )


def _parse_translations(raw: str, pool_size: int) -> List[_Translation]:
    items = parse_json_array(raw)
    parsed: List[_Translation] = []
    for item in items:
        if not isinstance(item, dict):
            continue
        idx = item.get("originalId")
        # bool is an int subclass; negative ids would wrap around the list
        if isinstance(idx, bool) or not isinstance(idx, int) or not (0 <= idx < pool_size):
            logger.debug("Ignoring translation with invalid originalId=%r", idx)
            continue
        title = item.get("translatedTitle")
        content = item.get("translatedContent")
        if not isinstance(title, str) or not isinstance(content, str):
            continue
        parsed.append(_Translation(index=idx, title=title, content=content))
    return parsed


def translate_articles(
    articles: List[Article],
    *,
    ai: AIClient | None = None,
) -> List[Article]:
    """Translate the pool to English in one model call, in place.

    Best effort: on any failure the same, untouched list is returned. The
    response is fully parsed before the first article is modified.
    """
    if not articles:
        return articles
    if ai is None:
        ai = create_ai_client()

    prompt = build_translation_prompt(articles)
    try:
        translations = with_retries(
            lambda: _parse_translations(ai.generate_json(prompt, schema=TRANSLATION_SCHEMA), len(articles))
        )
    except Exception as exc:  # noqa: BLE001 - translation is optional
        logger.warning("Translation failed; continuing with untranslated articles: %s", exc)
        return articles

    for tr in translations:
        art = articles[tr.index]
        art.title = tr.title
        art.content = tr.content
        # description stands in for content when content is missing
        if art.description:
            art.description = tr.content

    logger.info("Applied %d translation(s) to %d article(s)", len(translations), len(articles))
    return articles
