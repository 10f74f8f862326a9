from __future__ import annotations

from collections import Counter
from typing import Any, Dict, List, Sequence

from ..models import Article, ArticleAnalysis, SlotSpec, Topic, distinct_categories
from ..utils.logging import get_logger
from .ai import AIClient, create_ai_client
from .ai.parsing import parse_json_array
from .ai.retry import with_retries

logger = get_logger("dd.processors.select")


class AnalysisError(RuntimeError):
    """The selection/analysis call failed; the run cannot continue."""


def build_analysis_schema(categories: Sequence[str]) -> Dict[str, Any]:
    return {
        "type": "ARRAY",
        "items": {
            "type": "OBJECT",
            "properties": {
                "originalArticleId": {
                    "type": "INTEGER",
                    "description": "The original ID number of the article from the provided list that was selected.",
                },
                "category": {
                    "type": "STRING",
                    "enum": list(categories),
                    "description": "The category this article was selected for.",
                },
                "headline": {
                    "type": "STRING",
                    "description": "A new, compelling headline created based on the IMPACT principle.",
                },
                "highlightPhrases": {
                    "type": "ARRAY",
                    "items": {"type": "STRING"},
                    "description": "An array of key phrases from the new headline.",
                },
                "imagePrompt": {
                    "type": "STRING",
                    "description": (
                        "A safe-for-work, symbolic image prompt based on the SCAT principle, "
                        "avoiding specific people, violence, or sensitive topics."
                    ),
                },
                "caption": {
                    "type": "STRING",
                    "description": (
                        "A social media caption of about 50 words with 3-5 relevant hashtags. "
                        "The source name should NOT be in the caption."
                    ),
                },
                "sourceName": {
                    "type": "STRING",
                    "description": "The name of the original news source. This is a separate, mandatory field.",
                },
            },
            "required": [
                "originalArticleId",
                "category",
                "headline",
                "highlightPhrases",
                "imagePrompt",
                "caption",
                "sourceName",
            ],
        },
    }


def _distribution_lines(slot_specs: Sequence[SlotSpec], topics: Sequence[Topic]) -> List[str]:
    counts = Counter(s.category for s in slot_specs)
    descriptions = {t.type: t.description for t in topics}
    lines: List[str] = []
    for category in distinct_categories(slot_specs):
        n = counts[category]
        noun = "article" if n == 1 else "articles"
        desc = descriptions.get(category) or ""
        lines.append(f"    -   **{n} {noun}** for '{category}'" + (f": {desc}" if desc else "."))
    return lines


def build_selection_prompt(
    articles: Sequence[Article],
    *,
    slot_specs: Sequence[SlotSpec],
    topics: Sequence[Topic] = (),
) -> str:
    listing = "\n".join(
        f"\nARTICLE {i}:\nID: {i}\nTitle: {a.title}\nContent: {a.body}\nSource: {a.source_name}\n---"
        for i, a in enumerate(articles)
    )
    total = len(slot_specs)
    distribution = "\n".join(_distribution_lines(slot_specs, topics))
    return (
        "You are an expert news editor for a social media channel targeting a Bangladeshi audience. "
        "Your goal is to curate a batch of top-tier news stories from a large, combined list of recent articles.\n\n"
        "**Your Task:**\n"
        "1.  **Review the entire list** of articles provided below. They have been translated to English for your review.\n"
        f"2.  **Select exactly {total} articles** that are the most impactful and **recent**. "
        "You MUST fulfill the following distribution:\n"
        f"{distribution}\n"
        "    If you cannot find a suitable article for a category, pick the closest match. Do not leave a category empty.\n"
        f"3.  For EACH of the {total} articles you select, perform a full analysis.\n\n"
        "**Analysis Steps for Each Selected Article:**\n"
        "1.  **Headline (IMPACT Principle):** Informative, Main Point, Prompting Curiosity, Active Voice, Concise, Targeted.\n"
        "2.  **Highlight Phrases:** Key phrases from your new headline that capture critical information.\n"
        "3.  **Image Prompt (SCAT Principle & Safety):** A concise prompt for an AI image generator. It MUST be safe "
        "for work and MUST NOT depict specific people, violence, or sensitive topics. Prefer symbolic or abstract scenes.\n"
        "4.  **Caption & Source:** A social media caption (~50 words) with 3-5 relevant hashtags. "
        "DO NOT include the source name in the caption; it goes in its own field.\n\n"
        f"**List of Available Articles:**\n{listing}\n\n"
        "**Output Instructions:**\n"
        f"Return a JSON array containing exactly {total} objects, one per selected article. "
        "Adhere strictly to the provided JSON schema.\n"
    )


def select_and_analyze(
    articles: Sequence[Article],
    *,
    slot_specs: Sequence[SlotSpec],
    categories: Sequence[str] | None = None,
    topics: Sequence[Topic] = (),
    ai: AIClient | None = None,
) -> List[ArticleAnalysis]:
    """Ask the model to pick and rewrite articles for the slot layout.

    ``categories`` restricts the model's category field and defaults to the
    distinct slot categories.

    Only checks that the answer is a JSON array; indices and categories are
    validated by the caller when the analyses are consumed.
    """
    if not articles:
        logger.info("No articles provided to AI for analysis. Returning empty list.")
        return []
    if ai is None:
        ai = create_ai_client()

    if categories is None:
        categories = distinct_categories(slot_specs)
    prompt = build_selection_prompt(articles, slot_specs=slot_specs, topics=topics)
    schema = build_analysis_schema(categories)
    try:
        items = with_retries(lambda: parse_json_array(ai.generate_json(prompt, schema=schema)))
    except Exception as exc:  # noqa: BLE001 - re-raised as run-fatal
        raise AnalysisError(f"AI analysis failed: {exc}") from exc

    analyses = [ArticleAnalysis.from_dict(item) for item in items]
    logger.info("Model returned %d analyses for %d slot(s)", len(analyses), len(slot_specs))
    return analyses
