"""Processing pipeline: normalization, deduplication, translation, selection."""

from .dedup import DedupStats, dedupe_by_link
from .normalize import clean_html_to_text, clean_provider_text, normalize_plain_text, parse_date_to_iso
from .select import AnalysisError, select_and_analyze
from .translate import translate_articles

__all__ = [
    "AnalysisError",
    "DedupStats",
    "clean_html_to_text",
    "clean_provider_text",
    "dedupe_by_link",
    "normalize_plain_text",
    "parse_date_to_iso",
    "select_and_analyze",
    "translate_articles",
]
