from __future__ import annotations

import html
import re
import unicodedata
from datetime import datetime
from typing import Optional

from bs4 import BeautifulSoup

_whitespace_re = re.compile(r"\s+")
_control_chars_re = re.compile(r"[\u0000-\u0008\u000B\u000C\u000E-\u001F\u007F]")
# NewsAPI truncates ``content`` and appends e.g. "... [+2817 chars]"
_truncation_marker_re = re.compile(r"\s*(?:\u2026|\.\.\.)?\s*\[\+\d+ chars\]\s*$")

_PUNCT_TRANSLATION = {
    ord("\u2018"): "'",  # left single quote
    ord("\u2019"): "'",  # right single quote
    ord("\u201C"): '"',  # left double quote
    ord("\u201D"): '"',  # right double quote
    ord("\u00A0"): " ",  # non-breaking space
}


def clean_html_to_text(raw_html: str | None) -> str:
    """Clean HTML to normalized plain text.

    - Strip tags
    - Unescape HTML entities
    - Collapse whitespace
    """
    if not raw_html:
        return ""

    # Skip the parser for plain text; bs4 warns on URL-looking input
    if "<" not in raw_html and "&" not in raw_html:
        return _whitespace_re.sub(" ", raw_html).strip()

    soup = BeautifulSoup(raw_html, "html.parser")
    text = soup.get_text("\n")
    text = html.unescape(text)
    text = _whitespace_re.sub(" ", text)
    return text.strip()


def normalize_plain_text(text: str | None) -> str:
    """Normalize plain text before it is shown to the model.

    - Strip BOM
    - Replace curly quotes and non-breaking spaces
    - Unicode normalize (NFC; Bengali conjuncts must survive)
    - Remove control characters
    - Collapse whitespace
    """
    if not text:
        return ""

    if text.startswith("\ufeff"):
        text = text.lstrip("\ufeff")

    text = text.translate(_PUNCT_TRANSLATION)
    text = unicodedata.normalize("NFC", text)
    text = _control_chars_re.sub(" ", text)
    return _whitespace_re.sub(" ", text).strip()


def clean_provider_text(value: str | None) -> Optional[str]:
    """Provider body/description to plain text; ``None`` when nothing is left."""
    text = normalize_plain_text(clean_html_to_text(value))
    text = _truncation_marker_re.sub("", text).strip()
    return text or None


def parse_date_to_iso(value: str | datetime | None) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.isoformat()
    candidate = value.strip()
    # fromisoformat on 3.10 rejects a trailing 'Z'
    if candidate.endswith("Z"):
        candidate = candidate[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(candidate).isoformat()
    except ValueError:
        pass
    for fmt in ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d", "%Y/%m/%d"):
        try:
            return datetime.strptime(value.strip(), fmt).isoformat()
        except ValueError:
            continue
    # Keep the provider's value rather than dropping it
    return value
