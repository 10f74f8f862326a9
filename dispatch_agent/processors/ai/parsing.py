from __future__ import annotations

import json
import re
from typing import Any, List

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def parse_json_array(raw: str | None) -> List[Any]:
    """Parse a model response that must be a JSON array.

    Tolerates surrounding markdown code fences. Raises ``ValueError`` on an
    empty response, invalid JSON, or a non-array document.
    """
    if not raw or not raw.strip():
        raise ValueError("Empty AI response")

    text = _FENCE_RE.sub("", raw.strip()).strip()
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"AI response is not valid JSON: {exc}") from exc

    if not isinstance(data, list):
        raise ValueError(
            f"AI returned an invalid response. Expected an array of items, but got {type(data).__name__}."
        )
    return data
