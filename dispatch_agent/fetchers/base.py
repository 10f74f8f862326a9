from __future__ import annotations

from datetime import date, timedelta
from typing import Dict

DEFAULT_HEADERS: Dict[str, str] = {
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/127.0.0.0 Safari/537.36"
    ),
    "Accept": "application/json",
}


class ProviderError(RuntimeError):
    """A news provider answered, but not with a usable article list."""


def since_date(lookback_days: int, *, today: date | None = None) -> str:
    """``YYYY-MM-DD`` of ``lookback_days`` ago, the providers' date filter format."""
    return ((today or date.today()) - timedelta(days=lookback_days)).isoformat()
