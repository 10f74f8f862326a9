"""Run trigger parsing and shared-secret check.

Scheduled runs pass the same query string the hosted page accepted, e.g.
``?action=start&password=...``; a full URL works too.
"""

from __future__ import annotations

import hmac
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qs, urlparse

START_ACTION = "start"


@dataclass(slots=True)
class Trigger:
    action: Optional[str] = None
    password: Optional[str] = None

    @property
    def is_start(self) -> bool:
        return self.action == START_ACTION


def parse_trigger(raw: str) -> Trigger:
    raw = (raw or "").strip()
    query = urlparse(raw).query if "://" in raw else raw.lstrip("?")
    values = parse_qs(query, keep_blank_values=True)

    def first(key: str) -> Optional[str]:
        items = values.get(key)
        return items[0] if items else None

    return Trigger(action=first("action"), password=first("password"))


def is_authorized(provided: Optional[str], expected: Optional[str]) -> bool:
    """True when no password is configured or ``provided`` matches it."""
    if not expected:
        return True
    if provided is None:
        return False
    return hmac.compare_digest(provided.encode("utf-8"), expected.encode("utf-8"))
