from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional

LogLevel = Literal["INFO", "SUCCESS", "WARNING", "ERROR"]


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


@dataclass(slots=True)
class LogEntry:
    level: LogLevel
    message: str
    category: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    timestamp: str = field(default_factory=_utc_now_iso)

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"level": self.level, "message": self.message}
        if self.category is not None:
            payload["category"] = self.category
        if self.details is not None:
            payload["details"] = self.details
        payload["timestamp"] = self.timestamp
        return payload
