from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from .article import TaskResult


class SlotStatus(str, Enum):
    PENDING = "Pending"
    GATHERING = "Gathering"
    PROCESSING = "Processing"
    GENERATING_IMAGE = "GeneratingImage"
    COMPOSING = "Composing"
    UPLOADING = "Uploading"
    SENDING_WEBHOOK = "SendingWebhook"
    DONE = "Done"
    ERROR = "Error"

    @property
    def is_terminal(self) -> bool:
        return self in (SlotStatus.DONE, SlotStatus.ERROR)


@dataclass(slots=True)
class SlotSpec:
    """One configured category occurrence in the output layout."""

    id: str
    name: str
    category: str


@dataclass(slots=True)
class Slot:
    id: str
    category_name: str
    category: str
    status: SlotStatus = SlotStatus.PENDING
    result: Optional[TaskResult] = None
    error: Optional[str] = None
    history: List[SlotStatus] = field(default_factory=lambda: [SlotStatus.PENDING])

    @classmethod
    def from_spec(cls, spec: SlotSpec) -> "Slot":
        return cls(id=spec.id, category_name=spec.name, category=spec.category)


def distinct_categories(specs: Iterable[SlotSpec]) -> List[str]:
    """Slot categories without repeats, in configuration order."""
    return list(dict.fromkeys(s.category for s in specs))
