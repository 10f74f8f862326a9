from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict


class AIClient(ABC):
    """Abstract AI client interface for structured (JSON) text generation."""

    @abstractmethod
    def generate_json(self, prompt: str, *, schema: Dict[str, Any]) -> str:
        """Return the raw model text for ``prompt``, constrained to ``schema`` where supported."""
