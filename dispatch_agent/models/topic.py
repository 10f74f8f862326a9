from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional


@dataclass(slots=True)
class ProviderQuery:
    """Endpoint and query parameters for one news provider."""

    endpoint: str
    params: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class Topic:
    """A news topic fetched from both providers.

    ``type`` doubles as the selection category the topic feeds.
    """

    type: str
    description: str = ""
    newsapi: Optional[ProviderQuery] = None
    apitube: Optional[ProviderQuery] = None
