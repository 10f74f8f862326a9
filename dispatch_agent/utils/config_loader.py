from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import yaml

from ..models import Branding, ProviderQuery, SlotSpec, Topic, distinct_categories


class ConfigError(Exception):
    """Raised when the configuration file is invalid or missing required fields."""


PROVIDERS = ("newsapi", "apitube")
NEWSAPI_ENDPOINTS = {"everything", "top-headlines"}


@dataclass(slots=True)
class PipelineDefinition:
    """Static run layout: what to fetch, which slots to fill, how to brand."""

    topics: List[Topic]
    slots: List[SlotSpec]
    branding: Branding = field(default_factory=Branding)

    @property
    def categories(self) -> List[str]:
        """Distinct slot categories in configuration order."""
        return distinct_categories(self.slots)


def _validate_url(value: Any, field_name: str) -> str:
    url_str = str(value).strip()
    parsed = urlparse(url_str)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid URL '{url_str}' for '{field_name}'. Must be absolute http(s) URL.")
    return url_str


def _coerce_query(provider: str, entry: Any, *, topic_type: str) -> Optional[ProviderQuery]:
    if entry is None:
        return None
    if not isinstance(entry, dict):
        raise ConfigError(f"'{provider}' of topic '{topic_type}' must be a mapping")

    endpoint = str(entry.get("endpoint") or "everything").strip()
    if provider == "newsapi" and endpoint not in NEWSAPI_ENDPOINTS:
        raise ConfigError(
            f"Invalid newsapi endpoint '{endpoint}' for topic '{topic_type}'. "
            f"Allowed: {sorted(NEWSAPI_ENDPOINTS)}"
        )

    params = entry.get("params") or {}
    if not isinstance(params, dict):
        raise ConfigError(f"'{provider}.params' of topic '{topic_type}' must be a mapping")
    # YAML happily yields ints for pageSize/limit; the query string wants text
    return ProviderQuery(endpoint=endpoint, params={str(k): str(v) for k, v in params.items()})


def _coerce_topic(entry: Any) -> Topic:
    if not isinstance(entry, dict):
        raise ConfigError(f"Each topic must be a mapping, got: {type(entry)}")
    topic_type = str(entry.get("type") or "").strip()
    if not topic_type:
        raise ConfigError(f"Topic is missing 'type': {entry}")

    queries = {p: _coerce_query(p, entry.get(p), topic_type=topic_type) for p in PROVIDERS}
    if not any(queries.values()):
        raise ConfigError(f"Topic '{topic_type}' defines no provider query ({', '.join(PROVIDERS)})")

    return Topic(
        type=topic_type,
        description=str(entry.get("description") or "").strip(),
        newsapi=queries["newsapi"],
        apitube=queries["apitube"],
    )


def _coerce_slots(entries: Any) -> List[SlotSpec]:
    if not isinstance(entries, list) or not entries:
        raise ConfigError("'slots' must be a non-empty list in the YAML configuration")

    specs: List[SlotSpec] = []
    seen_ids: set[str] = set()
    for item in entries:
        if not isinstance(item, dict):
            raise ConfigError(f"Each slot must be a mapping, got: {type(item)}")
        missing = {"id", "category"} - {k for k, v in item.items() if v not in (None, "")}
        if missing:
            raise ConfigError(f"Missing required fields: {sorted(missing)} in {item}")
        slot_id = str(item["id"]).strip()
        if slot_id in seen_ids:
            raise ConfigError(f"Duplicate slot id '{slot_id}'")
        seen_ids.add(slot_id)
        specs.append(
            SlotSpec(
                id=slot_id,
                name=str(item.get("name") or slot_id).strip(),
                category=str(item["category"]).strip(),
            )
        )
    return specs


def _coerce_color(value: Any, field_name: str) -> tuple[int, int, int]:
    if isinstance(value, str):
        hex_str = value.strip().lstrip("#")
        if len(hex_str) != 6:
            raise ConfigError(f"'{field_name}' must be '#rrggbb' or [r, g, b]")
        try:
            return tuple(int(hex_str[i : i + 2], 16) for i in (0, 2, 4))  # type: ignore[return-value]
        except ValueError as exc:
            raise ConfigError(f"Invalid colour '{value}' for '{field_name}'") from exc
    if isinstance(value, list) and len(value) == 3 and all(isinstance(c, int) and 0 <= c <= 255 for c in value):
        return tuple(value)  # type: ignore[return-value]
    raise ConfigError(f"'{field_name}' must be '#rrggbb' or [r, g, b]")


def _coerce_branding(entry: Any) -> Branding:
    if entry is None:
        return Branding()
    if not isinstance(entry, dict):
        raise ConfigError("'branding' must be a mapping")

    kwargs: Dict[str, Any] = {}
    if entry.get("brand_text") is not None:
        kwargs["brand_text"] = str(entry["brand_text"])
    for key in ("logo_url", "overlay_url"):
        if entry.get(key):
            kwargs[key] = _validate_url(entry[key], key)
    for key in ("accent_color", "text_color", "panel_color"):
        if entry.get(key) is not None:
            kwargs[key] = _coerce_color(entry[key], key)
    for key in ("width", "height", "image_height"):
        if entry.get(key) is not None:
            try:
                kwargs[key] = int(entry[key])
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"'{key}' must be an integer") from exc

    branding = Branding(**kwargs)
    if branding.width <= 0 or branding.height <= 0 or not (0 < branding.image_height < branding.height):
        raise ConfigError("Branding canvas requires width/height > 0 and 0 < image_height < height")
    return branding


def load_pipeline_config(path: Path | str) -> PipelineDefinition:
    """Load ``pipeline.yaml`` into a typed :class:`PipelineDefinition`.

    YAML structure:
      - ``topics``: list of mappings
          - type: string (required; also the category name it feeds)
          - description: string (optional; shown to the model when selecting)
          - newsapi: {endpoint: 'everything' | 'top-headlines', params: mapping}
          - apitube: {endpoint: string (default 'everything'), params: mapping}
      - ``slots``: non-empty list of {id (unique), name, category}
      - ``branding``: optional mapping (brand_text, logo_url, overlay_url,
        accent_color, text_color, panel_color, width, height, image_height)

    Unknown top-level keys are ignored for forward compatibility.
    """
    config_path = Path(path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    with config_path.open("r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError("Top-level YAML must be a mapping")

    topics_raw = data.get("topics") or []
    if not isinstance(topics_raw, list):
        raise ConfigError("'topics' must be a list in the YAML configuration")
    topics = [_coerce_topic(t) for t in topics_raw]

    seen_types: set[str] = set()
    for t in topics:
        if t.type in seen_types:
            raise ConfigError(f"Duplicate topic type '{t.type}'")
        seen_types.add(t.type)

    slots = _coerce_slots(data.get("slots"))
    branding = _coerce_branding(data.get("branding"))
    return PipelineDefinition(topics=topics, slots=slots, branding=branding)
