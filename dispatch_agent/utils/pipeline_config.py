from __future__ import annotations

import os
from dataclasses import dataclass, field

from .logging import get_logger

logger = get_logger("dd.config")


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    raw = _env(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r; using %d", name, raw, default)
        return default


@dataclass(slots=True)
class PipelineConfig:
    """Secrets and endpoints, read from the environment when instantiated."""

    newsapi_key: str = field(default_factory=lambda: _env("NEWSAPI_KEY"))
    apitube_key: str = field(default_factory=lambda: _env("APITUBE_API_KEY"))
    cloudinary_cloud_name: str = field(default_factory=lambda: _env("CLOUDINARY_CLOUD_NAME"))
    cloudinary_upload_preset: str = field(default_factory=lambda: _env("CLOUDINARY_UPLOAD_PRESET"))
    task_webhook_url: str = field(default_factory=lambda: _env("TASK_WEBHOOK_URL"))
    task_webhook_token: str = field(default_factory=lambda: _env("TASK_WEBHOOK_TOKEN"))
    status_webhook_url: str = field(default_factory=lambda: _env("STATUS_WEBHOOK_URL"))
    final_bundle_webhook_url: str = field(default_factory=lambda: _env("FINAL_BUNDLE_WEBHOOK_URL"))
    app_password: str = field(default_factory=lambda: _env("APP_PASSWORD"))
    lookback_days: int = field(default_factory=lambda: _env_int("NEWS_LOOKBACK_DAYS", 2))
    http_timeout: int = field(default_factory=lambda: _env_int("HTTP_TIMEOUT", 30))
