from __future__ import annotations

import io
import json
from typing import Any, Dict, List, Optional

import pytest
import requests
from PIL import Image

from dispatch_agent.models import Article, Branding, SlotSpec, TaskResult, Topic
from dispatch_agent.utils.config_loader import PipelineDefinition


@pytest.fixture(autouse=True)
def _no_ai_retries(monkeypatch):
    monkeypatch.setenv("AI_RETRIES", "0")


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = "", content: bytes = b"") -> None:
        self.status_code = status_code
        self._json = json_data
        self.text = text or (json.dumps(json_data) if json_data is not None else "")
        self.content = content

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("no json")
        return self._json

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeAI:
    """Answers translation and selection prompts with canned text or errors."""

    def __init__(self, *, translation: Any = "[]", selection: Any = "[]") -> None:
        self.translation = translation
        self.selection = selection
        self.calls: List[str] = []
        self.schemas: List[Dict[str, Any]] = []

    def generate_json(self, prompt: str, *, schema: Dict[str, Any]) -> str:
        props = schema["items"]["properties"]
        kind = "translation" if "originalId" in props else "selection"
        self.calls.append(kind)
        self.schemas.append(schema)
        answer = self.translation if kind == "translation" else self.selection
        if isinstance(answer, Exception):
            raise answer
        if isinstance(answer, (list, dict)):
            return json.dumps(answer)
        return answer


class FakeGenerator:
    def __init__(self, *, fail: Optional[Exception] = None) -> None:
        self.fail = fail
        self.prompts: List[str] = []

    def generate(self, prompt: str) -> bytes:
        self.prompts.append(prompt)
        if self.fail is not None:
            raise self.fail
        return png_bytes((40, 120, 200), size=(64, 48))


class FakeUploader:
    def __init__(self, *, fail_for: tuple = ()) -> None:
        self.fail_for = fail_for
        self.uploads: List[str] = []

    def upload(self, data: bytes, *, public_id: str) -> str:
        if any(public_id.startswith(slot_id) for slot_id in self.fail_for):
            raise RuntimeError("Cloudinary upload failed (500): boom")
        assert data[:2] == b"\xff\xd8"  # JPEG
        self.uploads.append(public_id)
        return f"https://img.test/{public_id}.jpg"


class FakeWebhooks:
    def __init__(self, *, bundle_error: Optional[Exception] = None) -> None:
        self.tasks: List[dict] = []
        self.bundles: List[List[TaskResult]] = []
        self.bundle_error = bundle_error

    def send_task(self, payload: dict) -> None:
        self.tasks.append(payload)

    def send_final_bundle(self, results) -> bool:
        self.bundles.append(list(results))
        if self.bundle_error is not None:
            raise self.bundle_error
        return bool(results)


class FakeGateway:
    def __init__(self, pool: List[Article] | Exception) -> None:
        self.pool = pool
        self.calls = 0

    def gather(self, topics) -> List[Article]:
        self.calls += 1
        if isinstance(self.pool, Exception):
            raise self.pool
        return list(self.pool)


def png_bytes(color=(200, 30, 30), size=(80, 60)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


def make_article(i: int, *, image_url: Optional[str] = "https://img.src/ok.png", **kw) -> Article:
    defaults = dict(
        title=f"Title {i}",
        link=f"https://news.test/{i}",
        published_at="2026-10-16T08:00:00+00:00",
        source_name=f"Source {i}",
        image_url=image_url,
        description=f"Description {i}",
        content=f"Content {i}",
    )
    defaults.update(kw)
    return Article(**defaults)


def make_analysis(index: Any, category: str, headline: str = "Budget Lifts Growth Forecast") -> dict:
    return {
        "originalArticleId": index,
        "category": category,
        "headline": headline,
        "highlightPhrases": ["Growth Forecast"],
        "imagePrompt": "a rising line chart over a city skyline at dawn",
        "caption": "A short caption #news",
        "sourceName": "The Daily Test",
    }


def small_branding() -> Branding:
    return Branding(width=216, height=270, image_height=151)


def make_definition(slots: List[tuple], topics: Optional[List[Topic]] = None) -> PipelineDefinition:
    return PipelineDefinition(
        topics=topics or [],
        slots=[SlotSpec(id=sid, name=name, category=cat) for sid, name, cat in slots],
        branding=small_branding(),
    )


@pytest.fixture
def fake_response():
    return FakeResponse
