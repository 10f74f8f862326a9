from __future__ import annotations

import json
import os
from typing import Any, Dict

import requests

from .base import AIClient


class OllamaClient(AIClient):
    """HTTP client for Ollama's generate API.

    Ollama has no Gemini-style schema support, so the schema is appended to
    the prompt and the response is forced to JSON.

    Environment:
      - OLLAMA_HOST (default: http://localhost:11434)
      - OLLAMA_MODEL (default: llama3.1:8b-instruct)
    """

    def __init__(self, *, timeout: int = 300) -> None:
        self.host = os.environ.get("OLLAMA_HOST", "http://localhost:11434").rstrip("/")
        self.model = os.environ.get("OLLAMA_MODEL", "llama3.1:8b-instruct")
        self.timeout = timeout

    def _generate(self, prompt: str, *, temperature: float = 0.2) -> str:
        url = f"{self.host}/api/generate"
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "format": "json",
            "options": {"temperature": temperature},
        }
        resp = requests.post(url, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        data = resp.json()
        # Ollama returns {'response': '...'}
        return data.get("response", "").strip()

    def generate_json(self, prompt: str, *, schema: Dict[str, Any]) -> str:
        prompt = (
            f"{prompt}\n\nRespond with JSON only, matching this schema:\n"
            f"{json.dumps(schema, ensure_ascii=False)}\n"
        )
        return self._generate(prompt)
