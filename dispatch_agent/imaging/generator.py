from __future__ import annotations

import base64
import binascii
import os

import requests

from ..utils.logging import get_logger

logger = get_logger("dd.imaging.generator")

IMAGEN_API_BASE = "https://generativelanguage.googleapis.com/v1beta/models"


class ImageGenerationError(RuntimeError):
    """The image model did not return a usable image."""


class ImageGenerator:
    """Imagen client on the Google AI Studio ``:predict`` endpoint.

    4:3 is the closest supported ratio to the 1080x756 picture area of the
    composed post.

    Environment:
      - GOOGLE_API_KEY (required)
      - GEMINI_IMAGE_MODEL (default: imagen-3.0-generate-002)
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str | None = None,
        aspect_ratio: str = "4:3",
        timeout: int = 120,
    ) -> None:
        self.api_key = api_key or os.environ.get("GOOGLE_API_KEY")
        self.model = model or os.environ.get("GEMINI_IMAGE_MODEL", "imagen-3.0-generate-002")
        self.aspect_ratio = aspect_ratio
        self.timeout = timeout

    def generate(self, prompt: str) -> bytes:
        """Return PNG bytes for ``prompt``."""
        if not self.api_key:
            raise ImageGenerationError("GOOGLE_API_KEY is required for image generation")
        if not prompt or not prompt.strip():
            raise ImageGenerationError("Failed to generate AI image. Empty image prompt.")

        url = f"{IMAGEN_API_BASE}/{self.model}:predict"
        payload = {
            "instances": [{"prompt": prompt}],
            "parameters": {
                "sampleCount": 1,
                "aspectRatio": self.aspect_ratio,
                "outputOptions": {"mimeType": "image/png"},
            },
        }
        try:
            resp = requests.post(url, params={"key": self.api_key}, json=payload, timeout=self.timeout)
            resp.raise_for_status()
            predictions = resp.json().get("predictions") or []
        except (requests.RequestException, ValueError) as exc:
            raise ImageGenerationError(f"Failed to generate AI image. {exc}") from exc

        encoded = next((p.get("bytesBase64Encoded") for p in predictions if p.get("bytesBase64Encoded")), None)
        if not encoded:
            raise ImageGenerationError("Failed to generate AI image. API did not return any generated images.")
        try:
            data = base64.b64decode(encoded)
        except (binascii.Error, ValueError) as exc:
            raise ImageGenerationError(f"Failed to generate AI image. Invalid base64 payload: {exc}") from exc
        logger.info("Generated image (%d bytes) with %s", len(data), self.model)
        return data
