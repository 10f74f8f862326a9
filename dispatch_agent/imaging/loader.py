from __future__ import annotations

import io

import requests
from PIL import Image

from ..utils.logging import get_logger

logger = get_logger("dd.imaging.loader")

_IMAGE_HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; DispatchAgent/1.0)"}


def decode_image(data: bytes) -> Image.Image:
    """Decode image bytes into an RGB Pillow image."""
    if not data:
        raise ValueError("Empty image data")
    img = Image.open(io.BytesIO(data))
    img.load()
    return img.convert("RGB")


def fetch_image_bytes(url: str, *, timeout: int = 20) -> bytes:
    resp = requests.get(url, timeout=timeout, headers=_IMAGE_HEADERS)
    resp.raise_for_status()
    return resp.content


def load_image(url: str, *, timeout: int = 20, mode: str = "RGB") -> Image.Image:
    """Download and decode an image. ``mode='RGBA'`` keeps transparency for logos and overlays."""
    logger.debug("Loading image %s", url[:120])
    data = fetch_image_bytes(url, timeout=timeout)
    if mode == "RGB":
        return decode_image(data)
    img = Image.open(io.BytesIO(data))
    img.load()
    return img.convert(mode)
