"""Branded post composition with Pillow.

Layout (default 1080x1350):
- picture centre-cropped into the top ``image_height`` pixels
- optional full-canvas overlay PNG on top of the picture
- accent strip and headline panel below, highlight phrases in accent colour
- optional logo top-left, brand text bottom-right
"""

from __future__ import annotations

import io
import re
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from PIL import Image, ImageDraw, ImageFont

from ..models import Branding
from ..utils.logging import get_logger
from .loader import load_image

logger = get_logger("dd.imaging.compose")

_FONT_CANDIDATES = [
    Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf"),
    Path("/usr/share/fonts/truetype/liberation/LiberationSans-Bold.ttf"),
    Path("/System/Library/Fonts/Helvetica.ttc"),
    Path(r"C:\Windows\Fonts\arialbd.ttf"),
]

_TOKEN_RE = re.compile(r"[^\w]+", re.UNICODE)

Font = ImageFont.FreeTypeFont | ImageFont.ImageFont
AssetLoader = Callable[..., Image.Image]


def _get_font(size: int) -> Font:
    for path in _FONT_CANDIDATES:
        if path.exists():
            try:
                return ImageFont.truetype(str(path), size)
            except OSError:
                continue
    return ImageFont.load_default(size=size)


def _norm_token(word: str) -> str:
    return _TOKEN_RE.sub("", word).lower()


def highlight_mask(words: Sequence[str], phrases: Sequence[str]) -> List[bool]:
    """Mark each headline word that is part of any highlight phrase.

    Matching is on whole words, case- and punctuation-insensitive, so
    "Padma Bridge" highlights "padma bridge," but not "Padmaland".
    """
    tokens = [_norm_token(w) for w in words]
    mask = [False] * len(words)
    for phrase in phrases:
        needle = [t for t in (_norm_token(p) for p in phrase.split()) if t]
        if not needle:
            continue
        n = len(needle)
        for start in range(len(tokens) - n + 1):
            if tokens[start : start + n] == needle:
                for i in range(start, start + n):
                    mask[i] = True
    return mask


def center_crop(image: Image.Image, target_w: int, target_h: int) -> Image.Image:
    """Crop to the target aspect ratio around the centre, then resize."""
    src_w, src_h = image.size
    tgt_ratio = target_w / target_h
    src_ratio = src_w / src_h

    if src_ratio > tgt_ratio:
        new_w = int(src_h * tgt_ratio)
        left = (src_w - new_w) // 2
        image = image.crop((left, 0, left + new_w, src_h))
    else:
        new_h = int(src_w / tgt_ratio)
        top = (src_h - new_h) // 2
        image = image.crop((0, top, src_w, top + new_h))

    return image.resize((target_w, target_h), Image.LANCZOS)


def wrap_words(
    draw: ImageDraw.ImageDraw, words: Sequence[str], font: Font, max_width: int
) -> List[List[int]]:
    """Greedy wrap; returns lines as lists of word indices."""
    space = draw.textlength(" ", font=font)
    lines: List[List[int]] = []
    current: List[int] = []
    width = 0.0
    for i, word in enumerate(words):
        w = draw.textlength(word, font=font)
        needed = w if not current else width + space + w
        if current and needed > max_width:
            lines.append(current)
            current, width = [i], w
        else:
            current.append(i)
            width = needed
    if current:
        lines.append(current)
    return lines


class Compositor:
    def __init__(
        self,
        branding: Branding | None = None,
        *,
        asset_loader: AssetLoader = load_image,
        max_font_size: int = 72,
        min_font_size: int = 30,
    ) -> None:
        self.branding = branding or Branding()
        self.asset_loader = asset_loader
        self.max_font_size = max_font_size
        self.min_font_size = min_font_size
        self._assets: Dict[str, Image.Image] = {}

    def _asset(self, url: Optional[str]) -> Optional[Image.Image]:
        if not url:
            return None
        if url not in self._assets:
            self._assets[url] = self.asset_loader(url, mode="RGBA")
        return self._assets[url]

    def _fit_headline(
        self, draw: ImageDraw.ImageDraw, words: Sequence[str], box_w: int, box_h: int
    ) -> Tuple[Font, List[List[int]], int]:
        size = self.max_font_size
        while True:
            font = _get_font(size)
            line_h = int(size * 1.25)
            lines = wrap_words(draw, words, font, box_w)
            if len(lines) * line_h <= box_h or size <= self.min_font_size:
                return font, lines, line_h
            size -= 4

    def render(self, image: Image.Image, headline: str, highlight_phrases: Sequence[str] = ()) -> Image.Image:
        b = self.branding
        w, h = b.width, b.height
        canvas = Image.new("RGBA", (w, h), b.panel_color + (255,))
        canvas.paste(center_crop(image.convert("RGB"), w, b.image_height), (0, 0))

        overlay = self._asset(b.overlay_url)
        if overlay is not None:
            canvas = Image.alpha_composite(canvas, overlay.resize((w, h), Image.LANCZOS))

        draw = ImageDraw.Draw(canvas)
        margin = int(w * 0.06)
        strip_h = max(6, int(h * 0.008))
        draw.rectangle([0, b.image_height, w, b.image_height + strip_h], fill=b.accent_color + (255,))

        logo = self._asset(b.logo_url)
        if logo is not None:
            logo_w = int(w * 0.16)
            logo_h = max(1, int(logo.height * logo_w / logo.width))
            scaled = logo.resize((logo_w, logo_h), Image.LANCZOS)
            canvas.alpha_composite(scaled, (margin, margin))

        brand_font = _get_font(max(18, w // 40))
        footer_h = int(h * 0.07)
        words = headline.split()
        mask = highlight_mask(words, highlight_phrases)

        box_top = b.image_height + strip_h + int(h * 0.03)
        box_h = h - footer_h - box_top
        font, lines, line_h = self._fit_headline(draw, words, w - 2 * margin, box_h)
        space = draw.textlength(" ", font=font)

        y = box_top
        for line in lines:
            x = float(margin)
            for idx in line:
                color = b.accent_color if mask[idx] else b.text_color
                draw.text((x, y), words[idx], font=font, fill=color + (255,))
                x += draw.textlength(words[idx], font=font) + space
            y += line_h

        if b.brand_text:
            brand_w = draw.textlength(b.brand_text, font=brand_font)
            draw.text(
                (w - margin - brand_w, h - footer_h),
                b.brand_text,
                font=brand_font,
                fill=b.accent_color + (255,),
            )
        return canvas.convert("RGB")

    def compose(self, image: Image.Image, headline: str, highlight_phrases: Sequence[str] = ()) -> bytes:
        """Render the post and encode it as JPEG bytes for upload."""
        final = self.render(image, headline, highlight_phrases)
        buf = io.BytesIO()
        final.save(buf, format="JPEG", quality=92, optimize=True)
        logger.debug("Composed %dx%d post (%d bytes)", final.width, final.height, buf.tell())
        return buf.getvalue()
