from __future__ import annotations

from typing import Callable, Optional

from PIL import Image

from ..models import Article
from ..utils.logging import get_logger
from .generator import ImageGenerator
from .loader import decode_image, load_image

logger = get_logger("dd.imaging.acquire")

FallbackHook = Callable[[Exception], None]


class ImageSource:
    """Article image first, generated image second."""

    def __init__(
        self,
        *,
        generator: ImageGenerator | None = None,
        loader: Callable[[str], Image.Image] = load_image,
    ) -> None:
        self.generator = generator or ImageGenerator()
        self.loader = loader

    def load_own(self, article: Article) -> Image.Image:
        if not article.image_url:
            raise ValueError("Article has no image_url.")
        return self.loader(article.image_url)

    def generate(self, prompt: str) -> Image.Image:
        return decode_image(self.generator.generate(prompt))

    def acquire(
        self,
        article: Article,
        prompt: str,
        *,
        on_fallback: Optional[FallbackHook] = None,
    ) -> Image.Image:
        """Return a decoded image for the article.

        ``on_fallback`` runs before generation starts, with the reason the
        article's own image was unusable. Generation errors propagate.
        """
        try:
            return self.load_own(article)
        except Exception as exc:  # noqa: BLE001 - any load/decode failure means fallback
            logger.debug("Own image unusable for %s: %s", article.link, exc)
            if on_fallback is not None:
                on_fallback(exc)
        return self.generate(prompt)
