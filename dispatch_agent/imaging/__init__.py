"""Image acquisition, generation and branded composition."""

from .acquire import ImageSource
from .compose import Compositor
from .generator import ImageGenerationError, ImageGenerator
from .loader import decode_image, load_image

__all__ = [
    "Compositor",
    "ImageGenerationError",
    "ImageGenerator",
    "ImageSource",
    "decode_image",
    "load_image",
]
