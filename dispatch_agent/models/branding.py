from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(slots=True)
class Branding:
    brand_text: str = "Dhaka Dispatch"
    logo_url: Optional[str] = None
    overlay_url: Optional[str] = None
    accent_color: Tuple[int, int, int] = (236, 72, 153)
    text_color: Tuple[int, int, int] = (255, 255, 255)
    panel_color: Tuple[int, int, int] = (17, 17, 17)
    width: int = 1080
    height: int = 1350
    image_height: int = 756
