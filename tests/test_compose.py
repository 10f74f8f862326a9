import io
from pathlib import Path

from PIL import Image, ImageDraw

from dispatch_agent.imaging import compose as compose_module
from dispatch_agent.imaging.compose import Compositor, center_crop, highlight_mask
from dispatch_agent.models import Branding

from conftest import small_branding


def test_highlight_mask_whole_words_case_and_punctuation_insensitive():
    words = "Padma Bridge, Padmaland and the padma bridge toll".split()
    mask = highlight_mask(words, ["Padma Bridge"])
    assert mask == [True, True, False, False, False, True, True, False]


def test_highlight_mask_ignores_empty_phrases():
    assert highlight_mask(["Budget", "passes"], ["", "  ", "!!"]) == [False, False]


def test_center_crop_matches_target_size():
    wide = Image.new("RGB", (400, 100), (1, 2, 3))
    tall = Image.new("RGB", (100, 400), (1, 2, 3))
    assert center_crop(wide, 108, 76).size == (108, 76)
    assert center_crop(tall, 108, 76).size == (108, 76)


def test_compose_produces_jpeg_of_canvas_size():
    comp = Compositor(small_branding())
    data = comp.compose(Image.new("RGB", (300, 200), (10, 200, 10)), "Budget Lifts Growth Forecast", ["Growth"])

    out = Image.open(io.BytesIO(data))
    assert out.format == "JPEG"
    assert out.size == (216, 270)


def test_render_default_canvas_is_portrait_post():
    img = Compositor(Branding()).render(Image.new("RGB", (640, 480)), "Dhaka Metro Rail Extends Hours")
    assert img.size == (1080, 1350)
    assert img.mode == "RGB"


def test_picture_area_keeps_source_colour():
    branding = small_branding()
    img = Compositor(branding).render(Image.new("RGB", (300, 200), (0, 0, 255)), "Headline")
    r, g, b = img.getpixel((branding.width // 2, branding.image_height // 2))
    assert b > 200 and r < 40 and g < 40


def test_assets_are_loaded_once_and_cached():
    calls = []

    def asset_loader(url, mode="RGB"):
        calls.append((url, mode))
        return Image.new("RGBA", (50, 20), (255, 255, 255, 128))

    branding = small_branding()
    branding.logo_url = "https://assets.test/logo.png"
    branding.overlay_url = "https://assets.test/overlay.png"
    comp = Compositor(branding, asset_loader=asset_loader)

    comp.render(Image.new("RGB", (100, 100)), "One")
    comp.render(Image.new("RGB", (100, 100)), "Two")

    assert sorted(calls) == [
        ("https://assets.test/logo.png", "RGBA"),
        ("https://assets.test/overlay.png", "RGBA"),
    ]


def test_font_candidates_exist_outside_the_package():
    package_dir = Path(compose_module.__file__).resolve().parents[1]
    for path in compose_module._FONT_CANDIDATES:
        assert package_dir not in path.parents


def test_get_font_always_returns_usable_font():
    font = compose_module._get_font(40)
    draw = ImageDraw.Draw(Image.new("RGB", (10, 10)))
    assert draw.textlength("Dhaka", font=font) > 0
