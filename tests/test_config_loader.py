from pathlib import Path

import pytest

from dispatch_agent.utils.config_loader import ConfigError, load_pipeline_config

REPO_CONFIG = Path(__file__).resolve().parents[1] / "config" / "pipeline.yaml"


def write(tmp_path, text):
    path = tmp_path / "pipeline.yaml"
    path.write_text(text, encoding="utf-8")
    return path


MINIMAL = """
topics:
  - type: nat
    newsapi:
      endpoint: top-headlines
      params: {country: bd, pageSize: 20}
slots:
  - {id: nat_1, name: National, category: nat}
"""


def test_shipped_config_loads():
    definition = load_pipeline_config(REPO_CONFIG)
    assert len(definition.slots) == 6
    assert len(definition.categories) == 5
    assert {t.type for t in definition.topics} == set(definition.categories)
    assert definition.branding.width == 1080


def test_minimal_config_and_param_coercion(tmp_path):
    definition = load_pipeline_config(write(tmp_path, MINIMAL))
    topic = definition.topics[0]
    assert topic.newsapi.params == {"country": "bd", "pageSize": "20"}
    assert topic.apitube is None
    assert definition.slots[0].name == "National"


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_pipeline_config(tmp_path / "nope.yaml")


def test_duplicate_slot_ids(tmp_path):
    text = MINIMAL + "  - {id: nat_1, category: nat}\n"
    with pytest.raises(ConfigError, match="Duplicate slot id"):
        load_pipeline_config(write(tmp_path, text))


def test_slots_required(tmp_path):
    with pytest.raises(ConfigError, match="slots"):
        load_pipeline_config(write(tmp_path, "topics: []\n"))


def test_topic_needs_a_provider_query(tmp_path):
    text = "topics:\n  - type: nat\nslots:\n  - {id: a, category: nat}\n"
    with pytest.raises(ConfigError, match="defines no provider query"):
        load_pipeline_config(write(tmp_path, text))


def test_bad_newsapi_endpoint(tmp_path):
    text = MINIMAL.replace("top-headlines", "sources")
    with pytest.raises(ConfigError, match="Invalid newsapi endpoint"):
        load_pipeline_config(write(tmp_path, text))


def test_branding_overrides(tmp_path):
    text = MINIMAL + (
        "branding:\n"
        "  brand_text: Test Desk\n"
        "  accent_color: '#00ff00'\n"
        "  text_color: [1, 2, 3]\n"
        "  logo_url: https://assets.test/logo.png\n"
    )
    branding = load_pipeline_config(write(tmp_path, text)).branding
    assert branding.brand_text == "Test Desk"
    assert branding.accent_color == (0, 255, 0)
    assert branding.text_color == (1, 2, 3)
    assert branding.logo_url == "https://assets.test/logo.png"


@pytest.mark.parametrize(
    "extra, match",
    [
        ("  accent_color: pink\n", "accent_color"),
        ("  logo_url: not-a-url\n", "Invalid URL"),
        ("  image_height: 5000\n", "image_height"),
    ],
)
def test_branding_validation(tmp_path, extra, match):
    with pytest.raises(ConfigError, match=match):
        load_pipeline_config(write(tmp_path, MINIMAL + "branding:\n" + extra))
