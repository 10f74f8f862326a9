from datetime import date

import pytest

from dispatch_agent.fetchers import apitube, newsapi
from dispatch_agent.fetchers.apitube import fetch_apitube_articles, map_apitube_article
from dispatch_agent.fetchers.base import ProviderError, since_date
from dispatch_agent.fetchers.newsapi import fetch_newsapi_articles, map_newsapi_article
from dispatch_agent.models import ProviderQuery


def test_since_date_is_lookback_days_ago():
    assert since_date(2, today=date(2026, 10, 17)) == "2026-10-15"


def test_map_newsapi_article():
    art = map_newsapi_article(
        {
            "source": {"id": None, "name": "The Daily Star"},
            "title": "Padma  Bridge toll  revenue hits record",
            "url": "https://example.com/padma",
            "urlToImage": "https://example.com/padma.jpg",
            "publishedAt": "2026-10-16T08:00:00Z",
            "description": "<p>Toll revenue</p>",
            "content": "Toll revenue crossed a record\u2026 [+1200 chars]",
        }
    )
    assert art.title == "Padma Bridge toll revenue hits record"
    assert art.link == "https://example.com/padma"
    assert art.source_name == "The Daily Star"
    assert art.image_url == "https://example.com/padma.jpg"
    assert art.published_at == "2026-10-16T08:00:00+00:00"
    assert art.description == "Toll revenue"
    assert art.content == "Toll revenue crossed a record"


def test_map_newsapi_article_without_url_is_skipped():
    assert map_newsapi_article({"title": "No link"}) is None


def test_map_newsapi_falls_back_to_description_for_content():
    art = map_newsapi_article({"url": "https://x.test/1", "description": "Only a summary", "content": None})
    assert art.content == "Only a summary"
    assert art.image_url is None


def test_map_apitube_article_nested_fields():
    art = map_apitube_article(
        {
            "href": "https://example.com/rmg",
            "title": "Garment exports rise",
            "summary": "Exports rose 8%",
            "body": "<p>Exports rose 8% in September.</p>",
            "image": {"url": "https://example.com/rmg.jpg"},
            "source": {"domain": "tbsnews.net"},
            "published_at": "2026-10-16 09:30:00",
        }
    )
    assert art.link == "https://example.com/rmg"
    assert art.source_name == "tbsnews.net"
    assert art.image_url == "https://example.com/rmg.jpg"
    assert art.description == "Exports rose 8%"
    assert art.content == "Exports rose 8% in September."
    assert art.published_at == "2026-10-16T09:30:00"


def test_map_apitube_article_without_url_is_skipped():
    assert map_apitube_article({"title": "x", "image": "not-a-mapping"}) is None


def test_fetch_newsapi_sets_from_only_for_everything(monkeypatch, fake_response):
    seen = []

    def fake_get(url, params, headers, timeout):
        seen.append((url, params, headers))
        return fake_response(json_data={"status": "ok", "articles": [{"url": "https://a.test/1", "title": "A"}]})

    monkeypatch.setattr(newsapi.requests, "get", fake_get)
    everything = ProviderQuery(endpoint="everything", params={"q": "Bangladesh"})
    headlines = ProviderQuery(endpoint="top-headlines", params={"category": "general"})

    assert len(fetch_newsapi_articles(everything, api_key="k", since="2026-10-15")) == 1
    fetch_newsapi_articles(headlines, api_key="k", since="2026-10-15")

    assert seen[0][0].endswith("/everything")
    assert seen[0][1]["from"] == "2026-10-15"
    assert seen[0][2]["X-Api-Key"] == "k"
    assert "from" not in seen[1][1]


def test_fetch_newsapi_error_status(monkeypatch, fake_response):
    monkeypatch.setattr(
        newsapi.requests,
        "get",
        lambda *a, **k: fake_response(json_data={"status": "error", "message": "apiKeyInvalid"}),
    )
    with pytest.raises(ProviderError, match="apiKeyInvalid"):
        fetch_newsapi_articles(ProviderQuery(endpoint="everything"), api_key="bad")


def test_fetch_apitube_accepts_data_key(monkeypatch, fake_response):
    seen = {}

    def fake_get(url, params, headers, timeout):
        seen.update(url=url, params=params, headers=headers)
        return fake_response(json_data={"data": [{"url": "https://b.test/1", "title": "B"}]})

    monkeypatch.setattr(apitube.requests, "get", fake_get)
    arts = fetch_apitube_articles(
        ProviderQuery(endpoint="everything", params={"language.code": "bn"}), api_key="t", since="2026-10-15"
    )
    assert [a.link for a in arts] == ["https://b.test/1"]
    assert seen["params"]["published_at.start"] == "2026-10-15"
    assert seen["headers"]["X-API-Key"] == "t"


def test_fetch_apitube_reports_api_errors(monkeypatch, fake_response):
    monkeypatch.setattr(
        apitube.requests,
        "get",
        lambda *a, **k: fake_response(json_data={"status": "error", "errors": [{"message": "quota exceeded"}]}),
    )
    with pytest.raises(ProviderError, match="quota exceeded"):
        fetch_apitube_articles(ProviderQuery(endpoint="everything"), api_key="t")


def test_fetch_http_error_raises(monkeypatch, fake_response):
    import requests

    monkeypatch.setattr(newsapi.requests, "get", lambda *a, **k: fake_response(status_code=429, text="rate limited"))
    with pytest.raises(requests.HTTPError):
        fetch_newsapi_articles(ProviderQuery(endpoint="everything"), api_key="k")
