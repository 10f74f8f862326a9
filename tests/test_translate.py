import copy

from dispatch_agent.processors.translate import translate_articles

from conftest import FakeAI, make_article


def _pool():
    return [
        make_article(0, title="পদ্মা সেতু", content="বাংলা বিষয়বস্তু", description="বিবরণ"),
        make_article(1, title="Already English", content="English body", description=None),
    ]


def test_translations_are_applied_in_place():
    pool = _pool()
    ai = FakeAI(
        translation=[
            {"originalId": 0, "translatedTitle": "Padma Bridge", "translatedContent": "Bangla content"},
            {"originalId": 1, "translatedTitle": "Already English", "translatedContent": "English body"},
        ]
    )
    out = translate_articles(pool, ai=ai)

    assert out is pool
    assert pool[0].title == "Padma Bridge"
    assert pool[0].content == "Bangla content"
    assert pool[0].description == "Bangla content"
    # no description to mirror into
    assert pool[1].description is None
    assert ai.calls == ["translation"]


def test_out_of_range_ids_are_ignored():
    pool = _pool()
    before = copy.deepcopy(pool)
    ai = FakeAI(
        translation=[
            {"originalId": 5, "translatedTitle": "x", "translatedContent": "x"},
            {"originalId": -1, "translatedTitle": "y", "translatedContent": "y"},
            {"originalId": True, "translatedTitle": "z", "translatedContent": "z"},
            {"originalId": 1, "translatedTitle": "Renamed", "translatedContent": "Body"},
        ]
    )
    translate_articles(pool, ai=ai)

    assert pool[0] == before[0]
    assert pool[1].title == "Renamed"


def test_model_failure_returns_pool_untouched():
    pool = _pool()
    before = copy.deepcopy(pool)
    out = translate_articles(pool, ai=FakeAI(translation=RuntimeError("503 from model")))
    assert out is pool
    assert pool == before


def test_invalid_json_returns_pool_untouched():
    pool = _pool()
    before = copy.deepcopy(pool)
    translate_articles(pool, ai=FakeAI(translation='[{"originalId": 0, "translatedTitle": "half'))
    assert pool == before


def test_non_array_response_returns_pool_untouched():
    pool = _pool()
    before = copy.deepcopy(pool)
    translate_articles(pool, ai=FakeAI(translation={"originalId": 0}))
    assert pool == before


def test_empty_pool_makes_no_model_call():
    ai = FakeAI()
    assert translate_articles([], ai=ai) == []
    assert ai.calls == []
