from __future__ import annotations

import json

import pytest

from product_insights.enums import ExtractionStage
from product_insights.errors import InvalidImageError, MalformedOutputError, ValidationError
from product_insights.insights import (
    analyze_product_image,
    contains_nutritional_info,
    generate_insights,
    recommend_products,
)
from product_insights.keyword_extractor import KeywordExtractor
from product_insights.models import ExtractionResult, UserProfile
from product_insights.preference_filter import PreferenceFilter

from conftest import FakeCatalog

PROFILE = {
    "dietPreference": "Vegan",
    "medicalCondition": "diabetes",
    "nutritionalGoal": "lose weight",
    "language": "Hindi",
}

TIPS = [
    {"title": "Swap sugar", "description": "Use dates.", "type": "health tip"},
    {"title": "Lentil salad", "description": "High fibre.", "type": "food tip"},
]


def test_generate_insights_returns_parsed_array(make_llm):
    llm = make_llm("```json\n" + json.dumps(TIPS) + "\n```")
    tips = generate_insights(llm, UserProfile.from_payload(PROFILE))

    assert tips == TIPS
    prompt = llm._client.calls[0]["contents"]
    assert "Vegan" in prompt
    assert "**Hindi**" in prompt


@pytest.mark.parametrize("missing", ["dietPreference", "medicalCondition", "nutritionalGoal"])
def test_generate_insights_requires_fields(make_llm, missing):
    payload = {k: v for k, v in PROFILE.items() if k != missing}
    llm = make_llm("[]")

    with pytest.raises(ValidationError) as excinfo:
        generate_insights(llm, UserProfile.from_payload(payload))
    assert excinfo.value.message == f"Missing field: {missing}"
    assert llm._client.calls == []


def test_generate_insights_rejects_non_array(make_llm):
    with pytest.raises(MalformedOutputError):
        generate_insights(make_llm('{"title": "x"}'), UserProfile.from_payload(PROFILE))


def test_analyze_returns_json_report(make_llm):
    report = {"productTitle": "Oat bar", "nutritionalInfo": [], "ingredients": [], "summary": {}}
    llm = make_llm(json.dumps(report))
    extraction = ExtractionResult(ExtractionStage.TEXT, "Ingredients: oats, sugar")

    assert analyze_product_image(llm, extraction, UserProfile.from_payload({"allergies": "milk"})) == report
    prompt = llm._client.calls[0]["contents"]
    assert 'Ingredients: oats, sugar' in prompt
    assert '"allergies": "milk"' in prompt


def test_analyze_returns_raw_text_when_not_json(make_llm):
    llm = make_llm("The product looks like a cereal bar.")
    out = analyze_product_image(llm, ExtractionResult.sentinel(), UserProfile.from_payload(None))
    assert out == "The product looks like a cereal bar."


def test_analyze_invalid_image(make_llm):
    llm = make_llm("Invalid Image: nothing to analyze")
    with pytest.raises(InvalidImageError):
        analyze_product_image(llm, ExtractionResult.sentinel(), UserProfile.from_payload(None))


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Total Sugar 5g", True),
        ("INGREDIENTS: water", True),
        ("This image contains: Laptop, Keyboard", False),
        ("", False),
    ],
)
def test_contains_nutritional_info(text, expected):
    assert contains_nutritional_info(text) is expected


def test_recommend_products_filters_catalog_rows(make_llm):
    llm = make_llm(
        '{"keywords": ["granola"]}',
        '{"medicalCondition": ["Diabetic"], "nutritionalGoal": []}',
    )
    catalog = FakeCatalog(rows=[
        {"name": "Honey granola", "is_vegan": True, "sugar": 12},
        {"name": "Plain granola", "is_vegan": True, "sugar": 2},
        {"name": "Yogurt granola", "is_vegan": False, "sugar": 1},
    ])

    out = recommend_products(
        KeywordExtractor(llm), catalog, PreferenceFilter(), "granola", UserProfile.from_payload(PROFILE),
    )

    assert [r["name"] for r in out] == ["Plain granola"]
    assert catalog.calls == [["granola"]]


def test_recommend_degrades_when_profile_keywords_malformed(make_llm):
    llm = make_llm('{"keywords": ["granola"]}', "Medical Conditions: diabetic")
    catalog = FakeCatalog(rows=[{"name": "Honey granola", "is_vegan": True, "sugar": 12}])

    out = recommend_products(
        KeywordExtractor(llm), catalog, PreferenceFilter(), "granola", UserProfile.from_payload(PROFILE),
    )
    # Medical rule is off without keywords, so the sugary bar survives
    assert [r["name"] for r in out] == ["Honey granola"]


def test_recommend_query_keywords_failure_propagates(make_llm):
    llm = make_llm("no json here")
    catalog = FakeCatalog()

    with pytest.raises(MalformedOutputError):
        recommend_products(KeywordExtractor(llm), catalog, PreferenceFilter(), "x", UserProfile.from_payload({}))
    assert catalog.calls == []


def test_recommend_without_query_keywords_skips_profile_call(make_llm):
    llm = make_llm('{"keywords": []}', '{"medicalCondition": ["Diabetic"], "nutritionalGoal": []}')
    catalog = FakeCatalog(rows=[{"name": "Honey granola"}])

    out = recommend_products(
        KeywordExtractor(llm), catalog, PreferenceFilter(), "???", UserProfile.from_payload(PROFILE),
    )

    assert out == []
    assert len(llm._client.calls) == 1
    assert catalog.calls == []
