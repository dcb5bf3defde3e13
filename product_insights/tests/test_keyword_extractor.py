from __future__ import annotations

import pytest

from product_insights.enums import KeywordCategory
from product_insights.errors import MalformedOutputError
from product_insights.keyword_extractor import (
    KeywordExtractor,
    parse_keywords_payload,
    parse_profile_keywords_payload,
)
from product_insights.models import UserProfile
from product_insights.utils.helpers import strip_markdown


def test_query_keywords_parsed_from_fenced_output(make_llm):
    llm = make_llm('```json\n{"keywords": ["granola", "oats", "granola"]}\n```')
    keywords = KeywordExtractor(llm).extract_query_keywords("healthy granola")

    assert keywords == ["granola", "oats"]
    assert 'healthy granola' in llm._client.calls[0]["contents"]


def test_query_keywords_malformed_output_raises_with_raw_text(make_llm):
    llm = make_llm("Sure! Here are some keywords: oats")

    with pytest.raises(MalformedOutputError) as excinfo:
        KeywordExtractor(llm).extract_query_keywords("oats")
    assert excinfo.value.raw_text == "Sure! Here are some keywords: oats"


def test_profile_keywords_strip_markdown_before_parsing(make_llm):
    llm = make_llm(
        '## Keywords\n**{"medicalCondition": ["Diabetic"], "nutritionalGoal": ["Weight loss"]}**'
    )
    profile = UserProfile.from_payload({"medicalCondition": "type 2 diabetes", "nutritionalGoal": "lose weight"})

    # "## Keywords" leaves a non-JSON prefix, so this output is still malformed
    with pytest.raises(MalformedOutputError):
        KeywordExtractor(llm).extract_profile_keywords(profile)

    llm = make_llm('**{"medicalCondition": ["Diabetic"], "nutritionalGoal": ["Weight loss"]}**')
    keyword_set = KeywordExtractor(llm).extract_profile_keywords(profile)
    assert keyword_set.get(KeywordCategory.MEDICAL_CONDITION) == ["Diabetic"]
    assert keyword_set.get(KeywordCategory.NUTRITIONAL_GOAL) == ["Weight loss"]


def test_profile_prompt_uses_defaults_for_blank_fields(make_llm):
    llm = make_llm('{"medicalCondition": [], "nutritionalGoal": []}')
    keyword_set = KeywordExtractor(llm).extract_profile_keywords(UserProfile.from_payload({}))

    prompt = llm._client.calls[0]["contents"]
    assert "No medical conditions provided" in prompt
    assert "No nutritional goals provided" in prompt
    assert not keyword_set


def test_profile_search_keywords_truncated_to_ten(make_llm):
    words = [f"kw{i}" for i in range(14)]
    llm = make_llm('{"keywords": [%s]}' % ", ".join(f'"{w}"' for w in words))
    profile = UserProfile.from_payload({"productInterests": "snacks"})

    assert KeywordExtractor(llm).extract_profile_search_keywords(profile) == words[:10]


def test_profile_keywords_keep_values_mentioning_section_labels(make_llm):
    llm = make_llm(
        '{"medicalCondition": ["Diabetic"], "nutritionalGoal": ["Weight loss"], '
        '"note": "Medical Conditions: none"}'
    )
    profile = UserProfile.from_payload({"medicalCondition": "diabetes", "nutritionalGoal": "lose weight"})

    keyword_set = KeywordExtractor(llm).extract_profile_keywords(profile)
    assert keyword_set.get(KeywordCategory.MEDICAL_CONDITION) == ["Diabetic"]
    assert keyword_set.get(KeywordCategory.NUTRITIONAL_GOAL) == ["Weight loss"]


def test_profile_keywords_drop_leading_section_label_lines(make_llm):
    llm = make_llm(
        'Medical Conditions: Diabetic\n'
        '  Nutritional Goals: Weight loss\n'
        '{"medicalCondition": ["Diabetic"], "nutritionalGoal": ["Weight loss"]}'
    )
    profile = UserProfile.from_payload({"medicalCondition": "diabetes", "nutritionalGoal": "lose weight"})

    keyword_set = KeywordExtractor(llm).extract_profile_keywords(profile)
    assert keyword_set.get(KeywordCategory.MEDICAL_CONDITION) == ["Diabetic"]


@pytest.mark.parametrize("diet", ["Pescatarian", "Lactose-free", "Vegan"])
def test_profile_search_prompt_passes_diet_through(make_llm, diet: str):
    llm = make_llm('{"keywords": ["fish"]}')
    profile = UserProfile.from_payload({"dietPreference": diet})

    KeywordExtractor(llm).extract_profile_search_keywords(profile)
    assert f"Diet Preference: {diet}" in llm._client.calls[0]["contents"]


def test_profile_search_prompt_blank_diet_is_na(make_llm):
    llm = make_llm('{"keywords": ["snacks"]}')
    KeywordExtractor(llm).extract_profile_search_keywords(UserProfile.from_payload({"productInterests": "snacks"}))
    assert "Diet Preference: N/A" in llm._client.calls[0]["contents"]


def test_parse_profile_keywords_accepts_aliases_and_strings():
    keyword_set = parse_profile_keywords_payload(
        '{"medicalConditions": "Hypertension", "nutritional_goal": ["Muscle gain", " "], "other": ["x"]}'
    )
    assert keyword_set.to_dict() == {
        "medicalCondition": ["Hypertension"],
        "nutritionalGoal": ["Muscle gain"],
    }


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        '["a", "b"]',
        '{"keywords": "oats"}',
    ],
)
def test_parse_keywords_payload_rejects_bad_shapes(text: str):
    with pytest.raises(MalformedOutputError):
        parse_keywords_payload(text)


def test_parse_keywords_payload_missing_key_is_empty():
    assert parse_keywords_payload("{}") == []


@pytest.mark.parametrize(
    "raw,expected",
    [
        ('{"note": "Medical Conditions: none"}', '{"note": "Medical Conditions: none"}'),
        ("Medical Conditions: Diabetic\n{}", "{}"),
        ("{}\n  Nutritional Goals: Weight loss", "{}"),
        ("**{}**", "{}"),
    ],
)
def test_strip_markdown_only_drops_label_lines(raw: str, expected: str):
    assert strip_markdown(raw) == expected
