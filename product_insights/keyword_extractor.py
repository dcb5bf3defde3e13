"""
Keyword extraction via the generative client.

Three call shapes:
• query keywords          – free-text query → ["kw", ...]
• profile keywords        – medical condition / nutritional goal → KeywordSet
• profile search keywords – whole profile → ["kw", ...] (max 10)

All three share one malformed-output policy: if the cleaned model output does
not parse into the expected shape, MalformedOutputError is raised with the
cleaned text attached. Whether to degrade is up to the caller.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Dict, List

from .enums import KeywordCategory
from .errors import MalformedOutputError
from .llm_service import GenerativeClient
from .models import KeywordSet, UserProfile
from .prompts import (
    MAX_PROFILE_KEYWORDS,
    build_profile_keywords_prompt,
    build_profile_search_keywords_prompt,
    build_query_keywords_prompt,
)
from .utils.helpers import preview, strip_markdown, unique

log = logging.getLogger(__name__)


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise MalformedOutputError(text, f"invalid JSON ({exc.msg})") from exc


def _as_keyword_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    return unique([str(v).strip() for v in value if v is not None and str(v).strip()])


def parse_keywords_payload(text: str) -> List[str]:
    """Parse `{"keywords": [...]}`."""
    data = _parse_json(text)
    if not isinstance(data, dict):
        raise MalformedOutputError(text, "expected a JSON object")
    keywords = data.get("keywords", [])
    if not isinstance(keywords, list):
        raise MalformedOutputError(text, "'keywords' is not a list")
    return _as_keyword_list(keywords)


def _normalize_key(key: str) -> str:
    return re.sub(r"[^a-z]", "", str(key).lower())


# medicalConditions / medical_condition / "Medical Condition" all land on one bucket
_CATEGORY_ALIASES: Dict[str, KeywordCategory] = {
    "medicalcondition": KeywordCategory.MEDICAL_CONDITION,
    "medicalconditions": KeywordCategory.MEDICAL_CONDITION,
    "nutritionalgoal": KeywordCategory.NUTRITIONAL_GOAL,
    "nutritionalgoals": KeywordCategory.NUTRITIONAL_GOAL,
}


def parse_profile_keywords_payload(text: str) -> KeywordSet:
    data = _parse_json(text)
    if not isinstance(data, dict):
        raise MalformedOutputError(text, "expected a JSON object")

    categories: Dict[str, List[str]] = {}
    for key, value in data.items():
        category = _CATEGORY_ALIASES.get(_normalize_key(key))
        if category is None:
            log.debug(f"PROFILE_KEYWORDS_UNKNOWN_KEY | key={key!r}")
            continue
        merged = categories.get(category.value, []) + _as_keyword_list(value)
        categories[category.value] = unique(merged)
    return KeywordSet(categories=categories)


class KeywordExtractor:
    def __init__(self, client: GenerativeClient) -> None:
        self.client = client

    def extract_query_keywords(self, query: str) -> List[str]:
        prompt = build_query_keywords_prompt(query)
        cleaned = self.client.generate(prompt)
        try:
            keywords = parse_keywords_payload(cleaned)
        except MalformedOutputError as exc:
            log.error(f"QUERY_KEYWORDS_MALFORMED | reason={exc.reason} | output={preview(cleaned)} | query={preview(query)}")
            raise
        log.info(f"QUERY_KEYWORDS | count={len(keywords)} | keywords={keywords}")
        return keywords

    def extract_profile_keywords(self, profile: UserProfile) -> KeywordSet:
        prompt = build_profile_keywords_prompt(profile)
        cleaned = strip_markdown(self.client.generate(prompt))
        try:
            keyword_set = parse_profile_keywords_payload(cleaned)
        except MalformedOutputError as exc:
            log.error(f"PROFILE_KEYWORDS_MALFORMED | reason={exc.reason} | output={preview(cleaned)}")
            raise
        log.info(f"PROFILE_KEYWORDS | keywords={keyword_set.to_dict()}")
        return keyword_set

    def extract_profile_search_keywords(self, profile: UserProfile) -> List[str]:
        prompt = build_profile_search_keywords_prompt(profile)
        cleaned = self.client.generate(prompt)
        try:
            keywords = parse_keywords_payload(cleaned)
        except MalformedOutputError as exc:
            log.error(f"PROFILE_SEARCH_KEYWORDS_MALFORMED | reason={exc.reason} | output={preview(cleaned)}")
            raise
        if len(keywords) > MAX_PROFILE_KEYWORDS:
            log.info(f"PROFILE_SEARCH_KEYWORDS_TRUNCATED | got={len(keywords)} | max={MAX_PROFILE_KEYWORDS}")
            keywords = keywords[:MAX_PROFILE_KEYWORDS]
        return keywords
