"""
Insight generation on top of the core components.

• generate_insights       – profile → list of health/food tips
• analyze_product_image   – ExtractionResult + profile → analysis report
• recommend_products      – query + profile → filtered catalog rows
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Union

from .enums import TipType
from .errors import InvalidImageError, MalformedOutputError
from .keyword_extractor import KeywordExtractor
from .llm_service import GenerativeClient
from .models import ExtractionResult, KeywordSet, UserProfile
from .preference_filter import PreferenceFilter
from .prompts import build_image_analysis_prompt, build_insights_prompt
from .utils.helpers import preview

log = logging.getLogger(__name__)

INSIGHTS_REQUIRED_FIELDS = ("dietPreference", "medicalCondition", "nutritionalGoal")
RECOMMENDATION_PROFILE_FIELDS = ("dietPreference", "allergies", "medicalCondition", "nutritionalGoal")

NUTRITION_HINTS = ("sugar", "protein", "carbohydrate", "fat", "calories", "ingredient")
INVALID_IMAGE_MARKER = "invalid image"


def contains_nutritional_info(text: str) -> bool:
    """True when the extracted label text mentions any nutrient or ingredient term."""
    lowered = (text or "").lower()
    return any(hint in lowered for hint in NUTRITION_HINTS)


def generate_insights(client: GenerativeClient, profile: UserProfile) -> List[Dict[str, Any]]:
    profile.require(*INSIGHTS_REQUIRED_FIELDS)

    cleaned = client.generate(build_insights_prompt(profile))
    try:
        tips = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        log.error(f"INSIGHTS_MALFORMED | reason={exc.msg} | output={preview(cleaned)}")
        raise MalformedOutputError(cleaned, f"invalid JSON ({exc.msg})") from exc

    if not isinstance(tips, list):
        log.error(f"INSIGHTS_MALFORMED | reason=not an array | output={preview(cleaned)}")
        raise MalformedOutputError(cleaned, "expected a JSON array")

    known = {t.value for t in TipType}
    untyped = sum(1 for tip in tips if not isinstance(tip, dict) or tip.get("type") not in known)
    if untyped:
        # Localized output sometimes translates the type value too
        log.warning(f"INSIGHTS_UNTYPED_TIPS | count={untyped} | of={len(tips)}")

    log.info(f"INSIGHTS_GENERATED | tips={len(tips)} | language={profile.preferred_language}")
    return tips


def analyze_product_image(
    client: GenerativeClient,
    extraction: ExtractionResult,
    profile: UserProfile,
) -> Union[Dict[str, Any], List[Any], str]:
    """Build the analysis report for one extraction.

    Returns the parsed JSON when the model output parses, otherwise the cleaned
    text as-is. Raises InvalidImageError when the model reports the image as unusable.
    """
    log.info(
        f"ANALYZE_START | stage={extraction.stage.value} "
        f"| nutrition_hints={contains_nutritional_info(extraction.content)} "
        f"| language={profile.preferred_language}"
    )

    cleaned = client.generate(build_image_analysis_prompt(extraction, profile))

    if INVALID_IMAGE_MARKER in cleaned.lower():
        log.warning(f"ANALYZE_INVALID_IMAGE | output={preview(cleaned)}")
        raise InvalidImageError(cleaned)

    try:
        report = json.loads(cleaned)
    except json.JSONDecodeError:
        log.warning(f"ANALYZE_NON_JSON | returning raw text | output={preview(cleaned)}")
        return cleaned

    log.info("ANALYZE_DONE | parsed=True")
    return report


def recommend_products(
    extractor: KeywordExtractor,
    catalog: Any,
    preference_filter: PreferenceFilter,
    query: str,
    profile: UserProfile,
) -> List[Dict[str, Any]]:
    """Query keywords → profile keywords → catalog lookup → per-product filter.

    A failed profile-keyword extraction degrades to an empty KeywordSet, which
    turns off the medical and goal rules. A failed query extraction propagates.
    """
    for name in profile.missing_fields(*RECOMMENDATION_PROFILE_FIELDS):
        log.warning(f"RECOMMEND_PROFILE_FIELD_MISSING | field={name}")

    keywords = extractor.extract_query_keywords(query)
    if not keywords:
        log.info("RECOMMEND_NO_KEYWORDS | returning empty result")
        return []

    try:
        profile_keywords = extractor.extract_profile_keywords(profile)
    except MalformedOutputError as exc:
        log.warning(f"RECOMMEND_PROFILE_KEYWORDS_DEGRADED | reason={exc.reason} | medical/goal rules disabled")
        profile_keywords = KeywordSet()

    rows = catalog.search(keywords)
    suitable = preference_filter.filter_products(rows, profile, profile_keywords)
    log.info(f"RECOMMEND_DONE | candidates={len(rows)} | suitable={len(suitable)}")
    return suitable
