# product_insights/preference_filter.py
"""
Preference Filter: per-product suitability against a user profile
──────────────────────────────────────────────────────────────────
Five independent rule categories, evaluated in order, all of which must pass:

1. Diet preference      (Vegetarian/Vegan/Paleo/Keto/Gluten-Free)
2. Allergies            (comma-separated allergens vs ingredients text)
3. Medical condition    (needs profile value AND extracted keywords)
4. Nutritional goal     (needs profile value AND extracted keywords)
5. Environmental        (recyclable + eco-friendly)

Missing data never raises:
• missing text fields are treated as ""
• a missing number passes "must be ≤ X" and fails "must be ≥ X"

Usage:
    pf = PreferenceFilter(FilterThresholds.from_config())
    pf.is_suitable(product, profile, keywords)            # -> bool
    pf.evaluate(product, profile, keywords)               # -> FilterVerdict (rule + reason)
    pf.filter_products(rows, profile, keywords)           # -> rows that passed
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from .config import get_config
from .enums import DietPreference, KeywordCategory, RuleCategory
from .models import KeywordSet, Product, UserProfile
from .utils.helpers import split_csv
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)


@dataclass(frozen=True)
class FilterThresholds:
    keto_max_carbs: float = 10.0
    diabetic_max_sugar: float = 5.0
    hypertension_max_sodium: float = 200.0
    weight_loss_max_calories: float = 300.0
    muscle_gain_min_protein: float = 10.0

    @classmethod
    def from_config(cls, cfg: Any = None) -> "FilterThresholds":
        cfg = cfg or get_config()
        return cls(
            keto_max_carbs=float(cfg.FILTER_KETO_MAX_CARBS),
            diabetic_max_sugar=float(cfg.FILTER_DIABETIC_MAX_SUGAR),
            hypertension_max_sodium=float(cfg.FILTER_HYPERTENSION_MAX_SODIUM),
            weight_loss_max_calories=float(cfg.FILTER_WEIGHT_LOSS_MAX_CALORIES),
            muscle_gain_min_protein=float(cfg.FILTER_MUSCLE_GAIN_MIN_PROTEIN),
        )


@dataclass(frozen=True)
class RuleOutcome:
    passed: bool
    reason: Optional[str] = None


PASS = RuleOutcome(True)


def _fail(reason: str) -> RuleOutcome:
    return RuleOutcome(False, reason)


def _at_most(value: Optional[float], limit: float) -> bool:
    return value is None or value <= limit


def _at_least(value: Optional[float], limit: float) -> bool:
    return value is not None and value >= limit


Rule = Callable[[Product, UserProfile, KeywordSet, FilterThresholds], RuleOutcome]
KeywordCheck = Callable[[Product, FilterThresholds], RuleOutcome]


# ─────────────────────────────────
# 1. DIET
# ─────────────────────────────────

def check_diet(product: Product, profile: UserProfile, keywords: KeywordSet, t: FilterThresholds) -> RuleOutcome:
    diet = profile.diet_preference
    if diet is None:
        return PASS

    if diet in (DietPreference.VEGETARIAN, DietPreference.VEGAN) and not product.is_vegan:
        return _fail(f"{diet.value} requires is_vegan")
    if diet is DietPreference.PALEO and "grains" in product.ingredients_lower:
        return _fail("Paleo excludes grains")
    if diet is DietPreference.KETO and not _at_most(product.carbohydrates, t.keto_max_carbs):
        return _fail(f"Keto carbohydrates {product.carbohydrates} > {t.keto_max_carbs}")
    if diet is DietPreference.GLUTEN_FREE and "gluten" in product.ingredients_lower:
        return _fail("Gluten-Free excludes gluten")
    return PASS


# ─────────────────────────────────
# 2. ALLERGIES
# ─────────────────────────────────

def check_allergies(product: Product, profile: UserProfile, keywords: KeywordSet, t: FilterThresholds) -> RuleOutcome:
    allergens = split_csv(profile.allergies)
    if not allergens:
        return PASS

    ingredients = product.ingredients_lower
    for allergen in allergens:
        if allergen in ingredients:
            return _fail(f"contains allergen '{allergen}'")
    return PASS


# ─────────────────────────────────
# 3. MEDICAL CONDITION
# ─────────────────────────────────

MEDICAL_KEYWORD_CHECKS: Tuple[Tuple[str, KeywordCheck], ...] = (
    ("Diabetic", lambda p, t: PASS if _at_most(p.sugar, t.diabetic_max_sugar)
        else _fail(f"Diabetic sugar {p.sugar} > {t.diabetic_max_sugar}")),
    ("Hypertension", lambda p, t: PASS if _at_most(p.sodium, t.hypertension_max_sodium)
        else _fail(f"Hypertension sodium {p.sodium} > {t.hypertension_max_sodium}")),
    ("Gluten-Free", lambda p, t: _fail("Gluten-Free condition excludes gluten")
        if "gluten" in p.ingredients_lower else PASS),
)


def check_medical(product: Product, profile: UserProfile, keywords: KeywordSet, t: FilterThresholds) -> RuleOutcome:
    if not profile.medical_condition or not keywords.has(KeywordCategory.MEDICAL_CONDITION):
        return PASS

    for keyword, check in MEDICAL_KEYWORD_CHECKS:
        if keywords.contains(KeywordCategory.MEDICAL_CONDITION, keyword):
            outcome = check(product, t)
            if not outcome.passed:
                return outcome
    return PASS


# ─────────────────────────────────
# 4. NUTRITIONAL GOAL
# ─────────────────────────────────

GOAL_KEYWORD_CHECKS: Tuple[Tuple[str, KeywordCheck], ...] = (
    ("Weight loss", lambda p, t: PASS if _at_most(p.calories, t.weight_loss_max_calories)
        else _fail(f"Weight loss calories {p.calories} > {t.weight_loss_max_calories}")),
    ("Muscle gain", lambda p, t: PASS if _at_least(p.protein, t.muscle_gain_min_protein)
        else _fail(f"Muscle gain protein {p.protein} < {t.muscle_gain_min_protein}")),
)


def check_goal(product: Product, profile: UserProfile, keywords: KeywordSet, t: FilterThresholds) -> RuleOutcome:
    if not profile.nutritional_goal or not keywords.has(KeywordCategory.NUTRITIONAL_GOAL):
        return PASS

    for keyword, check in GOAL_KEYWORD_CHECKS:
        if keywords.contains(KeywordCategory.NUTRITIONAL_GOAL, keyword):
            outcome = check(product, t)
            if not outcome.passed:
                return outcome
    return PASS


# ─────────────────────────────────
# 5. ENVIRONMENT
# ─────────────────────────────────

def check_environment(product: Product, profile: UserProfile, keywords: KeywordSet, t: FilterThresholds) -> RuleOutcome:
    if not profile.environmentally_conscious:
        return PASS
    if product.contains_non_recyclable_materials:
        return _fail("contains non-recyclable materials")
    if not product.is_eco_friendly:
        return _fail("not eco-friendly")
    return PASS


RULES: Tuple[Tuple[RuleCategory, Rule], ...] = (
    (RuleCategory.DIET, check_diet),
    (RuleCategory.ALLERGIES, check_allergies),
    (RuleCategory.MEDICAL, check_medical),
    (RuleCategory.GOAL, check_goal),
    (RuleCategory.ENVIRONMENT, check_environment),
)


@dataclass(frozen=True)
class FilterVerdict:
    suitable: bool
    rule: Optional[RuleCategory] = None     # first rule category that failed
    reason: Optional[str] = None


class PreferenceFilter:
    """Stateless apart from its thresholds; safe to share across requests."""

    def __init__(self, thresholds: Optional[FilterThresholds] = None) -> None:
        self.thresholds = thresholds or FilterThresholds()
        log.debug(f"PREFERENCE_FILTER_READY | thresholds={self.thresholds}")

    def evaluate(
        self,
        product: Product,
        profile: UserProfile,
        keywords: Optional[KeywordSet] = None,
    ) -> FilterVerdict:
        keywords = keywords or KeywordSet()
        for category, rule in RULES:
            outcome = rule(product, profile, keywords, self.thresholds)
            if not outcome.passed:
                return FilterVerdict(False, category, outcome.reason)
        return FilterVerdict(True)

    def is_suitable(
        self,
        product: Product,
        profile: UserProfile,
        keywords: Optional[KeywordSet] = None,
    ) -> bool:
        return self.evaluate(product, profile, keywords).suitable

    def filter_products(
        self,
        products: Iterable[Union[Product, Dict[str, Any]]],
        profile: UserProfile,
        keywords: Optional[KeywordSet] = None,
    ) -> List[Dict[str, Any]]:
        """Return the raw rows of suitable products, preserving input order."""
        kept: List[Dict[str, Any]] = []
        rejected_by: Counter = Counter()
        total = 0

        for item in products:
            total += 1
            product = item if isinstance(item, Product) else Product.from_row(item)
            verdict = self.evaluate(product, profile, keywords)
            plog.filter_decision(
                product.name, verdict.suitable,
                verdict.rule.value if verdict.rule else None, verdict.reason,
            )
            if verdict.suitable:
                kept.append(product.raw)
            else:
                rejected_by[verdict.rule.value] += 1

        plog.filter_summary(total, len(kept), dict(rejected_by))
        return kept

