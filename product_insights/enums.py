# product_insights/enums.py
from __future__ import annotations

from enum import Enum
from typing import Optional


class ExtractionStage(str, Enum):
    """Which visual-analysis strategy produced an extraction result"""
    TEXT = "Text"
    LABELS = "Labels"
    OBJECTS = "Objects"
    WEB_ENTITIES = "WebEntities"
    NONE = "None"                 # Sentinel: nothing detected


class DietPreference(str, Enum):
    NONE = "None"
    VEGETARIAN = "Vegetarian"
    VEGAN = "Vegan"
    PALEO = "Paleo"
    KETO = "Keto"
    GLUTEN_FREE = "Gluten-Free"

    @classmethod
    def from_value(cls, raw: object) -> Optional["DietPreference"]:
        """Case-insensitive lookup. Returns None for blank or unknown values."""
        text = str(raw or "").strip().lower()
        if not text:
            return None
        for member in cls:
            if member.value.lower() == text:
                return member
        return None


class KeywordCategory(str, Enum):
    MEDICAL_CONDITION = "medicalCondition"
    NUTRITIONAL_GOAL = "nutritionalGoal"


class RuleCategory(str, Enum):
    DIET = "diet_preference"
    ALLERGIES = "allergies"
    MEDICAL = "medical_condition"
    GOAL = "nutritional_goal"
    ENVIRONMENT = "environmental"


class TipType(str, Enum):
    HEALTH = "health tip"
    FOOD = "food tip"
