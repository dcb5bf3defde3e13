"""
Request-scoped dataclass models.

Everything here is built at the start of a request from the JSON payload
(or a catalog row) and thrown away once the response is sent.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional, Union

from .enums import DietPreference, ExtractionStage, KeywordCategory
from .errors import ValidationError

log = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}

SENTINEL_CONTENT = "No meaningful content could be detected from the image."


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    if isinstance(value, (int, float)):
        return value != 0
    return str(value).strip().lower() in _TRUTHY


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _as_number(value: Any) -> Optional[float]:
    """Numeric catalog fields may be missing, null or junk; all of those are None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


@dataclass
class UserProfile:
    diet_preference: Optional[DietPreference] = None
    medical_condition: str = ""
    nutritional_goal: str = ""
    allergies: str = ""
    environmentally_conscious: bool = False
    preferred_language: str = "English"
    product_interests: str = ""
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_payload(cls, payload: Union[str, Dict[str, Any], None]) -> "UserProfile":
        """Build a profile from a dict or a JSON-encoded string."""
        if payload is None or payload == "":
            payload = {}
        if isinstance(payload, str):
            try:
                payload = json.loads(payload)
            except json.JSONDecodeError:
                raise ValidationError("personalInfo", "Invalid JSON format for personalInfo")
        if not isinstance(payload, dict):
            raise ValidationError("personalInfo", "Invalid JSON format for personalInfo")

        raw_diet = payload.get("dietPreference")
        diet = DietPreference.from_value(raw_diet)
        if raw_diet and diet is None:
            log.warning(f"PROFILE_UNKNOWN_DIET | value={raw_diet!r} | diet rule disabled")
        if diet is DietPreference.NONE:
            diet = None

        return cls(
            diet_preference=diet,
            medical_condition=_as_text(payload.get("medicalCondition")),
            nutritional_goal=_as_text(payload.get("nutritionalGoal")),
            allergies=_as_text(payload.get("allergies")),
            environmentally_conscious=_as_bool(payload.get("environmentallyConscious")),
            preferred_language=_as_text(payload.get("language")) or "English",
            product_interests=_as_text(payload.get("productInterests")),
            raw=dict(payload),
        )

    def require(self, *fields: str) -> None:
        """Raise ValidationError naming the first wire field that is blank."""
        for name in fields:
            value = self.raw.get(name)
            if value is None or (isinstance(value, str) and not value.strip()) or value is False:
                raise ValidationError(name)

    def missing_fields(self, *fields: str) -> List[str]:
        return [f for f in fields if not _as_text(self.raw.get(f))]

    def to_prompt_json(self) -> str:
        return json.dumps(self.raw, ensure_ascii=False)


@dataclass(frozen=True)
class ExtractionResult:
    stage: ExtractionStage
    content: str

    def __post_init__(self) -> None:
        if self.stage is ExtractionStage.NONE:
            if self.content != SENTINEL_CONTENT:
                raise ValueError("stage=None must carry the sentinel content")
        elif not self.content or not self.content.strip():
            raise ValueError(f"stage={self.stage.value} requires non-empty content")

    @classmethod
    def sentinel(cls) -> "ExtractionResult":
        return cls(ExtractionStage.NONE, SENTINEL_CONTENT)

    @property
    def found(self) -> bool:
        return self.stage is not ExtractionStage.NONE


@dataclass
class Product:
    name: str = ""
    category: str = ""
    ingredients: str = ""
    type: str = ""
    sugar: Optional[float] = None
    sodium: Optional[float] = None
    calories: Optional[float] = None
    protein: Optional[float] = None
    carbohydrates: Optional[float] = None
    is_vegan: bool = False
    is_eco_friendly: bool = False
    contains_non_recyclable_materials: bool = False
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "Product":
        """Map a catalog row onto the typed fields. Never raises on missing columns."""
        row = dict(row or {})
        return cls(
            name=_as_text(row.get("name")),
            category=_as_text(row.get("category")),
            ingredients=_as_text(row.get("ingredients")),
            type=_as_text(row.get("type")),
            sugar=_as_number(row.get("sugar")),
            sodium=_as_number(row.get("sodium")),
            calories=_as_number(row.get("calories")),
            protein=_as_number(row.get("protein")),
            carbohydrates=_as_number(row.get("carbohydrates")),
            is_vegan=_as_bool(row.get("is_vegan")),
            is_eco_friendly=_as_bool(row.get("is_eco_friendly")),
            contains_non_recyclable_materials=_as_bool(row.get("contains_non_recyclable_materials")),
            raw=row,
        )

    @property
    def ingredients_lower(self) -> str:
        return self.ingredients.lower()


@dataclass
class KeywordSet:
    """Keywords the model extracted from the profile, bucketed by category."""
    categories: Dict[str, List[str]] = field(default_factory=dict)

    def get(self, category: KeywordCategory) -> List[str]:
        return list(self.categories.get(category.value, []))

    def has(self, category: KeywordCategory) -> bool:
        return bool(self.categories.get(category.value))

    def contains(self, category: KeywordCategory, keyword: str) -> bool:
        wanted = keyword.strip().lower()
        return any(k.strip().lower() == wanted for k in self.categories.get(category.value, []))

    def __bool__(self) -> bool:
        return any(self.categories.values())

    def to_dict(self) -> Dict[str, List[str]]:
        return asdict(self)["categories"]
