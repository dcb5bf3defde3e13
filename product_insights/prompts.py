"""
Prompt templates.

Every template asks for strict JSON with English keys; values are localized to
the user's preferred language where the endpoint supports it.
"""

from __future__ import annotations

from .models import ExtractionResult, UserProfile

NO_MEDICAL_CONDITION = "No medical conditions provided"
NO_NUTRITIONAL_GOAL = "No nutritional goals provided"
MAX_PROFILE_KEYWORDS = 10

_LANGUAGE_FOOTER = (
    "Ensure the **values in the JSON** are generated in **{language}**, while the "
    "**keys remain in English**. If no language is provided, default to English."
)

QUERY_KEYWORDS_TEMPLATE = """
Extract only the most relevant search keywords from this user query: "{query}".
Keywords may be product categories, product types, features, or close synonyms.

Response format:
{{
  "keywords": ["keyword1", "keyword2", "keyword3"]
}}

Return only the JSON object above. No explanations, summaries or extra text.
"""

PROFILE_KEYWORDS_TEMPLATE = """
Extract meaningful keywords from these user preferences about medical conditions and nutritional goals:
Medical Condition: "{medical_condition}"
Nutritional Goal: "{nutritional_goal}"

Use short canonical keywords for medical conditions (e.g. "Diabetic", "Hypertension", "Gluten-Free")
and for nutritional goals (e.g. "Weight loss", "Muscle gain").

Response format:
{{
  "medicalCondition": ["keyword1"],
  "nutritionalGoal": ["keyword1"]
}}

Use an empty array for a category with nothing to extract. Return only the JSON object.
"""

PROFILE_SEARCH_KEYWORDS_TEMPLATE = """
Based on the following user profile, generate search keywords describing food preferences,
snacks, diet categories and related product categories.

Personal Info:
Diet Preference: {diet}
Allergies: {allergies}
Medical Condition: {medical_condition}
Nutritional Goal: {nutritional_goal}
Preferred Products: {product_interests}

The keywords are matched against product name, category and type in a catalog, so prefer
product categories, types, features and synonyms. Give preference to Preferred Products if any.
Return at most {max_keywords} keywords.

Response format:
{{
  "keywords": ["keyword1", "keyword2", "keyword3"]
}}

Return only the JSON object above. No explanations, summaries or extra text.
"""

INSIGHTS_TEMPLATE = """
Based on the following user profile, generate at least 5 personalized health or food consumption tips:

- Diet Preference: {diet}
- Medical Condition: {medical_condition}
- Nutritional Goal: {nutritional_goal}
- Environmentally Conscious: {eco}

Each tip must fit the user's diet preference, medical condition and nutritional goal.
Mark each tip as a "health tip" or a "food tip" depending on its content.

Return strictly a JSON array of tips, with no text before or after it:

[
  {{
    "title": "Personalized Health Tip or Food Tip Title",
    "description": "Description of the tip (3-4 lines)",
    "type": "health tip" or "food tip"
  }},
  ...
]

{footer}
"""

IMAGE_ANALYSIS_TEMPLATE = """
I have extracted the following text from a product label: "{detected_text}".
Personal information (JSON) provided by the user for personalization:
{profile_json}

The user prefers the response in **{language}**. The **entire response must be in {language}** for all values,
while the JSON keys stay in English.

### Part 1: Nutritional Information With Allowed-Value Comparison (food products)
1. Extract any nutritional details present, whatever their layout (tables, bullet points, free text).
2. Compare each value with standard daily recommended or allowable values (FDA, WHO, ...).
3. Flag values above the limit and explain the side effects of overconsumption.
4. Give reference links for the allowed values.
5. If no nutritional information is present, return an empty nutritionalInfo array.

### Part 2: Ingredient Analysis (food products)
1. Extract and analyze ingredients, including ones hidden behind scientific or chemical names.
2. Give the common name for uncommon ingredient names where possible.
3. Give per-ingredient nutritional data (calories, proteins, carbs, fats, sugars).
4. List side effects or health risks, taking the user's personal info into account.
5. Give reference links for further reading.
6. If no ingredients are detected, return an empty ingredients array.

### Part 3: Product Metadata and Fallback (all products)
1. Extract product title, category and manufacturer when available.
2. For non-food products, infer a suitable title and category (electronics, cosmetics, apparel, ...).
3. Use the image context or text patterns to infer product type and general use.
4. Without nutritional or ingredient data, return empty arrays and still fill productTitle, category and manufacturer.
5. For non-food products, state in summary.message that the image has insufficient nutritional information.

### Part 4: Summary and Personalized Recommendation (all products)
1. Summarize the product considering the user's diet, health conditions and environmental preferences.
2. For non-food products, summarize from the text or image context.
3. Recommend based on general use, safety or other relevant features.
4. List key insights (safety, usability, durability, eco-friendliness, materials).
5. Give an overall assessment: good for consumption, consume in moderation, or not recommended.
6. Allergy and sensitivity detection: look at ingredient interactions, alert on allergens relevant to the user,
   and suggest safer alternatives.
7. Put a short context message in summary.message, or explain that there is not enough information.

### Expected JSON Structure:
{{
  "productTitle": "Product Title (if found else generated suitable one)",
  "category": "Product Category (if inferred else generated suitable one)",
  "manufacturer": "Manufacturer (if found else N/A)",
  "nutritionalInfo": [
    {{
      "nutrient": "Nutrient Name",
      "per100g": "Value per 100g or null",
      "perServing": "Value per serving or null",
      "%RDA": "RDA percentage or null",
      "allowedValue": "Allowed value from reputable source",
      "exceedsAllowed": true,
      "sideEffects": ["Side effect 1", "Side effect 2"],
      "referenceLinks": ["URL1", "URL2"],
      "otherColumns": {{
        "anyColumnName": "any value as it appears in the image"
      }}
    }}
  ],
  "ingredients": [
    {{
      "name": "Ingredient Name",
      "commonName": "Common Ingredient Name (if applicable)",
      "subIngredients": ["Sub-Ingredient 1", "Sub-Ingredient 2"],
      "nutritionalData": {{
        "calories": "X kcal",
        "sugar": "Y g",
        "proteins": "Z g",
        "carbs": "A g",
        "fats": "B g"
      }},
      "sideEffects": ["Side effect 1", "Side effect 2"],
      "externalSources": ["Source 1", "Source 2"]
    }}
  ],
  "summary": {{
    "overallAssessment": "Good for consumption / Consume in moderation / Not recommended",
    "keyInsights": ["Insight 1", "Insight 2"],
    "recommendation": "Free-text recommendation",
    "ingredientAllergyDetection": {{
      "hasAllergiesOrSensitivities": false,
      "alerts": ["Allergen 1", "Allergen 2"],
      "safeAlternatives": ["Alternative Product 1", "Alternative Product 2"]
    }},
    "message": "Message when no valid nutritional or ingredient data is found"
  }}
}}

Use empty arrays for missing lists; never null and never omit a key.

{footer}
"""


def _or(value: str, default: str) -> str:
    return value if value and value.strip() else default


def build_query_keywords_prompt(query: str) -> str:
    return QUERY_KEYWORDS_TEMPLATE.format(query=query.strip())


def build_profile_keywords_prompt(profile: UserProfile) -> str:
    return PROFILE_KEYWORDS_TEMPLATE.format(
        medical_condition=_or(profile.medical_condition, NO_MEDICAL_CONDITION),
        nutritional_goal=_or(profile.nutritional_goal, NO_NUTRITIONAL_GOAL),
    )


def build_profile_search_keywords_prompt(profile: UserProfile) -> str:
    return PROFILE_SEARCH_KEYWORDS_TEMPLATE.format(
        diet=_or(str(profile.raw.get("dietPreference") or ""), "N/A"),
        allergies=_or(profile.allergies, "N/A"),
        medical_condition=_or(profile.medical_condition, "N/A"),
        nutritional_goal=_or(profile.nutritional_goal, "N/A"),
        product_interests=_or(profile.product_interests, "N/A"),
        max_keywords=MAX_PROFILE_KEYWORDS,
    )


def build_insights_prompt(profile: UserProfile) -> str:
    return INSIGHTS_TEMPLATE.format(
        diet=profile.diet_preference.value if profile.diet_preference else _or(
            str(profile.raw.get("dietPreference") or ""), "None"),
        medical_condition=_or(profile.medical_condition, "None"),
        nutritional_goal=_or(profile.nutritional_goal, "None"),
        eco="Yes" if profile.environmentally_conscious else "No",
        footer=_LANGUAGE_FOOTER.format(language=profile.preferred_language),
    )


def build_image_analysis_prompt(extraction: ExtractionResult, profile: UserProfile) -> str:
    return IMAGE_ANALYSIS_TEMPLATE.format(
        detected_text=extraction.content,
        profile_json=profile.to_prompt_json(),
        language=profile.preferred_language,
        footer=_LANGUAGE_FOOTER.format(language=profile.preferred_language),
    )
