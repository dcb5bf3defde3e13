# product_insights/routes/keywords.py
"""
POST /generateKeywordsByProfile

Request body:
    {"personalInfo": {"dietPreference": ..., "allergies": ..., "productInterests": ...}}

Response (200):
    {"keywords": ["keyword1", ...]}      # at most 10
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..errors import GenerationBlockedError, ValidationError
from ..models import UserProfile
from . import error_response, service

log = logging.getLogger(__name__)
bp = Blueprint("keywords", __name__)


@bp.post("/generateKeywordsByProfile")
def generate_keywords_by_profile():
    body = request.get_json(force=True, silent=True) or {}
    profile = UserProfile.from_payload(body.get("personalInfo"))
    if not profile.raw:
        return error_response("Please provide personal information for generating keywords", 400)

    try:
        keywords = service("keyword_extractor").extract_profile_search_keywords(profile)
    except (ValidationError, GenerationBlockedError):
        raise
    except Exception as e:
        log.error(f"PROFILE_KEYWORDS_ERROR | error={e}", exc_info=True)
        return error_response("Failed to generate keywords", 500)

    return jsonify({"keywords": keywords}), 200
