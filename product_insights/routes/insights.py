# product_insights/routes/insights.py
"""
POST /insights

Request body:
    {"personalInfo": {...} | "<json string>"}

dietPreference, medicalCondition and nutritionalGoal are required.

Response (200): JSON array of {"title", "description", "type"} tips.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..errors import GenerationBlockedError, ValidationError
from ..insights import generate_insights
from ..models import UserProfile
from . import error_response, service

log = logging.getLogger(__name__)
bp = Blueprint("insights", __name__)


@bp.post("/insights")
def insights():
    body = request.get_json(force=True, silent=True) or {}
    profile = UserProfile.from_payload(body.get("personalInfo"))

    try:
        tips = generate_insights(service("generative_client"), profile)
    except (ValidationError, GenerationBlockedError):
        raise
    except Exception as e:
        log.error(f"INSIGHTS_ERROR | error={e}", exc_info=True)
        return error_response("Failed to generate insights", 500)

    return jsonify(tips), 200
