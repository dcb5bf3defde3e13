# product_insights/routes/recommendations.py
"""
POST /recommendations

Request body:
    {
        "query": "healthy snacks",
        "personalInfo": {...} | "<json string>"
    }

Flow: query keywords → profile keywords → catalog search → preference filter.
Blank profile fields are logged, never rejected.

Response (200): JSON array of suitable catalog rows.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from ..errors import GenerationBlockedError, ValidationError
from ..insights import recommend_products
from ..models import UserProfile
from . import error_response, service

log = logging.getLogger(__name__)
bp = Blueprint("recommendations", __name__)


@bp.post("/recommendations")
def recommendations():
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        return error_response("Invalid JSON body", 400)

    query = body.get("query")
    if not isinstance(query, str) or not query.strip():
        return error_response("Please provide a search query", 400)

    profile = UserProfile.from_payload(body.get("personalInfo"))
    log.info(f"RECOMMEND_REQUEST | query='{query.strip()}'")

    try:
        products = recommend_products(
            service("keyword_extractor"),
            service("catalog"),
            service("preference_filter"),
            query.strip(),
            profile,
        )
    except (ValidationError, GenerationBlockedError):
        raise
    except Exception as e:
        log.error(f"RECOMMEND_ERROR | error={e}", exc_info=True)
        return error_response("Failed to process recommendations", 500)

    return jsonify(products), 200
