# product_insights/routes/search.py
"""
GET /search?q=keyword1,keyword2

Case-insensitive substring match of any keyword against the catalog's
searchable columns. Returns the matching catalog rows as-is.
"""

from __future__ import annotations

import logging

from flask import Blueprint, jsonify, request

from . import error_response, service

log = logging.getLogger(__name__)
bp = Blueprint("search", __name__)


@bp.get("/search")
def search():
    raw = (request.args.get("q") or "").strip()
    if not raw:
        return error_response('Please provide search keywords using the query parameter "q"', 400)

    keywords = [k.strip() for k in raw.split(",") if k.strip()]
    log.info(f"SEARCH_REQUEST | keywords={keywords}")

    try:
        rows = service("catalog").search(keywords)
    except Exception as e:
        log.error(f"SEARCH_ERROR | keywords={keywords} | error={e}", exc_info=True)
        return error_response("Failed to perform search", 500)

    return jsonify(rows), 200
