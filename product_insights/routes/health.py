# product_insights/routes/health.py
"""
Liveness probe for Cloud Run. Does not touch Gemini, Vision or BigQuery.
"""

from __future__ import annotations

from flask import Blueprint, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health_check():
    return jsonify({"status": "healthy"}), 200
