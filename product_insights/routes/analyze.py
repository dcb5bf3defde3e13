# product_insights/routes/analyze.py
"""
POST /analyze   (multipart/form-data)

Fields:
    image          product photo (required)
    personalInfo   JSON string (optional)

Flow: Vision fallback chain → analysis prompt → Gemini.

Response (200): the parsed analysis JSON, or the model's raw text when it
is not valid JSON.
Response (400): missing image, invalid personalInfo, or the model reports
the image as invalid.
"""

from __future__ import annotations

import logging

from flask import Blueprint, Response, jsonify, request
from werkzeug.utils import secure_filename

from ..errors import GenerationBlockedError, InvalidImageError, ValidationError
from ..insights import analyze_product_image
from ..models import UserProfile
from . import error_response, service

log = logging.getLogger(__name__)
bp = Blueprint("analyze", __name__)


@bp.post("/analyze")
def analyze():
    upload = request.files.get("image")
    if upload is None:
        return error_response("Image file is required in 'image' field", 400)

    content = upload.read()
    if not content:
        return error_response("Uploaded image is empty", 400)

    profile = UserProfile.from_payload(request.form.get("personalInfo"))
    log.info(
        f"ANALYZE_REQUEST | file={secure_filename(upload.filename or '') or '<unnamed>'} "
        f"| bytes={len(content)} | language={profile.preferred_language}"
    )

    try:
        extraction = service("content_extractor").extract(content)
    except Exception as e:
        log.error(f"ANALYZE_VISION_ERROR | error={e}", exc_info=True)
        return error_response("Error analyzing the image.", 500)

    try:
        report = analyze_product_image(service("generative_client"), extraction, profile)
    except (ValidationError, GenerationBlockedError, InvalidImageError):
        raise
    except Exception as e:
        log.error(f"ANALYZE_LLM_ERROR | stage={extraction.stage.value} | error={e}", exc_info=True)
        return error_response("Error analyzing the data through Gemini AI.", 500)

    if isinstance(report, str):
        return Response(report, status=200, mimetype="text/plain")
    return jsonify(report), 200
