"""
Product Insights Application Factory
====================================

Shared handles live in `app.extensions` and are created on first use:
- generative_client   (Gemini, llm_service.py)
- content_extractor   (Cloud Vision, vision_flow.py)
- catalog             (BigQuery, data_fetchers/bq_products.py)
- keyword_extractor / preference_filter (no I/O of their own)

Routes reach them through the `_get_or_init_*` callables stored alongside.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from flask import Flask, jsonify
from flask_cors import CORS

from .config import get_config
from .errors import GenerationBlockedError, InvalidImageError, ValidationError
from .utils.helpers import iso_now

log = logging.getLogger(__name__)

__version__ = "1.0.0"


def _get_or_init_credentials(app: Flask) -> Any:
    if "gcp_credentials" in app.extensions:
        return app.extensions["gcp_credentials"]

    from .credentials import load_service_account_credentials

    credentials = load_service_account_credentials(app.config.get("GCP_CREDENTIALS_SECRET"))
    app.extensions["gcp_credentials"] = credentials
    return credentials


def _get_or_init_generative_client(app: Flask):
    if app.extensions.get("generative_client") is not None:
        return app.extensions["generative_client"]

    from .llm_service import GenerativeClient

    log.info("INIT_LLM | lazy initialization")
    client = GenerativeClient()
    app.extensions["generative_client"] = client
    return client


def _get_or_init_content_extractor(app: Flask):
    if app.extensions.get("content_extractor") is not None:
        return app.extensions["content_extractor"]

    from .vision_flow import ContentExtractor, build_vision_client

    log.info("INIT_VISION | lazy initialization")
    extractor = ContentExtractor(
        build_vision_client(_get_or_init_credentials(app)),
        tolerate_stage_errors=bool(app.config.get("VISION_TOLERATE_STAGE_ERRORS")),
    )
    app.extensions["content_extractor"] = extractor
    return extractor


def _get_or_init_catalog(app: Flask):
    if app.extensions.get("catalog") is not None:
        return app.extensions["catalog"]

    from .data_fetchers.bq_products import CatalogFetcher

    log.info("INIT_CATALOG | lazy initialization")
    catalog = CatalogFetcher(credentials=_get_or_init_credentials(app))
    app.extensions["catalog"] = catalog
    return catalog


def _get_or_init_keyword_extractor(app: Flask):
    if app.extensions.get("keyword_extractor") is not None:
        return app.extensions["keyword_extractor"]

    from .keyword_extractor import KeywordExtractor

    extractor = KeywordExtractor(_get_or_init_generative_client(app))
    app.extensions["keyword_extractor"] = extractor
    return extractor


def _get_or_init_preference_filter(app: Flask):
    if app.extensions.get("preference_filter") is not None:
        return app.extensions["preference_filter"]

    from .preference_filter import FilterThresholds, PreferenceFilter

    pf = PreferenceFilter(FilterThresholds.from_config(app.config["APP_CONFIG"]))
    app.extensions["preference_filter"] = pf
    return pf


def create_app(config_name: Optional[str] = None) -> Flask:
    """
    App factory.

    INITIALIZATION ORDER:
    1. Config + CORS
    2. Lazy service getters (no network calls at startup)
    3. Register routes
    4. Error handlers

    Args:
        config_name: 'development', 'production' or 'testing'; defaults to APP_ENV.
    """
    cfg = get_config(config_name)

    app = Flask(__name__)
    app.config.from_object(cfg)
    app.config["APP_CONFIG"] = cfg
    app.config["MAX_CONTENT_LENGTH"] = cfg.UPLOAD_MAX_BYTES

    origins_env = (cfg.CORS_ALLOW_ORIGINS or "").strip()
    allowed_origins = [o.strip() for o in origins_env.split(",") if o.strip()] if origins_env else ["*"]
    CORS(
        app,
        resources={r"/*": {
            "origins": allowed_origins,
            "methods": ["GET", "POST", "OPTIONS"],
            "allow_headers": ["Content-Type"],
        }},
        supports_credentials=False,
    )

    # ────────────────────────────────────────────────────────
    # STEP 2: Lazy service getters
    # ────────────────────────────────────────────────────────
    app.extensions["_get_or_init_generative_client"] = lambda: _get_or_init_generative_client(app)
    app.extensions["_get_or_init_content_extractor"] = lambda: _get_or_init_content_extractor(app)
    app.extensions["_get_or_init_catalog"] = lambda: _get_or_init_catalog(app)
    app.extensions["_get_or_init_keyword_extractor"] = lambda: _get_or_init_keyword_extractor(app)
    app.extensions["_get_or_init_preference_filter"] = lambda: _get_or_init_preference_filter(app)

    # ────────────────────────────────────────────────────────
    # STEP 3: Register Routes
    # ────────────────────────────────────────────────────────
    from .routes import register_routes

    register_routes(app)

    # ────────────────────────────────────────────────────────
    # STEP 4: Error Handlers
    # ────────────────────────────────────────────────────────
    @app.errorhandler(ValidationError)
    def handle_validation_error(error: ValidationError):
        log.warning(f"VALIDATION_ERROR | field={error.field} | message={error.message}")
        return jsonify({"error": error.message}), 400

    @app.errorhandler(GenerationBlockedError)
    def handle_blocked(error: GenerationBlockedError):
        log.warning(f"GENERATION_BLOCKED | reason={error.reason}")
        return jsonify({"error": "Request was blocked by content safety settings"}), 400

    @app.errorhandler(InvalidImageError)
    def handle_invalid_image(error: InvalidImageError):
        return jsonify({"error": str(error)}), 400

    @app.errorhandler(413)
    def handle_too_large(error):
        return jsonify({"error": f"Upload exceeds {cfg.UPLOAD_MAX_BYTES} bytes"}), 413

    @app.errorhandler(500)
    def handle_internal_error(error):
        log.error(f"INTERNAL_ERROR | error={error}", exc_info=True)
        return jsonify({
            "error": "Internal server error",
            "timestamp": iso_now(),
            "details": str(error) if app.debug else "Contact support",
        }), 500

    @app.errorhandler(404)
    def handle_not_found(error):
        return jsonify({
            "error": "Endpoint not found",
            "timestamp": iso_now(),
        }), 404

    app.version = __version__
    log.info(f"APP_INIT_COMPLETE | config={cfg.__class__.__name__} | routes={len(list(app.url_map.iter_rules()))}")
    return app
