"""
Environment-driven configuration.
All values are read once at import time; override via environment or .env.
"""
from __future__ import annotations

import logging
import os

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).lower() in _TRUTHY


class BaseConfig:
    SECRET_KEY: str = os.getenv("SECRET_KEY", "dev-secret-change-me")

    # Gemini - key MUST be set via environment variable (or Secret Manager, see credentials.py)
    GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY") or os.getenv("GOOGLE_API_KEY", "")

    # LLM - deterministic by default
    LLM_MODEL: str = os.getenv("LLM_MODEL", "gemini-1.5-flash")
    LLM_TEMPERATURE: float = float(os.getenv("LLM_TEMPERATURE", "0.0"))
    LLM_TOP_P: float = float(os.getenv("LLM_TOP_P", "0.1"))
    LLM_TOP_K: int = int(os.getenv("LLM_TOP_K", "16"))
    LLM_MAX_TOKENS: int = int(os.getenv("LLM_MAX_TOKENS", "12000"))

    # Vision
    # When true a failing stage is logged and the chain moves on instead of aborting
    VISION_TOLERATE_STAGE_ERRORS: bool = _env_flag("VISION_TOLERATE_STAGE_ERRORS")
    UPLOAD_MAX_BYTES: int = int(os.getenv("UPLOAD_MAX_BYTES", str(10 * 1024 * 1024)))

    # BigQuery catalog
    BQ_PROJECT: str = os.getenv("BQ_PROJECT", "")
    BQ_PRODUCTS_TABLE: str = os.getenv("BQ_PRODUCTS_TABLE", "BigBasketDataset.products")
    CATALOG_SEARCH_COLUMNS: tuple = tuple(
        c.strip() for c in os.getenv(
            "CATALOG_SEARCH_COLUMNS", "name,category,ingredients,type,nutrition"
        ).split(",") if c.strip()
    )
    CATALOG_MAX_RESULTS: int = int(os.getenv("CATALOG_MAX_RESULTS", "500"))

    # Optional service-account JSON stored in Secret Manager
    # e.g. projects/<id>/secrets/vision-api-credentials/versions/latest
    GCP_CREDENTIALS_SECRET: str = os.getenv("GCP_CREDENTIALS_SECRET", "")

    # Suitability filter thresholds
    FILTER_KETO_MAX_CARBS: float = float(os.getenv("FILTER_KETO_MAX_CARBS", "10"))
    FILTER_DIABETIC_MAX_SUGAR: float = float(os.getenv("FILTER_DIABETIC_MAX_SUGAR", "5"))
    FILTER_HYPERTENSION_MAX_SODIUM: float = float(os.getenv("FILTER_HYPERTENSION_MAX_SODIUM", "200"))
    FILTER_WEIGHT_LOSS_MAX_CALORIES: float = float(os.getenv("FILTER_WEIGHT_LOSS_MAX_CALORIES", "300"))
    FILTER_MUSCLE_GAIN_MIN_PROTEIN: float = float(os.getenv("FILTER_MUSCLE_GAIN_MIN_PROTEIN", "10"))

    CORS_ALLOW_ORIGINS: str = os.getenv("CORS_ALLOW_ORIGINS", "")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")


class DevelopmentConfig(BaseConfig):
    DEBUG: bool = True


class ProductionConfig(BaseConfig):
    DEBUG: bool = False


class TestingConfig(BaseConfig):
    TESTING: bool = True
    DEBUG: bool = False


def get_config(env: str = None) -> BaseConfig:
    """Get configuration instance directly - no complex manager."""
    env = (env or os.getenv("APP_ENV", os.getenv("FLASK_ENV", "development"))).lower()
    mapping = {
        "development": DevelopmentConfig,
        "production": ProductionConfig,
        "testing": TestingConfig,
        "test": TestingConfig,
    }
    config_class = mapping.get(env, DevelopmentConfig)
    cfg = config_class()

    # Log critical config values at startup (once per process). Never log key material.
    log = logging.getLogger(__name__)
    if not hasattr(get_config, "_logged_startup"):
        log.info(f"CONFIG_STARTUP | env={env} | config_class={config_class.__name__}")
        log.info(
            f"LLM_CONFIG | model={cfg.LLM_MODEL} | temp={cfg.LLM_TEMPERATURE} | top_p={cfg.LLM_TOP_P} "
            f"| top_k={cfg.LLM_TOP_K} | max_tokens={cfg.LLM_MAX_TOKENS} "
            f"| api_key_set={bool(cfg.GEMINI_API_KEY)}"
        )
        log.info(f"VISION_CONFIG | tolerate_stage_errors={cfg.VISION_TOLERATE_STAGE_ERRORS}")
        log.info(
            f"CATALOG_CONFIG | project={cfg.BQ_PROJECT or 'default'} | table={cfg.BQ_PRODUCTS_TABLE} "
            f"| columns={','.join(cfg.CATALOG_SEARCH_COLUMNS)} | max_results={cfg.CATALOG_MAX_RESULTS}"
        )
        log.info(
            f"FILTER_CONFIG | keto_carbs<={cfg.FILTER_KETO_MAX_CARBS} | sugar<={cfg.FILTER_DIABETIC_MAX_SUGAR} "
            f"| sodium<={cfg.FILTER_HYPERTENSION_MAX_SODIUM} | calories<={cfg.FILTER_WEIGHT_LOSS_MAX_CALORIES} "
            f"| protein>={cfg.FILTER_MUSCLE_GAIN_MIN_PROTEIN}"
        )
        get_config._logged_startup = True

    return cfg
