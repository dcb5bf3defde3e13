"""
Root logging for the service process.

On Cloud Run (K_SERVICE set) records go to Google Cloud Logging; anywhere
else they go to stdout with the pipe-delimited format used across the package.
"""

import logging
import os
import sys
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# SDK loggers that are chatty at INFO
_NOISY_LOGGERS = (
    "google_genai",
    "google.auth",
    "google.api_core",
    "urllib3",
    "werkzeug",
)


def _use_cloud_logging() -> bool:
    return bool(os.getenv("K_SERVICE")) and os.getenv("USE_GCP_LOGGING", "true").lower() == "true"


def setup_logging(level_name: Optional[str] = None) -> bool:
    """Configure the root logger once. Returns True when Cloud Logging is active."""
    level_name = (level_name or os.getenv("LOG_LEVEL", "INFO")).upper()
    level = getattr(logging, level_name, logging.INFO)

    configured_cloud = False
    if _use_cloud_logging():
        try:
            from google.cloud import logging as cloud_logging
            cloud_logging.Client().setup_logging(log_level=level)
            configured_cloud = True
        except Exception as exc:
            print(f"CLOUD_LOGGING_UNAVAILABLE | falling back to stdout | error={exc}", file=sys.stderr)

    if not configured_cloud:
        root = logging.getLogger()
        root.setLevel(level)
        for h in list(root.handlers):
            root.removeHandler(h)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)

    logging.captureWarnings(True)
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    for name in ("product_insights", "gunicorn.error", "gunicorn.access"):
        logging.getLogger(name).setLevel(level)

    logging.getLogger(__name__).info(
        f"LOGGING_READY | backend={'cloud' if configured_cloud else 'stdout'} | level={level_name}"
    )
    return configured_cloud
