#!/usr/bin/env python3
"""
Product Insights Entry Point
- Works under both Gunicorn (`gunicorn run:app`) and `python run.py`.
- Initializes logging exactly once per process.
- Aligns Flask's app logger with the root logger.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Tuple

from dotenv import load_dotenv
from flask import request

# Load env before any other imports that might read it
load_dotenv()

from product_insights import create_app  # noqa: E402
from product_insights.logging_setup import setup_logging  # noqa: E402
from product_insights.utils.smart_logger import (  # noqa: E402
    LogLevel,
    resolve_log_level,
    set_pipeline_log_level,
)

_LOGGING_INITIALIZED = False  # process-level guard


def init_logging() -> LogLevel:
    """Idempotent: root handlers are installed once, pipeline verbosity is re-applied."""
    global _LOGGING_INITIALIZED

    if not _LOGGING_INITIALIZED:
        setup_logging()
        _LOGGING_INITIALIZED = True

    level = resolve_log_level()
    set_pipeline_log_level(level)
    return level


def validate_environment(strict: bool) -> None:
    """
    Validate critical env vars.
    - strict=True: exit on missing vars (CLI path).
    - strict=False: log a warning (WSGI path) so the container still boots and serves /health.
    """
    required = {
        "GEMINI_API_KEY": "Gemini generation",
    }
    missing = [f"{k} (required for {v})" for k, v in required.items() if not os.getenv(k)]

    if missing:
        msg = "Missing required environment variables: " + ", ".join(missing)
        if strict:
            print("Error:", msg)
            sys.exit(1)
        logging.getLogger(__name__).warning(msg)


def _wire_app_logger(app) -> None:
    """Route Flask's app.logger into the root handlers."""
    if app.logger.handlers:
        app.logger.handlers.clear()
    app.logger.propagate = True
    app.logger.setLevel(logging.getLogger().level)


def create_application(strict_env: bool = False):
    validate_environment(strict=strict_env)

    app = create_app()
    _wire_app_logger(app)

    @app.before_request
    def _log_request():
        app.logger.info("→ %s %s", request.method, request.path)

    return app


def _resolve_server_config() -> Tuple[str, int, bool]:
    host = os.getenv("HOST", "127.0.0.1")
    port = int(os.getenv("PORT", "8080"))

    flask_debug = os.getenv("FLASK_DEBUG", "").lower()
    if flask_debug in ("1", "true", "yes", "on"):
        debug = True
    elif flask_debug in ("0", "false", "no", "off"):
        debug = False
    else:
        debug = os.getenv("APP_ENV", "development").lower() == "development"

    return host, port, debug


def main() -> None:
    log_level = init_logging()
    app = create_application(strict_env=True)

    host, port, debug = _resolve_server_config()
    print("Product Insights Starting")
    print("=" * 60)
    print(f"Server:       http://{host}:{port}")
    print(f"Health check: http://{host}:{port}/health")
    print(f"Environment:  {os.getenv('APP_ENV', 'development')}")
    print(f"Debug mode:   {debug}")
    print(f"Log level:    {log_level.name}")
    print("=" * 60)

    try:
        app.run(host=host, port=port, debug=debug, use_reloader=False, threaded=True)
    except KeyboardInterrupt:
        print("\nShutting down gracefully...")


# WSGI entrypoint for Gunicorn. Env validation stays non-strict so the container can boot.
init_logging()
app = create_application(strict_env=False)

if __name__ == "__main__":
    main()
