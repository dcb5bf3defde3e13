# product_insights/routes/__init__.py
"""
Blueprint auto-registration.

Put any flask.Blueprint in `product_insights/routes/<name>.py` with the
variable name **bp** and it is discovered and registered by
`register_routes(app)`.

Shared services are read from `app.extensions` through `service(name)`,
which calls the lazy `_get_or_init_<name>` getter the app factory stored.
"""

from __future__ import annotations

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Any, Dict, Optional, Tuple

from flask import Blueprint, Flask, current_app, jsonify

log = logging.getLogger(__name__)


def register_routes(app: Flask) -> None:
    for _, name, _ in pkgutil.iter_modules(__path__):
        try:
            module: ModuleType = importlib.import_module(f"{__name__}.{name}")
        except Exception as e:
            log.error(f"REGISTER_ROUTES_ERROR | module={name} | error={e}", exc_info=True)
            raise RuntimeError(f"Failed to register routes from {name}: {e}") from e
        bp: Optional[Blueprint] = getattr(module, "bp", None)
        if isinstance(bp, Blueprint):
            app.register_blueprint(bp)
            log.info(f"REGISTER_ROUTES_SUCCESS | blueprint={bp.name}")


def service(name: str) -> Any:
    """Return the shared service `name`, creating it on first use."""
    existing = current_app.extensions.get(name)
    if existing is not None:
        return existing
    return current_app.extensions[f"_get_or_init_{name}"]()


def error_response(message: str, status: int = 400) -> Tuple[Any, int]:
    body: Dict[str, Any] = {"error": message}
    return jsonify(body), status
