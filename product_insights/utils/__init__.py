# product_insights/utils/__init__.py
"""
Expose helpers at package-level for convenience:

    from product_insights.utils import strip_code_fences
"""

from .helpers import (  # noqa: F401
    iso_now,
    preview,
    split_csv,
    strip_code_fences,
    strip_markdown,
    unique,
)

__all__ = [
    "strip_code_fences",
    "strip_markdown",
    "split_csv",
    "preview",
    "iso_now",
    "unique",
]
