# product_insights/data_fetchers/__init__.py
"""
Catalog data fetchers. The product catalog lives in BigQuery.
"""

from __future__ import annotations

from .bq_products import CatalogFetcher, build_keyword_query

__all__ = ["CatalogFetcher", "build_keyword_query"]
