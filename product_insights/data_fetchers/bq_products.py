# product_insights/data_fetchers/bq_products.py
"""
BigQuery Products Fetcher
─────────────────────────
Keyword lookup over the product table:

    SELECT * FROM `<table>`
    WHERE LOWER(CAST(name AS STRING)) LIKE LOWER(CONCAT('%', @kw0, '%'))
       OR LOWER(CAST(category AS STRING)) LIKE ...
       OR ...                                   (every column × every keyword)
    LIMIT <max_results>

Keywords are always bound as query parameters, never spliced into SQL.
Column and table names come from config and are checked against an identifier
pattern before use.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from google.cloud import bigquery

from ..config import get_config
from ..errors import CatalogError
from ..utils.helpers import unique

log = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TABLE_RE = re.compile(r"^[A-Za-z0-9_\-]+(\.[A-Za-z0-9_\-]+){1,2}$")


def _clean_keywords(keywords: Sequence[str]) -> List[str]:
    return unique([str(k).strip() for k in keywords or [] if k is not None and str(k).strip()])


def _qualified_table(table: str, project: Optional[str]) -> str:
    if not _TABLE_RE.match(table or ""):
        raise CatalogError(f"Invalid catalog table name: {table!r}")
    # dataset.table → project.dataset.table when a project is configured
    if project and table.count(".") == 1:
        return f"{project}.{table}"
    return table


def build_keyword_query(
    table: str,
    columns: Sequence[str],
    keywords: Sequence[str],
    max_results: int,
) -> Tuple[str, List[bigquery.ScalarQueryParameter]]:
    """Return (sql, parameters) matching any keyword in any column, case-insensitively."""
    bad = [c for c in columns if not _IDENTIFIER_RE.match(c)]
    if bad or not columns:
        raise CatalogError(f"Invalid catalog search columns: {list(columns)!r}")

    conditions: List[str] = []
    params: List[bigquery.ScalarQueryParameter] = []
    for i, keyword in enumerate(keywords):
        name = f"kw{i}"
        params.append(bigquery.ScalarQueryParameter(name, "STRING", keyword))
        conditions.extend(
            f"LOWER(CAST({col} AS STRING)) LIKE LOWER(CONCAT('%', @{name}, '%'))" for col in columns
        )

    sql = f"SELECT * FROM `{table}` WHERE " + " OR ".join(conditions)
    if max_results and max_results > 0:
        sql += f" LIMIT {int(max_results)}"
    return sql, params


class CatalogFetcher:
    """Runs keyword searches against the BigQuery product table."""

    def __init__(
        self,
        client: Any = None,
        *,
        table: Optional[str] = None,
        columns: Optional[Sequence[str]] = None,
        max_results: Optional[int] = None,
        credentials: Any = None,
    ) -> None:
        cfg = get_config()
        project = cfg.BQ_PROJECT or None
        self.table = _qualified_table(table or cfg.BQ_PRODUCTS_TABLE, project)
        self.columns = tuple(columns or cfg.CATALOG_SEARCH_COLUMNS)
        self.max_results = cfg.CATALOG_MAX_RESULTS if max_results is None else max_results

        if client is None:
            client = bigquery.Client(project=project, credentials=credentials)
        self._client = client

        log.info(f"CATALOG_READY | table={self.table} | columns={','.join(self.columns)} | max_results={self.max_results}")

    def search(self, keywords: Sequence[str]) -> List[Dict[str, Any]]:
        """Return catalog rows (as dicts) matching any keyword; [] when no keyword is usable."""
        cleaned = _clean_keywords(keywords)
        if not cleaned:
            log.info("CATALOG_SEARCH_SKIPPED | no keywords")
            return []

        sql, params = build_keyword_query(self.table, self.columns, cleaned, self.max_results)
        log.debug(f"CATALOG_SQL | {sql} | keywords={cleaned}")

        try:
            job = self._client.query(sql, job_config=bigquery.QueryJobConfig(query_parameters=params))
            rows = [dict(row.items()) for row in job.result()]
        except Exception as exc:
            log.error(f"CATALOG_QUERY_FAILED | keywords={cleaned} | error={exc}", exc_info=True)
            raise CatalogError(f"Catalog query failed: {exc}") from exc

        log.info(f"CATALOG_SEARCH | keywords={cleaned} | rows={len(rows)}")
        return rows

