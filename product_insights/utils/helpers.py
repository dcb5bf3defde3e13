"""
Utility helpers
"""

from __future__ import annotations

import re
from datetime import datetime
from typing import Any, List

_CODE_FENCE = re.compile(r"```json|```")

# Profile-keyword responses sometimes come back as markdown; these are peeled off before JSON parsing
_MD_HEADING = re.compile(r"##")
_MD_EMPTY_BOLD = re.compile(r"\*\*\s*\*\*")
_MD_STAR = re.compile(r"\*")
_SECTION_LABEL_LINE = re.compile(r"^\s*(?:Medical Conditions|Nutritional Goals):.*$", re.MULTILINE)


def strip_code_fences(text: str) -> str:
    return _CODE_FENCE.sub("", text or "").strip()


def strip_markdown(text: str) -> str:
    out = _MD_HEADING.sub("", text or "")
    out = _MD_EMPTY_BOLD.sub("", out)
    out = _MD_STAR.sub("", out)
    out = _SECTION_LABEL_LINE.sub("", out)
    return out.strip()


def split_csv(raw: str) -> List[str]:
    """'peanuts, Milk ,' -> ['peanuts', 'milk']"""
    return [p.strip().lower() for p in (raw or "").split(",") if p.strip()]


def preview(text: str, limit: int = 200) -> str:
    text = text or ""
    return text if len(text) <= limit else text[:limit] + "..."


def iso_now() -> str:
    return datetime.now().isoformat()


def unique(seq: List[Any]) -> List[Any]:
    seen: set[Any] = set()
    out: List[Any] = []
    for x in seq:
        if x not in seen:
            seen.add(x)
            out.append(x)
    return out
