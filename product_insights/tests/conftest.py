# product_insights/tests/conftest.py
"""
Fakes for the three external services (Gemini, Cloud Vision, BigQuery catalog)
plus a Flask test client wired to them.
"""

from __future__ import annotations

from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from product_insights import create_app
from product_insights.keyword_extractor import KeywordExtractor
from product_insights.llm_service import GenerativeClient
from product_insights.preference_filter import FilterThresholds, PreferenceFilter
from product_insights.vision_flow import ContentExtractor


# ─────────────────────────────────
# Gemini
# ─────────────────────────────────

def genai_response(text: Optional[str] = None, block_reason: Optional[str] = None) -> SimpleNamespace:
    feedback = SimpleNamespace(block_reason=block_reason) if block_reason else None
    return SimpleNamespace(text=text, prompt_feedback=feedback, candidates=[])


class FakeModels:
    def __init__(self, script: List[Any]) -> None:
        self.script = list(script)
        self.calls: List[Dict[str, Any]] = []

    def generate_content(self, *, model: str, contents: str, config: Any) -> Any:
        self.calls.append({"model": model, "contents": contents, "config": config})
        # The last scripted item repeats once the script runs out
        item = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(item, BaseException):
            raise item
        if isinstance(item, str):
            return genai_response(item)
        return item


class FakeGenaiClient:
    """Stands in for `google.genai.Client`; only `models.generate_content` is used."""

    def __init__(self, *script: Any) -> None:
        self.models = FakeModels(list(script))

    @property
    def calls(self) -> List[Dict[str, Any]]:
        return self.models.calls


@pytest.fixture
def make_llm():
    def _make(*script: Any) -> GenerativeClient:
        return GenerativeClient(FakeGenaiClient(*script), model="test-model")
    return _make


# ─────────────────────────────────
# Cloud Vision
# ─────────────────────────────────

def _annotations(field: str, values: List[str]) -> List[SimpleNamespace]:
    return [SimpleNamespace(**{field: v}) for v in values]


class FakeVisionClient:
    """Per-method canned responses. A missing method returns an empty response."""

    def __init__(
        self,
        text: Optional[str] = None,
        labels: Optional[List[str]] = None,
        objects: Optional[List[str]] = None,
        web: Optional[List[str]] = None,
        errors: Optional[Dict[str, str]] = None,
    ) -> None:
        self.text = text
        self.labels = labels or []
        self.objects = objects or []
        self.web = web or []
        self.errors = errors or {}
        self.calls: List[str] = []

    def _error(self, method: str) -> SimpleNamespace:
        return SimpleNamespace(message=self.errors.get(method, ""))

    def text_detection(self, image: Any) -> SimpleNamespace:
        self.calls.append("text_detection")
        annotations = _annotations("description", [self.text]) if self.text is not None else []
        return SimpleNamespace(text_annotations=annotations, error=self._error("text_detection"))

    def label_detection(self, image: Any) -> SimpleNamespace:
        self.calls.append("label_detection")
        return SimpleNamespace(
            label_annotations=_annotations("description", self.labels),
            error=self._error("label_detection"),
        )

    def object_localization(self, image: Any) -> SimpleNamespace:
        self.calls.append("object_localization")
        return SimpleNamespace(
            localized_object_annotations=_annotations("name", self.objects),
            error=self._error("object_localization"),
        )

    def web_detection(self, image: Any) -> SimpleNamespace:
        self.calls.append("web_detection")
        return SimpleNamespace(
            web_detection=SimpleNamespace(web_entities=_annotations("description", self.web)),
            error=self._error("web_detection"),
        )


# ─────────────────────────────────
# Catalog
# ─────────────────────────────────

class FakeCatalog:
    def __init__(self, rows: Optional[List[Dict[str, Any]]] = None, error: Optional[Exception] = None) -> None:
        self.rows = rows or []
        self.error = error
        self.calls: List[List[str]] = []

    def search(self, keywords: List[str]) -> List[Dict[str, Any]]:
        self.calls.append(list(keywords))
        if self.error is not None:
            raise self.error
        return list(self.rows)


# ─────────────────────────────────
# Flask
# ─────────────────────────────────

@pytest.fixture
def app():
    app = create_app("testing")
    app.config["TESTING"] = True
    return app


@pytest.fixture
def wire(app):
    """Install fakes into app.extensions; returns the installed objects."""

    def _wire(
        llm_script: Optional[List[Any]] = None,
        vision: Optional[FakeVisionClient] = None,
        catalog: Optional[FakeCatalog] = None,
    ) -> SimpleNamespace:
        fake_genai = FakeGenaiClient(*(llm_script or ["{}"]))
        llm = GenerativeClient(fake_genai, model="test-model")
        vision = vision or FakeVisionClient()
        catalog = catalog or FakeCatalog()

        app.extensions["generative_client"] = llm
        app.extensions["keyword_extractor"] = KeywordExtractor(llm)
        app.extensions["content_extractor"] = ContentExtractor(vision)
        app.extensions["catalog"] = catalog
        app.extensions["preference_filter"] = PreferenceFilter(FilterThresholds())
        return SimpleNamespace(genai=fake_genai, vision=vision, catalog=catalog)

    return _wire


@pytest.fixture
def client(app):
    with app.test_client() as c:
        yield c
