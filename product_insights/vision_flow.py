"""
Content extraction from an uploaded product image.

Runs Cloud Vision strategies in a fixed order and stops at the first one that
finds something:

    text → labels → objects → web entities → sentinel

Each stage is less precise than the one before but more likely to return
something, so the prompt builder downstream always gets a non-empty
description.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from google.cloud import vision

from .enums import ExtractionStage
from .errors import VisionStageError
from .models import SENTINEL_CONTENT, ExtractionResult
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

__all__ = ["ContentExtractor", "SENTINEL_CONTENT", "build_vision_client"]


def _check_error(stage: ExtractionStage, response: Any) -> None:
    error = getattr(response, "error", None)
    message = getattr(error, "message", "") if error is not None else ""
    if message:
        raise VisionStageError(stage.value, message)


def _non_blank(values: List[Any]) -> List[str]:
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


def _text_items(response: Any) -> List[str]:
    annotations = list(getattr(response, "text_annotations", None) or [])
    if not annotations:
        return []
    # First annotation is the full text block; the rest are individual words
    description = (annotations[0].description or "").strip()
    return [description] if description else []


def _label_items(response: Any) -> List[str]:
    return _non_blank([a.description for a in getattr(response, "label_annotations", None) or []])


def _object_items(response: Any) -> List[str]:
    return _non_blank([o.name for o in getattr(response, "localized_object_annotations", None) or []])


def _web_items(response: Any) -> List[str]:
    detection = getattr(response, "web_detection", None)
    if detection is None:
        return []
    return _non_blank([e.description for e in getattr(detection, "web_entities", None) or []])


@dataclass(frozen=True)
class _Stage:
    stage: ExtractionStage
    method: str                           # ImageAnnotatorClient method name
    collect: Callable[[Any], List[str]]
    prefix: Optional[str]                 # None → content is the raw text block


STAGES = (
    _Stage(ExtractionStage.TEXT, "text_detection", _text_items, None),
    _Stage(ExtractionStage.LABELS, "label_detection", _label_items, "This image contains: "),
    _Stage(ExtractionStage.OBJECTS, "object_localization", _object_items, "Objects detected: "),
    _Stage(ExtractionStage.WEB_ENTITIES, "web_detection", _web_items, "Web-detected entities: "),
)


def build_vision_client(credentials: Any = None) -> vision.ImageAnnotatorClient:
    if credentials is not None:
        return vision.ImageAnnotatorClient(credentials=credentials)
    return vision.ImageAnnotatorClient()


class ContentExtractor:
    """Produces exactly one ExtractionResult per image."""

    def __init__(self, client: Any, *, tolerate_stage_errors: bool = False) -> None:
        self.client = client
        self.tolerate_stage_errors = tolerate_stage_errors

    def _run_stage(self, stage_def: _Stage, image: Any) -> List[str]:
        plog.stage_attempt(stage_def.stage.value)
        response = getattr(self.client, stage_def.method)(image=image)
        _check_error(stage_def.stage, response)
        items = stage_def.collect(response)
        plog.stage_result(stage_def.stage.value, bool(items), len(items))
        return items

    def extract(self, content: bytes) -> ExtractionResult:
        """Run the stage chain over raw image bytes."""
        image = vision.Image(content=content)
        return self.extract_image(image)

    def extract_image(self, image: Any) -> ExtractionResult:
        for stage_def in STAGES:
            try:
                items = self._run_stage(stage_def, image)
            except Exception as exc:
                if not self.tolerate_stage_errors:
                    log.error(f"VISION_STAGE_ERROR | stage={stage_def.stage.value} | aborting chain | error={exc}")
                    raise
                plog.warning("VISION_STAGE_SKIPPED", f"stage={stage_def.stage.value} error={exc}")
                continue

            if not items:
                continue

            if stage_def.prefix is None:
                result = ExtractionResult(stage_def.stage, items[0])
            else:
                result = ExtractionResult(stage_def.stage, stage_def.prefix + ", ".join(items))
            log.info(f"VISION_EXTRACTED | stage={result.stage.value} | chars={len(result.content)}")
            return result

        log.info("VISION_EXTRACTED | stage=None | nothing detected")
        return ExtractionResult.sentinel()
