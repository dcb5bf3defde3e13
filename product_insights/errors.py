# product_insights/errors.py
"""
Error taxonomy for the insight pipeline.

Routes map these to HTTP responses; the core modules only raise them.
Running out of extraction stages is NOT an error (see vision_flow.SENTINEL_CONTENT).
"""

from __future__ import annotations

from typing import Optional


class InsightsError(Exception):
    """Base class for all service errors."""


class ValidationError(InsightsError):
    """A required request field is missing or malformed."""

    def __init__(self, field: str, message: Optional[str] = None) -> None:
        self.field = field
        self.message = message or f"Missing field: {field}"
        super().__init__(self.message)


class GenerationBlockedError(InsightsError):
    """The model refused to answer because of the configured safety thresholds."""

    def __init__(self, reason: str = "SAFETY") -> None:
        self.reason = reason
        super().__init__(f"Generation blocked by safety settings (reason={reason})")


class UpstreamExhaustedError(InsightsError):
    """Every generative attempt failed. `last_error` is the most recent failure."""

    def __init__(self, last_error: BaseException, attempts: int) -> None:
        self.last_error = last_error
        self.attempts = attempts
        super().__init__(f"Generative call failed after {attempts} attempts: {last_error}")


class MalformedOutputError(InsightsError):
    """Model output could not be parsed into the expected JSON shape."""

    def __init__(self, raw_text: str, reason: str = "invalid JSON") -> None:
        self.raw_text = raw_text
        self.reason = reason
        super().__init__(f"Malformed model output: {reason}")


class VisionStageError(InsightsError):
    """A Cloud Vision stage returned an error payload."""

    def __init__(self, stage: str, message: str) -> None:
        self.stage = stage
        super().__init__(f"Vision stage {stage} failed: {message}")


class CatalogError(InsightsError):
    """The product catalog query failed."""


class InvalidImageError(InsightsError):
    """The model judged the uploaded image unusable for product analysis."""

    def __init__(self, raw_text: str = "") -> None:
        self.raw_text = raw_text
        super().__init__("Invalid image. No ingredients or nutritional information found.")
