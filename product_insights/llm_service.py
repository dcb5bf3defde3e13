"""
Gemini generative client.

Wraps one `generate_content` call with:
• deterministic generation config (temperature 0, narrow top-p / top-k)
• two fixed safety thresholds (harassment: high only, hate speech: medium+)
• bounded retries (3 attempts total, no backoff)
• fenced-code-block stripping on the way out

JSON parsing is left to callers.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from google import genai
from google.genai import types

from .config import get_config
from .errors import GenerationBlockedError, MalformedOutputError, UpstreamExhaustedError
from .utils.helpers import preview, strip_code_fences
from .utils.smart_logger import get_pipeline_logger

log = logging.getLogger(__name__)
plog = get_pipeline_logger(__name__)

DEFAULT_MODEL = "gemini-1.5-flash"
MAX_ATTEMPTS = 3

SAFETY_SETTINGS = [
    types.SafetySetting(
        category=types.HarmCategory.HARM_CATEGORY_HARASSMENT,
        threshold=types.HarmBlockThreshold.BLOCK_ONLY_HIGH,
    ),
    types.SafetySetting(
        category=types.HarmCategory.HARM_CATEGORY_HATE_SPEECH,
        threshold=types.HarmBlockThreshold.BLOCK_MEDIUM_AND_ABOVE,
    ),
]


def clean_output(text: str) -> str:
    """Remove ```json / ``` fences and surrounding whitespace."""
    return strip_code_fences(text)


def _enum_name(value: Any) -> str:
    return str(getattr(value, "name", value) or "")


def _blocked_reason(response: Any) -> Optional[str]:
    """Return the block reason if the safety filters stopped this generation."""
    feedback = getattr(response, "prompt_feedback", None)
    reason = getattr(feedback, "block_reason", None) if feedback is not None else None
    if reason:
        return _enum_name(reason)

    # A SAFETY finish only counts as a block when nothing usable came back
    if getattr(response, "text", None):
        return None
    for candidate in getattr(response, "candidates", None) or []:
        if "SAFETY" in _enum_name(getattr(candidate, "finish_reason", None)).upper():
            return "SAFETY"
    return None


class GenerativeClient:
    """Thin, retrying wrapper around a google-genai client.

    `client` is anything exposing `models.generate_content(model=, contents=, config=)`;
    pass a fake in tests.
    """

    def __init__(
        self,
        client: Any = None,
        *,
        model: Optional[str] = None,
        api_key: Optional[str] = None,
        max_attempts: Optional[int] = None,
    ) -> None:
        cfg = get_config()
        self.model = model or cfg.LLM_MODEL or DEFAULT_MODEL
        self.max_attempts = max(1, int(max_attempts or MAX_ATTEMPTS))
        self.generation_config = types.GenerateContentConfig(
            temperature=cfg.LLM_TEMPERATURE,
            top_p=cfg.LLM_TOP_P,
            top_k=cfg.LLM_TOP_K,
            max_output_tokens=cfg.LLM_MAX_TOKENS,
            safety_settings=SAFETY_SETTINGS,
        )

        if client is None:
            key = api_key or cfg.GEMINI_API_KEY
            if not key:
                log.warning("GEMINI_API_KEY not found. GenerativeClient calls will fail.")
            client = genai.Client(api_key=key or None)
        self._client = client

        log.info(f"LLM_CLIENT_READY | model={self.model} | max_attempts={self.max_attempts}")

    def _generate_once(self, prompt: str) -> str:
        response = self._client.models.generate_content(
            model=self.model,
            contents=prompt,
            config=self.generation_config,
        )

        reason = _blocked_reason(response)
        if reason:
            raise GenerationBlockedError(reason)

        text = getattr(response, "text", None)
        if not text:
            raise MalformedOutputError("", "empty response")
        return text

    def generate_raw(self, prompt: str) -> str:
        """Call the model with bounded retries and return its text unmodified."""
        plog.llm_prompt(prompt)
        last_error: Optional[BaseException] = None

        for attempt in range(1, self.max_attempts + 1):
            plog.llm_attempt(attempt, self.max_attempts, self.model)
            try:
                text = self._generate_once(prompt)
                log.debug(f"LLM_RAW_RESPONSE | attempt={attempt} | text={preview(text, 500)}")
                return text
            except Exception as exc:  # noqa: BLE001 - every failure counts as an attempt
                last_error = exc
                log.warning(f"LLM_ATTEMPT_FAILED | attempt={attempt}/{self.max_attempts} | error={type(exc).__name__}: {exc}")

        plog.error_occurred(
            type(last_error).__name__, "generate", str(last_error),
            attempts=self.max_attempts, prompt=preview(prompt),
        )
        if isinstance(last_error, GenerationBlockedError):
            raise last_error
        raise UpstreamExhaustedError(last_error, self.max_attempts) from last_error

    def generate(self, prompt: str) -> str:
        """Generate and normalize: code fences stripped, whitespace trimmed."""
        return clean_output(self.generate_raw(prompt))
