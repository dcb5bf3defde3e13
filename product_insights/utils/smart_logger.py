# product_insights/utils/smart_logger.py
"""
Smart, modular logging for the insight pipeline.
Provides clean, contextual logs with configurable verbosity levels.
"""

import logging
import os
from enum import Enum
from typing import Any, Dict, Optional


class LogLevel(Enum):
    MINIMAL = 1      # Only critical flow events
    STANDARD = 2     # Key decisions and state changes
    DETAILED = 3     # Include per-product filter decisions
    DEBUG = 4        # Everything including full prompts


class PipelineLogger:
    def __init__(self, name: str, level: LogLevel = LogLevel.STANDARD):
        self.logger = logging.getLogger(name)
        self.level = level

    def set_level(self, level: LogLevel):
        """Change logging verbosity at runtime"""
        self.level = level

    def _should_log(self, required_level: LogLevel) -> bool:
        return self.level.value >= required_level.value

    def _clean_log(self, level: str, category: str, message: str, **kwargs):
        details = " | ".join([f"{k}={v}" for k, v in kwargs.items() if v is not None])
        if details:
            full_message = f"{category} | {message} | {details}"
        else:
            full_message = f"{category} | {message}"

        getattr(self.logger, level.lower())(full_message)

    # ═══════════════════════════════════════════════════════════
    # FLOW EVENTS
    # ═══════════════════════════════════════════════════════════

    def stage_attempt(self, stage: str):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "VISION_STAGE", stage, status="started")

    def stage_result(self, stage: str, found: bool, items: int = None):
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "VISION_STAGE", stage, found=found, items=items)

    def llm_attempt(self, attempt: int, max_attempts: int, model: str):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("info", "LLM_CALL", f"attempt {attempt}/{max_attempts}", model=model)

    def llm_prompt(self, prompt: str):
        """Full prompts only at DEBUG; they may contain user profile data."""
        if not self._should_log(LogLevel.DEBUG):
            return
        self._clean_log("debug", "LLM_PROMPT", prompt)

    def filter_decision(self, product_name: str, suitable: bool, rule: str = None, reason: str = None):
        if not self._should_log(LogLevel.DETAILED):
            return
        self._clean_log("debug", "FILTER", product_name or "<unnamed>", suitable=suitable, rule=rule, reason=reason)

    def filter_summary(self, total: int, kept: int, rejected_by: Optional[Dict[str, int]] = None):
        if not self._should_log(LogLevel.MINIMAL):
            return
        self._clean_log("info", "FILTER_SUMMARY", f"{kept}/{total} suitable", rejected_by=rejected_by or None)

    def warning(self, warning_type: str, details: str = None):
        if not self._should_log(LogLevel.STANDARD):
            return
        self._clean_log("warning", "WARNING", warning_type, details=details)

    def error_occurred(self, error_type: str, operation: str, error_msg: str = None, **context: Any):
        # Errors are always logged regardless of level
        self._clean_log("error", "ERROR", f"{error_type} in {operation}", msg=error_msg, **context)


# ═══════════════════════════════════════════════════════════════════════════════
# GLOBAL LOGGER INSTANCES AND CONFIGURATION
# ═══════════════════════════════════════════════════════════════════════════════

_loggers: Dict[str, PipelineLogger] = {}


def get_pipeline_logger(module_name: str, level: LogLevel = None) -> PipelineLogger:
    """Get or create a pipeline logger for a module"""
    if module_name not in _loggers:
        default_level = getattr(LogLevel, os.getenv("BOT_LOG_LEVEL", "STANDARD").upper(), LogLevel.STANDARD)
        _loggers[module_name] = PipelineLogger(module_name, level or default_level)

    if level:
        _loggers[module_name].set_level(level)

    return _loggers[module_name]


def resolve_log_level(raw: Optional[str] = None) -> LogLevel:
    """BOT_LOG_LEVEL name → LogLevel; unknown names fall back to STANDARD."""
    name = (raw or os.getenv("BOT_LOG_LEVEL", "STANDARD")).upper()
    if name not in LogLevel.__members__:
        logging.getLogger(__name__).warning(
            f"Invalid BOT_LOG_LEVEL '{name}'. Valid options: {', '.join(LogLevel.__members__)}"
        )
        return LogLevel.STANDARD
    return LogLevel[name]


def set_pipeline_log_level(level: LogLevel) -> None:
    """Align every pipeline logger created so far with `level`."""
    for pipeline_logger in _loggers.values():
        pipeline_logger.set_level(level)
