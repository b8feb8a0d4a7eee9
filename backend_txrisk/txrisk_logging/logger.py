"""
Structured logging for assessments: event_type, user_id, score, indicators.

structlog with ISO timestamps and a log level on every line. Engine modules
call get_logger(__name__) and log a snake_case event_type plus key/value
context. Logs go to stderr so the CLI can keep stdout for assessment JSON.

LOG_LEVEL (default INFO) and LOG_FORMAT (json | console, default json) pick
the initial configuration; main.py may reconfigure before the engine is
imported.

Uses only Python stdlib logging and structlog; no backend_txrisk imports to avoid circular imports.
"""

from __future__ import annotations

import logging
import math
import os
import sys
from datetime import datetime, timezone
from enum import Enum
from typing import Any

import structlog

DEFAULT_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
DEFAULT_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

# Context keys whose values never reach the log sink
REDACTED_KEYS = frozenset({"api_key", "authorization", "hugging_face_api_key"})


def _add_timestamp(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Ensure timestamp is always present (ISO 8601, UTC)."""
    if "timestamp" not in event_dict:
        event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def _normalize_event(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Rename structlog 'event' to event_type; keep message if present."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    if "message" not in event_dict and "event_type" in event_dict:
        event_dict["message"] = str(event_dict["event_type"])
    return event_dict


def _to_plain(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (tuple, set, frozenset)):
        return [_to_plain(v) for v in value]
    if isinstance(value, float) and not math.isfinite(value):
        return None
    return value


def _plain_values(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """RiskLevel -> its value, indicator tuples -> lists, NaN/inf -> null; secrets masked."""
    for key, value in list(event_dict.items()):
        if key in REDACTED_KEYS and value:
            event_dict[key] = "***"
        else:
            event_dict[key] = _to_plain(value)
    return event_dict


def configure_structlog(level: str | None = None, fmt: str | None = None) -> None:
    """
    (Re)configure structlog. Loggers created after this call use the new
    level and renderer; module-level loggers bound earlier keep theirs.
    """
    level_name = (level or DEFAULT_LEVEL).upper()
    level_value = getattr(logging, level_name, logging.INFO)
    renderer_name = (fmt or DEFAULT_FORMAT).strip().lower()

    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _add_timestamp,
        _normalize_event,
        _plain_values,
    ]
    if renderer_name == "console":
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))
    else:
        processors.append(structlog.processors.JSONRenderer())
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Return a structured logger for the given module name.

        logger = get_logger(__name__)
        logger.info("assessment_done", user_id=uid, score=42, risk_level=RiskLevel.MEDIUM)

    JSON line: {"event_type": "assessment_done", "user_id": "...", "score": 42,
    "risk_level": "medium", "timestamp": "...", "level": "info", "logger": "..."}
    """
    return structlog.get_logger(name).bind(logger=name)


def bind_user(user_id: str) -> structlog.BoundLogger:
    """Logger with user_id bound to every subsequent call."""
    return get_logger("backend_txrisk.assessment").bind(user_id=user_id)
