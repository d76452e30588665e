# whisper_hub/logging_core/logger.py
"""
Centralized structured logging setup for the post-action engine.

Provides loggers that emit JSON lines with mandatory fields:
- timestamp (ISO)
- run_id
- action_name (optional, filled by caller)
- event_type (action_start/success/failure/attempt_failed/retry/fallback)
- level
- message
- metadata (dict)

All logs in the engine MUST go through get_logger() / log_event().
Transcript and prompt text are never logged, only their lengths.
"""

from __future__ import annotations

import json
import logging
import sys
import threading
from datetime import datetime, timezone
from typing import IO, Any, Dict, List, MutableMapping, Tuple
from uuid import UUID


ROOT_LOGGER_NAME = "whisper_hub.post_actions"
_CONFIGURE_LOCK = threading.RLock()


class JSONFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_record: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "message": record.getMessage(),
        }

        if hasattr(record, "run_id"):
            log_record["run_id"] = str(record.run_id)

        extra_fields = ["action_name", "event_type", "metadata"]
        for field in extra_fields:
            value = getattr(record, field, None)
            if value is not None:
                log_record[field] = value

        if record.exc_info:
            log_record["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(log_record, ensure_ascii=False, default=str)


class RunLoggerAdapter(logging.LoggerAdapter):
    """Binds a run_id to every record while keeping per-call extra fields."""

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        extra = dict(self.extra or {})
        extra.update(kwargs.get("extra") or {})
        kwargs["extra"] = extra
        return msg, kwargs


def configure_logging(level: int = logging.INFO, stream: IO[str] | None = None) -> logging.Logger:
    """
    Install the JSON handler on the engine's root logger (idempotent).

    Logs go to stderr by default so JSON written to stdout by callers stays parseable.
    Calling again replaces the stream and level.
    """
    base = logging.getLogger(ROOT_LOGGER_NAME)
    with _CONFIGURE_LOCK:
        base.setLevel(level)
        base.propagate = False

        for handler in json_handlers(base):
            base.removeHandler(handler)

        handler = logging.StreamHandler(stream or sys.stderr)
        handler.setFormatter(JSONFormatter())
        handler._whisper_hub_json = True  # type: ignore[attr-defined]
        base.addHandler(handler)
    return base


def json_handlers(base: logging.Logger) -> List[logging.Handler]:
    """Handlers installed by configure_logging(); other handlers are left alone."""
    return [h for h in base.handlers if getattr(h, "_whisper_hub_json", False)]


def get_logger(run_id: UUID | str) -> RunLoggerAdapter:
    """
    Return a logger bound to the given action run.

    The underlying logger is shared; only the run_id binding is per call, so
    concurrent runs never touch each other's state.
    """
    base = logging.getLogger(ROOT_LOGGER_NAME)
    if not json_handlers(base):
        with _CONFIGURE_LOCK:
            if not json_handlers(base):
                configure_logging()
    return RunLoggerAdapter(base, {"run_id": str(run_id)})


def log_event(
    logger: logging.Logger | logging.LoggerAdapter,
    level: int,
    message: str,
    *,
    event_type: str,
    action_name: str | None = None,
    metadata: Dict[str, Any] | None = None,
) -> None:
    """
    Convenience wrapper for structured logging.

    Use this inside the engine for consistency.
    """
    extra: Dict[str, Any] = {"event_type": event_type}
    if action_name:
        extra["action_name"] = action_name
    if metadata:
        extra["metadata"] = metadata

    logger.log(level, message, extra=extra)


# High-Level Intent
# logging_core/logger.py is the single structured logging facility for the engine.
# Every record is one JSON object per line carrying run_id, action_name,
# event_type and metadata, so a fallback can be traced back to the attempts
# that caused it.

# Architecture

# JSONFormatter renders records.
# configure_logging() installs exactly one JSON handler on the engine root logger.
# get_logger(run_id) wraps the root logger in a RunLoggerAdapter bound to run_id.
# log_event() is the only call sites use.

# Levels
# INFO for progress, WARNING for degradation (retry, fallback), ERROR for hard failure.

# Extension Points

# Swap the handler for file or remote output via configure_logging(stream=...).
