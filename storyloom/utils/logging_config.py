"""
Structured JSON logging configuration for Storyloom.

All log records under the ``storyloom`` namespace are emitted as single-line
JSON objects to the configured log file and (WARNING and above) to stderr.

Usage::

    from storyloom.utils.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("context built", extra={"chapter_id": 5, "tokens_used": 812})
    # {"ts": ..., "chapter_id": 5, "build": {"tokens_used": 812}, ...}

For code that works on a single chapter and wants ``chapter_id`` on every
record::

    from storyloom.utils.logging_config import get_logger, ChapterAdapter

    logger = ChapterAdapter(get_logger("storyloom.context"), chapter_id=5)
    logger.info("layer assembled")     # automatically includes chapter_id
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, MutableMapping


# Record attributes emitted at the top level of the JSON payload
_TOP_LEVEL_KEYS = ("chapter_id", "event_type", "metadata")

# Context-build telemetry, grouped under "build"
BUILD_KEYS = (
    "mode", "budget", "tokens_used", "item_count", "truncated", "dropped", "duration_ms",
)


# ---------------------------------------------------------------------------
# JSON formatter
# ---------------------------------------------------------------------------

class JSONFormatter(logging.Formatter):
    """Emits each record as a single-line JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key in _TOP_LEVEL_KEYS:
            val = getattr(record, key, None)
            if val is not None:
                entry[key] = val

        build = {
            key: getattr(record, key) for key in BUILD_KEYS
            if getattr(record, key, None) is not None
        }
        if build:
            entry["build"] = build

        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


# ---------------------------------------------------------------------------
# ChapterAdapter: attaches chapter_id to every log call
# ---------------------------------------------------------------------------

class ChapterAdapter(logging.LoggerAdapter):
    """Logger adapter that injects ``chapter_id`` into every record."""

    def __init__(self, logger: logging.Logger, chapter_id: int):
        super().__init__(logger, {"chapter_id": chapter_id})

    def process(
        self,
        msg: str,
        kwargs: MutableMapping[str, Any],
    ) -> tuple[str, MutableMapping[str, Any]]:
        extra = kwargs.setdefault("extra", {})
        extra.update(self.extra)
        return msg, kwargs


# ---------------------------------------------------------------------------
# Setup
# ---------------------------------------------------------------------------

_CONFIGURED = False


def setup_logging(log_file: str | None = None, level: int | str | None = None) -> None:
    """Configure the root ``storyloom`` logger with JSON handlers.

    Defaults come from :func:`storyloom.config.get_settings`. Safe to call
    multiple times; only the first call has effect.
    """
    global _CONFIGURED
    if _CONFIGURED:
        return
    _CONFIGURED = True

    from storyloom.config import get_settings
    settings = get_settings()
    if log_file is None:
        log_file = settings.log_file
    if level is None:
        level = settings.log_level

    root = logging.getLogger("storyloom")
    root.setLevel(level)
    root.propagate = False

    formatter = JSONFormatter()

    if log_file:
        fh = logging.FileHandler(log_file, encoding="utf-8")
        fh.setFormatter(formatter)
        root.addHandler(fh)

    # Stderr handler, for docker / systemd journal visibility
    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(formatter)
    sh.setLevel(logging.WARNING)
    root.addHandler(sh)


def get_logger(name: str = "storyloom") -> logging.Logger:
    """Return a child logger under the ``storyloom`` namespace.

    Automatically calls :func:`setup_logging` on first use.
    """
    setup_logging()
    if name.startswith("storyloom"):
        return logging.getLogger(name)
    return logging.getLogger(f"storyloom.{name}")
