"""Structured logging configuration for iREVA.

Settings (see :mod:`ireva.config`):
    IREVA_LOG_FORMAT  -- ``json`` for structured JSON output, ``text`` for human-readable (default).
    IREVA_LOG_LEVEL   -- Python log level name (default: ``INFO``).
"""

from __future__ import annotations

import logging
import traceback
from typing import Any

# Extras promoted to top-level JSON fields when present on a record.
STRUCTURED_FIELDS: tuple[str, ...] = (
    "request_id",
    "path",
    "method",
    "status_code",
    "duration_ms",
    "action",
    "reason",
    "principal_id",
)


class StructuredJsonFormatter(logging.Formatter):
    """JSON formatter that emits one JSON object per log line.

    Uses ``pythonjsonlogger`` under the hood but makes sure the request and
    audit fields in :data:`STRUCTURED_FIELDS` are present when set.
    """

    def __init__(self) -> None:
        super().__init__()
        from pythonjsonlogger.json import JsonFormatter

        self._inner = JsonFormatter(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:  # noqa: A003
        extras: dict[str, Any] = {}
        for key in STRUCTURED_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                extras[key] = value

        # Traceback goes out as a list, not free-form text.
        if record.exc_info and record.exc_info[1] is not None:
            extras["traceback"] = traceback.format_exception(*record.exc_info)
            record.exc_info = None
            record.exc_text = None

        for k, v in extras.items():
            setattr(record, k, v)

        return self._inner.format(record)


def _resolve_level(name: str) -> int:
    numeric = getattr(logging, name.upper(), None)
    if not isinstance(numeric, int):
        return logging.INFO
    return numeric


def setup_logging(level: str = "INFO", fmt: str = "text") -> None:
    """Configure the root logger."""
    numeric = _resolve_level(level)
    root = logging.getLogger()
    root.setLevel(numeric)

    # Remove any existing handlers so we don't double-log during tests.
    root.handlers.clear()

    handler = logging.StreamHandler()
    handler.setLevel(numeric)

    if fmt.lower() == "json":
        handler.setFormatter(StructuredJsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(name)s] %(message)s"))

    root.addHandler(handler)


def log_startup_info(algorithm: str, clock_skew_seconds: int) -> None:
    """Emit a structured startup log line with the auth configuration."""
    import ireva

    logger = logging.getLogger("ireva")
    logger.info(
        "iREVA authorization service started",
        extra={
            "version": ireva.__version__,
            "jwt_algorithm": algorithm,
            "clock_skew_seconds": clock_skew_seconds,
        },
    )
