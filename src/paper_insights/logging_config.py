"""JSON logging setup for the insights pipeline and its audit trail."""

from __future__ import annotations

import json
import logging
import logging.config
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

AUDIT_LOGGER_NAME = "paper_insights.audit"
AUDIT_LOG_FILE = "insights_audit.log"

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_STANDARD_ATTRS = frozenset(logging.LogRecord("", logging.INFO, "", 0, "", (), None).__dict__) | {
    "message",
    "asctime",
}


class MinimalJSONFormatter(logging.Formatter):
    """Render each record as one JSON object per line.

    Dict messages (telemetry events, audit entries) are merged into the
    top-level object; ``extra`` fields are appended as-is.
    """

    def format(self, record: logging.LogRecord) -> str:  # noqa: D401 - inherited
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "ts": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
        }

        if isinstance(record.msg, dict):
            entry.update(record.msg)
        else:
            text = record.getMessage()
            if text:
                entry["message"] = text

        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_ATTRS and not key.startswith("_")
        )
        if record.exc_info and "exc" not in entry:
            entry["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


def build_logging_config(level: str, log_dir: Path | None) -> dict[str, Any]:
    """Return a ``dictConfig`` payload; without ``log_dir`` audit lines go to stderr."""

    handlers: dict[str, Any] = {
        "console": {"class": "logging.StreamHandler", "formatter": "json"},
    }
    audit: dict[str, Any] = {"level": "INFO", "handlers": ["console"], "propagate": False}
    if log_dir is not None:
        handlers["audit_file"] = {
            "class": "logging.FileHandler",
            "filename": str(log_dir / AUDIT_LOG_FILE),
            "mode": "a",
            "encoding": "utf-8",
            "formatter": "json",
        }
        audit["handlers"] = ["audit_file"]

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"json": {"()": MinimalJSONFormatter}},
        "handlers": handlers,
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {AUDIT_LOGGER_NAME: audit},
    }


def configure_logging(level: str | None = None, log_dir: str | Path | None = None) -> None:
    """Install JSON logging; ``LOG_LEVEL`` and ``LOG_DIR`` fill in missing arguments."""

    resolved_level = (level or os.getenv("LOG_LEVEL") or "INFO").strip().upper()
    directory = Path(log_dir or os.getenv("LOG_DIR") or "logs")
    directory.mkdir(parents=True, exist_ok=True)
    logging.config.dictConfig(build_logging_config(resolved_level, directory))


__all__ = [
    "AUDIT_LOGGER_NAME",
    "AUDIT_LOG_FILE",
    "MinimalJSONFormatter",
    "build_logging_config",
    "configure_logging",
]
