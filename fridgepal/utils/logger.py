"""Logging for the FridgePal recipe pipeline.

LOG_LEVEL (default INFO) and LOG_TYPE (`text` or `json`, default text) select
the level and output format. Generation code logs with
`extra={"request_id": ..., "attempt": ...}` so one request's retry loop can be
followed across lines; both formatters render those extras.
"""

import json
import logging
import os
import sys
from typing import Any, Dict


# LogRecord extras rendered by both formatters, in output order
CONTEXT_FIELDS = ("request_id", "attempt", "kind")

# Third-party loggers that report every HTTP request at INFO
QUIET_LOGGERS = ("google.genai", "httpx")


def request_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Context extras present on `record`, keyed by field name."""
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if hasattr(record, field)}


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message, context, exception."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(request_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        # Extras may hold enums or other non-JSON values
        return json.dumps(log_data, default=str)


class RichTextFormatter(logging.Formatter):
    """Colored single-line text with a level icon and a `[key=value]` context suffix."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "RESET": "\033[0m",
    }

    ICONS = {
        "DEBUG": "🔍",
        "INFO": "ℹ️",
        "WARNING": "⚠️",
        "ERROR": "❌",
    }

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = self.COLORS.get(level, self.COLORS["RESET"])
        icon = self.ICONS.get(level, "")
        timestamp = self.formatTime(record, "%Y-%m-%d %H:%M:%S")

        context = " ".join(f"{key}={value}" for key, value in request_context(record).items())
        suffix = f" [{context}]" if context else ""

        line = f"{color}{icon} {timestamp} {level:<8} {record.name:<24} {record.getMessage()}{suffix}{self.COLORS['RESET']}"
        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def get_logger(name: str) -> logging.Logger:
    """Return the named logger with a stdout handler configured from the environment.

    Idempotent: a logger that already has handlers is returned unchanged.
    Unknown LOG_LEVEL values fall back to INFO.
    """
    logger_instance = logging.getLogger(name)
    if logger_instance.handlers:
        return logger_instance

    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    use_json = os.getenv("LOG_TYPE", "text").lower() == "json"

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if use_json else RichTextFormatter())

    logger_instance.setLevel(log_level)
    logger_instance.addHandler(handler)
    return logger_instance


logger = get_logger("fridgepal")

for _name in QUIET_LOGGERS:
    logging.getLogger(_name).setLevel(logging.WARNING)
