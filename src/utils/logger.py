"""Logging infrastructure for the Coffee Composer engine.

Provides centralized logging with configurable format (text/JSON) and level.
Configured via environment variables:
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (default: INFO)
- LOG_TYPE: text, json (default: text)

Engine code tags records with the cup session and the tracking target they
concern by passing them as `extra`:

    logger.debug("Distance 0.05", extra={"session_id": session.session_id, "target_id": "milk"})

Both formatters render that context: JSON as top-level keys, text as a
trailing `[cup=... marker=...]` tag.
"""

import json
import logging
import os
import sys
from typing import Any, Dict

ROOT_LOGGER_NAME = "coffee_composer"

# Record attribute -> label used in the text tag
CONTEXT_FIELDS = {
    "session_id": "cup",
    "target_id": "marker",
}


def record_context(record: logging.LogRecord) -> Dict[str, Any]:
    """Return the engine context attached to a record, in CONTEXT_FIELDS order."""
    return {field: getattr(record, field) for field in CONTEXT_FIELDS if getattr(record, field, None) is not None}


class JSONFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string with timestamp, level, logger name, message, engine
            context (session_id / target_id when present) and optional traceback.
        """
        log_data: Dict[str, Any] = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log_data.update(record_context(record))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


class RichTextFormatter(logging.Formatter):
    """Formatter that outputs colored text with emoji icons and a context tag."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",      # Cyan
        "INFO": "\033[32m",       # Green
        "WARNING": "\033[33m",    # Yellow
        "ERROR": "\033[31m",      # Red
        "RESET": "\033[0m",
    }

    ICONS = {
        "DEBUG": "🔍",
        "INFO": "☕",
        "WARNING": "⚠️",
        "ERROR": "❌",
    }

    @staticmethod
    def context_tag(record: logging.LogRecord) -> str:
        """Render engine context as `[cup=abc123 marker=milk]`, or "" when there is none."""
        context = record_context(record)
        if not context:
            return ""
        return "[" + " ".join(f"{CONTEXT_FIELDS[field]}={value}" for field, value in context.items()) + "]"

    def format(self, record: logging.LogRecord) -> str:
        level = record.levelname
        color = self.COLORS.get(level, self.COLORS["RESET"])
        icon = self.ICONS.get(level, "")
        reset = self.COLORS["RESET"]

        timestamp = self.formatTime(record, "%H:%M:%S")
        tag = self.context_tag(record)
        suffix = f" {tag}" if tag else ""
        # Engine records skip the logger name; anything else is prefixed with it
        origin = "" if record.name == ROOT_LOGGER_NAME else f"{record.name}: "

        message = f"{color}{icon} {timestamp} {level:<8} {origin}{record.getMessage()}{suffix}{reset}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def get_logger(name: str) -> logging.Logger:
    """Create and configure logger instance.

    Args:
        name: Logger name. Engine modules share ROOT_LOGGER_NAME.

    Returns:
        Configured logger instance (handlers are attached once per name).
    """
    logger_instance = logging.getLogger(name)

    if logger_instance.handlers:
        return logger_instance

    log_level = getattr(logging, os.getenv("LOG_LEVEL", "INFO").upper(), logging.INFO)
    log_type = os.getenv("LOG_TYPE", "text").lower()

    logger_instance.setLevel(log_level)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.setFormatter(JSONFormatter() if log_type == "json" else RichTextFormatter())
    logger_instance.addHandler(handler)

    return logger_instance


logger = get_logger(ROOT_LOGGER_NAME)
