"""
Structured logging for DocPilot hosts.

Library modules only create loggers; hosts (the API service, the CLI)
call `configure_logging` once to attach a JSON handler to the "docpilot"
logger.
"""
from __future__ import annotations

import json
import logging
from datetime import datetime, timezone


LOGGER_NAME = "docpilot"

# Extra record attributes copied into the JSON entry when present
EXTRA_FIELDS = ("request_id", "document_type", "section_id", "diff_id", "duration_ms")


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for name in EXTRA_FIELDS:
            if hasattr(record, name):
                log_entry[name] = getattr(record, name)
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO") -> logging.Logger:
    """
    Install a JSON stream handler on the "docpilot" logger.

    Calling it again only updates the level.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if not any(isinstance(h.formatter, JSONFormatter) for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(JSONFormatter())
        logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    return logger
