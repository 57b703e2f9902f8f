"""Structured Logging: JSON formatter and setup for the tracker process.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Extra fields (operation, entity, entity_id, error_code) surfaced when present
    - JSON format by default, human-readable when log_format == "text"

Design Decisions:
    - JSONFormatter on stdlib logging: no extra dependency for a single-process store
    - setup_logging called once by bootstrap.open_tracker; repeated calls do not stack handlers
"""

import json
import logging
from datetime import datetime, timezone

EXTRA_FIELDS = ("operation", "entity", "entity_id", "error_code")


class JSONFormatter(logging.Formatter):
    """Format logs as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging. Replaces a handler installed by an earlier call."""
    handler = logging.StreamHandler()
    handler.set_name("tracker")
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s",
        ))
    for existing in list(logging.root.handlers):
        if existing.get_name() == "tracker":
            logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
