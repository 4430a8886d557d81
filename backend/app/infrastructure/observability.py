"""Structured Logging: one JSON object per line for the request and query logs.

Invariants:
    - Every line carries timestamp, level, logger and message
    - Request fields (method, path, status_code, duration_ms) and store fields
      (rows, book_id, error_code) appear only when the call site set them
    - Timestamp is the record's creation time in UTC, not the formatting time

Design Decisions:
    - Stdlib logging with a small JSONFormatter; text format for local runs and scripts
    - uvicorn.access is silenced: the request middleware in main.py logs each request
"""

import json
import logging
from datetime import datetime, timezone

_EXTRA_FIELDS = (
    "method", "path", "status_code", "duration_ms",
    "error_code", "book_id", "rows",
)

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JSONFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc,
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        log.update(
            (key, record.__dict__[key])
            for key in _EXTRA_FIELDS
            if record.__dict__.get(key) is not None
        )
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


def setup_logging(level: str = "INFO", fmt: str = "json") -> None:
    """Install a single root handler; safe to call more than once."""
    handler = logging.StreamHandler()
    handler.setFormatter(
        JSONFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT),
    )
    logging.root.handlers = [handler]
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
