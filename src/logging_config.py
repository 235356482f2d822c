"""Structured logging for the dashboard API.

In dev: human-readable lines tagged with the request ID
In prod (LOG_FORMAT=json): JSON lines for log aggregators
"""
from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone

from config.settings import settings
from src.middleware.request_id import request_id_var


class RequestIDFilter(logging.Filter):
    """Stamp every record with the ID of the request being served (or "-")."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """Emit structured JSON log lines."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", "-"),
        }
        for key in ("resource", "reason", "endpoint"):
            if hasattr(record, key):
                log[key] = getattr(record, key)
        if record.exc_info and record.exc_info[1]:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, default=str)


def setup_logging(log_format: str | None = None, log_level: str | None = None) -> None:
    """Configure the root logger from settings (overridable for tests)."""
    log_format = log_format or settings.LOG_FORMAT
    log_level = (log_level or settings.LOG_LEVEL).upper()

    root = logging.getLogger()
    root.setLevel(getattr(logging, log_level, logging.INFO))

    root.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.addFilter(RequestIDFilter())
    if log_format == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)-8s [%(request_id)s] %(name)s: %(message)s",
            datefmt="%H:%M:%S",
        ))

    root.addHandler(handler)

    # Quiet noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
