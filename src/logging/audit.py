"""Structured JSON audit logging for the travel proxy.

Logs go to stdout as JSON lines, with optional file output via the
AUDIT_LOG_FILE env var. Every entry carries the request id and the
client key of the request being served, so a single client's traffic
can be followed across rate-limit and upstream events.

Upstream credentials must never reach the log stream: any audit field
whose name looks like a credential is masked before serialization.
"""

import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from src.config.settings import get_settings

LOGGER_NAME = "proxy.audit"

# Request-scoped context for correlating log entries
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
client_key_var: ContextVar[str] = ContextVar("client_key", default="")

_SENSITIVE_MARKERS = ("key", "secret", "token", "authorization", "password")
MASK = "***"


def _mask_sensitive(data: dict) -> dict:
    masked = {}
    for name, value in data.items():
        if any(marker in name.lower() for marker in _SENSITIVE_MARKERS) and name != "client_key":
            masked[name] = MASK
        elif isinstance(value, dict):
            masked[name] = _mask_sensitive(value)
        else:
            masked[name] = value
    return masked


class JSONFormatter(logging.Formatter):
    """Formats log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": request_id_var.get(""),
            "client_key": client_key_var.get(""),
        }
        if hasattr(record, "audit_data"):
            log_entry.update(_mask_sensitive(record.audit_data))
        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry, default=str)


def setup_logging() -> None:
    """Configure the audit logger with JSON output."""
    settings = get_settings()

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    logger.handlers.clear()

    formatter = JSONFormatter()

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)
    logger.addHandler(stdout_handler)

    if settings.audit_log_file:
        file_handler = logging.FileHandler(settings.audit_log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    logger.propagate = False


def get_audit_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:12]


class RequestTimer:
    """Context manager to measure upstream latency."""

    def __init__(self):
        self.start_time: float = 0
        self.elapsed_ms: float = 0

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, *args):
        self.elapsed_ms = round((time.perf_counter() - self.start_time) * 1000, 2)
