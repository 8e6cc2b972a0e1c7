"""
Structured logging support.

Provides JSON-formatted logging when enabled via SUBROUTER_LOG_FORMAT=json.
Routing decisions are logged with structured fields (subdomain, route_path,
rewrite target) and a request id for correlation.
"""

import json
import logging
import os
import sys
from datetime import datetime
from typing import Any

# LogRecord attributes that are never copied into the JSON payload
_RESERVED_FIELDS = {
    "name",
    "msg",
    "args",
    "created",
    "filename",
    "funcName",
    "levelname",
    "levelno",
    "lineno",
    "module",
    "msecs",
    "message",
    "pathname",
    "process",
    "processName",
    "relativeCreated",
    "thread",
    "threadName",
    "taskName",
    "exc_info",
    "exc_text",
    "stack_info",
    "request_id",
}


class JSONFormatter(logging.Formatter):
    """
    JSON log formatter for structured logging.

    Outputs logs in JSON format with structured fields:
    - timestamp: ISO 8601 timestamp
    - level: Log level
    - logger: Logger name
    - message: Log message
    - request_id: Optional request ID for correlation
    - any ``extra`` fields passed to the logger (e.g. subdomain, rewrite_to)
    """

    def format(self, record: logging.LogRecord) -> str:
        dt = datetime.fromtimestamp(record.created)
        timestamp = dt.strftime("%Y-%m-%dT%H:%M:%S") + f".{int(record.msecs):03d}Z"

        log_entry: dict[str, Any] = {
            "timestamp": timestamp,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = getattr(record, "request_id", None)
        if request_id:
            log_entry["request_id"] = request_id

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_FIELDS and not key.startswith("_"):
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


def configure_structured_logging(level: str = "INFO", log_file: str | None = None, force: bool = True) -> None:
    """
    Configure structured JSON logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Optional path to log file
        force: Force reconfiguration of root logger
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(JSONFormatter())
    handlers: list[logging.Handler] = [console_handler]

    if log_file:
        try:
            file_handler = logging.FileHandler(log_file)
        except OSError as e:
            print(f"Warning: Could not open log file {log_file}: {e}", file=sys.stderr)
        else:
            file_handler.setFormatter(JSONFormatter())
            handlers.append(file_handler)

    logging.basicConfig(level=level.upper(), handlers=handlers, force=force)


def is_json_logging_enabled() -> bool:
    """True if SUBROUTER_LOG_FORMAT=json."""
    return os.getenv("SUBROUTER_LOG_FORMAT", "text").lower() == "json"


def setup_logging(level: str | None = None, log_file: str | None = None, force: bool = True) -> None:
    """
    Setup logging based on environment variables.

    Environment variables:
    - SUBROUTER_LOG_FORMAT: "json" or "text" (default: text)
    - SUBROUTER_LOG_LEVEL: Log level (default: INFO)
    - SUBROUTER_LOG_FILE: Optional log file path

    Args:
        level: Override log level (uses SUBROUTER_LOG_LEVEL if None)
        log_file: Override log file (uses SUBROUTER_LOG_FILE if None)
        force: Force reconfiguration of root logger
    """
    if level is None:
        level = os.getenv("SUBROUTER_LOG_LEVEL", "INFO")

    if log_file is None:
        log_file = os.getenv("SUBROUTER_LOG_FILE")

    if is_json_logging_enabled():
        configure_structured_logging(level=level, log_file=log_file, force=force)
        return

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        try:
            handlers.append(logging.FileHandler(log_file))
        except OSError as e:
            print(f"Warning: Could not open log file {log_file}: {e}", file=sys.stderr)

    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s - %(message)s",
        handlers=handlers,
        force=force,
    )


class RequestLogger:
    """
    Logger wrapper that tags every record with a request id.

    When ``enabled`` is False every call is a no-op, which is how the router's
    ``debug`` flag switches decision logging on and off.

    Usage:
        logger = logging.getLogger(__name__)
        log = RequestLogger(logger, request_id="abc123", enabled=debug)
        log.info("Rewriting", extra={"rewrite_to": "/blog/post"})
    """

    def __init__(self, logger: logging.Logger, request_id: str, enabled: bool = True):
        self.logger = logger
        self.request_id = request_id
        self.enabled = enabled

    def _log(self, level: int, msg: str, *args, **kwargs):
        if not self.enabled:
            return
        extra = dict(kwargs.get("extra") or {})
        extra["request_id"] = self.request_id
        kwargs["extra"] = extra
        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self._log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self._log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self._log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self._log(logging.ERROR, msg, *args, **kwargs)
