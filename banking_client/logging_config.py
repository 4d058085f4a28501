"""
Structured Logging Configuration Module

Provides JSON-formatted structured logging for all client operations.
Credential material never reaches a log record.
"""

import logging
import json
from datetime import datetime, timezone
from typing import Optional

REDACTED_KEYS = frozenset({"password", "credential", "credentials"})


def _redact(payload):
    if isinstance(payload, dict):
        return {k: ("***" if str(k).lower() in REDACTED_KEYS else _redact(v)) for k, v in payload.items()}
    return payload


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record):
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "module": record.module if hasattr(record, 'module') else record.name,
            "logger": record.name,
            "message": record.getMessage(),
            "username": getattr(record, 'username', None),
            "action": getattr(record, 'action', None),
            "endpoint": getattr(record, 'endpoint', None),
            "status": getattr(record, 'status', None),
            "extra": _redact(getattr(record, 'extra', None))
        }

        # Remove None values
        log_entry = {k: v for k, v in log_entry.items() if v is not None}

        # Add exception info if present
        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def setup_logging(level: str = "INFO", logger_name: str = "banking_client",
                  log_format: str = "json") -> logging.Logger:
    """
    Setup structured logging for the client.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        logger_name: Name of the logger
        log_format: "json" for structured output, "text" for plain lines

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(logger_name)

    # Remove existing handlers to avoid duplicates
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler()
    if log_format.lower() == "text":
        handler.setFormatter(logging.Formatter(TEXT_FORMAT))
    else:
        handler.setFormatter(JSONFormatter())

    logger.addHandler(handler)
    logger.setLevel(getattr(logging, level.upper()))

    # Prevent propagation to avoid duplicate logs
    logger.propagate = False

    return logger


def get_logger(name: str = "banking_client") -> logging.Logger:
    """Get logger instance"""
    return logging.getLogger(name)


def log_action(logger: logging.Logger, level: str, message: str,
               username: Optional[str] = None, action: Optional[str] = None,
               endpoint: Optional[str] = None, status: Optional[int] = None,
               extra: Optional[dict] = None):
    """
    Log a client action with structured data.

    Args:
        logger: Logger instance
        level: Log level (info, warning, error, etc.)
        message: Log message
        username: User the action was performed for
        action: Action being performed
        endpoint: API endpoint involved
        status: HTTP status, when there was a response
        extra: Additional structured data (password keys are masked)
    """
    levelno = getattr(logging, level.upper())
    if not logger.isEnabledFor(levelno):
        return

    record = logger.makeRecord(
        logger.name, levelno,
        __name__, 0, message, (), None
    )

    # Add custom fields
    if username:
        record.username = username
    if action:
        record.action = action
    if endpoint:
        record.endpoint = endpoint
    if status is not None:
        record.status = status
    if extra:
        record.extra = _redact(extra)

    logger.handle(record)
