"""
Classdesk - Logging

One "classdesk" logger for the whole service. Every record carries the
request id and user id of the request it was emitted in. Production writes
one JSON object per line; other environments write aligned text.
"""

import json
import logging
import sys
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import settings


LOGGER_NAME = "classdesk"

request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_user_id() -> str:
    return user_id_var.get()


def set_user_id(user_id: str) -> None:
    user_id_var.set(user_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


# Structured keys passed through `extra=`; only these are serialized
EVENT_FIELDS = (
    "event_type",
    "http_method", "http_path", "http_status", "duration_ms",
    "db_event", "db_state",
    "auth_event", "auth_success", "user_email", "failure_reason",
    "error_type", "error_context",
    "content_length", "max_size",
)


class JSONFormatter(logging.Formatter):
    """One JSON object per record, with event fields flattened in"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "request_id": get_request_id() or None,
            "user_id": get_user_id() or None,
        }
        for key in EVENT_FIELDS:
            if key in record.__dict__:
                entry[key] = record.__dict__[key]
        for key, value in getattr(record, "event_extra", {}).items():
            entry.setdefault(key, value)
        if record.exc_info:
            entry["traceback"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Text formatter exposing %(request_id)s and %(user_id)s"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = get_request_id() or "-"
        record.user_id = get_user_id() or "-"
        return super().format(record)


class ClassdeskLogger(logging.Logger):
    """Logger with one helper per kind of event Classdesk reports"""

    def _event(self, level: int, message: str, fields: Dict[str, Any],
               extra: Dict[str, Any], exc_info: Any = None) -> None:
        self.log(level, message, exc_info=exc_info, extra={**fields, "event_extra": extra})

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        self._event(
            logging.INFO,
            f"HTTP {method} {path} - {status_code} ({duration_ms:.2f}ms)",
            {
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
            },
            kwargs,
        )

    def log_db_event(self, event: str, state: str, level: int = logging.INFO, **kwargs) -> None:
        """Connection lifecycle: connected, connection lost, reconnected..."""
        self._event(
            level,
            f"MongoDB {event} (state: {state})",
            {"event_type": "db_connection", "db_event": event, "db_state": state},
            kwargs,
        )

    def log_auth_event(self, event: str, success: bool, user_email: Optional[str] = None,
                       reason: Optional[str] = None, **kwargs) -> None:
        outcome = "success" if success else "failed"
        details = " - ".join(part for part in (user_email, reason) if part)
        self._event(
            logging.INFO if success else logging.WARNING,
            f"Auth {event}: {outcome}" + (f" - {details}" if details else ""),
            {
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "user_email": user_email,
                "failure_reason": reason,
            },
            kwargs,
        )

    def log_error_with_context(self, error: Exception, context: Optional[str] = None,
                               **kwargs) -> None:
        self._event(
            logging.ERROR,
            f"Error in {context}: {type(error).__name__}: {error}",
            {"event_type": "error", "error_type": type(error).__name__, "error_context": context},
            kwargs,
            exc_info=error,
        )


TEXT_FORMAT = "%(levelname)-8s | [%(request_id)s] %(message)s"
FILE_TEXT_FORMAT = "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(user_id)s] | %(module)s:%(lineno)d | %(message)s"


def setup_logging(
    level: Optional[str] = None,
    json_output: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> ClassdeskLogger:
    """Configure the classdesk logger; arguments default to settings"""
    level = level or settings.LOG_LEVEL
    json_output = settings.ENVIRONMENT == "production" if json_output is None else json_output
    log_file = settings.LOG_FILE if log_file is None else log_file

    logging.setLoggerClass(ClassdeskLogger)
    logger = logging.getLogger(LOGGER_NAME)
    logger.__class__ = ClassdeskLogger  # in case it was created before setLoggerClass
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    logger.handlers.clear()

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(JSONFormatter() if json_output else ContextualFormatter(TEXT_FORMAT))
    logger.addHandler(console)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(path, maxBytes=10 * 1024 * 1024, backupCount=5)
        file_handler.setFormatter(JSONFormatter() if json_output else ContextualFormatter(FILE_TEXT_FORMAT))
        logger.addHandler(file_handler)

    logging.getLogger("pymongo").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    return logger


logger: ClassdeskLogger = setup_logging()


__all__ = [
    "logger",
    "setup_logging",
    "get_request_id",
    "set_request_id",
    "get_user_id",
    "set_user_id",
    "generate_request_id",
    "ClassdeskLogger",
    "JSONFormatter",
    "ContextualFormatter",
]
