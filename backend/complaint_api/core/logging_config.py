"""
NACOS Complaint System - Logging
Readable text in development, one JSON object per line in production.

Each request gets an ID, and once the bearer token is resolved the account
username and role join it in context, so every record written while serving
that request can be traced back to who made it.
"""

import logging
import sys
import json
import uuid
from datetime import datetime, timezone
from pathlib import Path
from logging.handlers import RotatingFileHandler
from typing import Any, Dict
from contextvars import ContextVar

from complaint_api.core.config import settings


request_id_var: ContextVar[str] = ContextVar('request_id', default='')
account_var: ContextVar[str] = ContextVar('account', default='')
role_var: ContextVar[str] = ContextVar('role', default='')


def get_request_id() -> str:
    return request_id_var.get()


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def generate_request_id() -> str:
    return uuid.uuid4().hex[:8]


def set_account(username: str, role: str) -> None:
    """Tag the rest of this request's records with the authenticated account"""
    account_var.set(username)
    role_var.set(role)


def clear_context() -> None:
    request_id_var.set('')
    account_var.set('')
    role_var.set('')


def request_context() -> Dict[str, str]:
    """Non-empty context values for the current request"""
    context = {
        "request_id": request_id_var.get(),
        "account": account_var.get(),
        "role": role_var.get(),
    }
    return {key: value for key, value in context.items() if value}


# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_ATTRS = set(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'asctime'}


class JSONFormatter(logging.Formatter):
    """Structured output for production log shipping"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
            **request_context(),
        }

        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)

        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _STANDARD_ATTRS and key not in entry and not key.startswith('_')
        )
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    """Text output with the request ID and account filled in"""

    def format(self, record: logging.LogRecord) -> str:
        record.request_id = request_id_var.get() or '-'
        record.account = account_var.get() or '-'
        return super().format(record)


class ComplaintLogger(logging.Logger):
    """
    Logger with one helper per kind of event the API records
    """

    def log_request(self, method: str, path: str, status_code: int,
                    duration_ms: float, **kwargs) -> None:
        """Completed HTTP request; 4xx logs as a warning and 5xx as an error"""
        if status_code >= 500:
            level = logging.ERROR
        elif status_code >= 400:
            level = logging.WARNING
        else:
            level = logging.INFO
        self.log(
            level,
            f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)",
            extra={
                "event_type": "http_request",
                "http_method": method,
                "http_path": path,
                "http_status": status_code,
                "duration_ms": round(duration_ms, 2),
                **kwargs
            }
        )

    def log_auth_event(self, event: str, success: bool, username: str = None,
                       reason: str = None, **kwargs) -> None:
        """Login and registration outcomes"""
        outcome = "succeeded" if success else f"failed ({reason or 'unknown reason'})"
        self.log(
            logging.INFO if success else logging.WARNING,
            f"{event} {outcome} for {username or 'anonymous'}",
            extra={
                "event_type": "auth",
                "auth_event": event,
                "auth_success": success,
                "auth_username": username,
                "failure_reason": reason,
                **kwargs
            }
        )

    def log_complaint_event(self, action: str, complaint_id: str, **kwargs) -> None:
        """A complaint was submitted, changed status or removed"""
        self.info(
            f"Complaint {complaint_id} {action}",
            extra={
                "event_type": "complaint",
                "complaint_action": action,
                "complaint_id": complaint_id,
                **kwargs
            }
        )

    def log_error_with_context(self, error: Exception, context: str = None,
                               **kwargs) -> None:
        """Unhandled error with its traceback"""
        self.error(
            f"Unhandled {type(error).__name__} in {context or 'request'}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def _file_handler(formatter: logging.Formatter, backups: int) -> RotatingFileHandler:
    log_file = Path(settings.LOG_FILE)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(log_file, maxBytes=10 * 1024 * 1024, backupCount=backups)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging() -> ComplaintLogger:
    """Configure the "complaint_api" logger from settings"""
    logging.setLoggerClass(ComplaintLogger)

    logger = logging.getLogger("complaint_api")
    logger.__class__ = ComplaintLogger
    logger.setLevel(getattr(logging, settings.LOG_LEVEL, logging.INFO))
    logger.handlers.clear()
    logger.propagate = False

    json_logging = settings.ENVIRONMENT == "production"
    if json_logging:
        console_formatter = file_formatter = JSONFormatter()
    else:
        console_formatter = ContextualFormatter("%(levelname)-8s | [%(request_id)s] %(message)s")
        file_formatter = ContextualFormatter(
            "%(asctime)s | %(levelname)-8s | [%(request_id)s] [%(account)s] | "
            "%(module)s:%(lineno)d | %(message)s"
        )

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(console_formatter)
    logger.addHandler(console)

    if settings.LOG_FILE:
        logger.addHandler(_file_handler(file_formatter, backups=10 if json_logging else 5))

    for noisy in ("uvicorn.access", "sqlalchemy.engine", "aiosqlite"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    logger.debug(
        "Logging configured",
        extra={"environment": settings.ENVIRONMENT, "json_logging": json_logging}
    )
    return logger


logger: ComplaintLogger = setup_logging()
