"""
Dashboard client logging.

Structured helpers on a Logger subclass, JSON lines when NACOS_LOG_FORMAT=json
and readable text otherwise. The section on screen is kept in a context
variable and stamped on every record.
"""

import logging
import os
import sys
import json
from datetime import datetime, timezone
from typing import Any, Dict
from contextvars import ContextVar


section_var: ContextVar[str] = ContextVar('section', default='')


def get_current_section() -> str:
    return section_var.get()


def set_current_section(section: str) -> None:
    section_var.set(section)


_BUILTIN_ATTRS = frozenset(vars(logging.LogRecord('', 0, '', 0, '', None, None))) | {'message', 'section'}


class JSONFormatter(logging.Formatter):
    """One JSON object per record"""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "section": get_current_section() or None,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[0]:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            (key, value) for key, value in vars(record).items()
            if key not in _BUILTIN_ATTRS and not key.startswith('_')
        )
        return json.dumps(entry, default=str)


class ContextualFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        record.section = get_current_section() or '-'
        return super().format(record)


class DashboardLogger(logging.Logger):
    """Logger with helpers for navigation, cache and error events"""

    def log_navigation(self, section: str, event: str, duration_ms: float = None,
                       **kwargs) -> None:
        timing = "" if duration_ms is None else f" ({duration_ms:.2f}ms)"
        self.info(
            f"Navigation {event}: {section}{timing}",
            extra={
                "event_type": "navigation",
                "nav_event": event,
                "nav_section": section,
                "duration_ms": duration_ms,
                **kwargs
            }
        )

    def log_cache_event(self, section: str, event: str, **kwargs) -> None:
        self.debug(
            f"Cache {event}: {section}",
            extra={"event_type": "cache", "cache_event": event, "cache_section": section, **kwargs}
        )

    def log_error_with_context(self, error: BaseException, context: str = None,
                               **kwargs) -> None:
        """Error with its traceback, tagged with where it was caught"""
        self.error(
            f"{type(error).__name__} in {context or 'dashboard'}: {error}",
            exc_info=error,
            extra={
                "event_type": "error",
                "error_type": type(error).__name__,
                "error_context": context,
                **kwargs
            }
        )


def setup_logging(level: str = None, fmt: str = None) -> DashboardLogger:
    """Configure the dashboard logger from arguments or NACOS_LOG_LEVEL / NACOS_LOG_FORMAT"""
    level = (level or os.environ.get("NACOS_LOG_LEVEL", "WARNING")).upper()
    fmt = (fmt or os.environ.get("NACOS_LOG_FORMAT", "text")).lower()

    logging.setLoggerClass(DashboardLogger)

    logger = logging.getLogger("dashboard")
    logger.__class__ = DashboardLogger
    logger.setLevel(getattr(logging, level, logging.WARNING))
    logger.handlers.clear()

    if fmt == "json":
        formatter = JSONFormatter()
    else:
        formatter = ContextualFormatter("%(levelname)-8s | [%(section)s] %(message)s")

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    for noisy in ("httpx", "httpcore"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    return logger


logger: DashboardLogger = setup_logging()


__all__ = [
    'logger',
    'setup_logging',
    'get_current_section',
    'set_current_section',
    'DashboardLogger',
    'JSONFormatter',
    'ContextualFormatter',
]
