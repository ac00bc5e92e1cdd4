"""
Notification/Error Surface.

notify() shows a short-lived toast. report_error() shows a friendly message
chosen from the error's context and hands a structured record to a sink
(the dashboard logger unless one is injected). Global handlers funnel
uncaught exceptions and failed asyncio tasks into report_error().
"""

import asyncio
import sys
import traceback
from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from rich.console import Console

from dashboard.clock import Clock
from dashboard.errors import DashboardError, HttpError, NetworkError
from dashboard.logging_config import logger


class NotificationKind(str, Enum):
    ERROR = "error"
    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"


TOAST_STYLES = {
    NotificationKind.ERROR: ("✗", "bold red"),
    NotificationKind.SUCCESS: ("✓", "bold green"),
    NotificationKind.INFO: ("ℹ", "cyan"),
    NotificationKind.WARNING: ("!", "yellow"),
}

CONTEXT_MESSAGES = {
    "navigation": "Failed to load section. Returning to dashboard.",
    "section-init": "Failed to initialize this section.",
    "section-refresh": "Failed to refresh this section.",
    "section-cleanup": "A problem occurred while leaving the previous section.",
    "api": "Request failed. Please try again.",
    "uncaught": "An unexpected error occurred.",
}
GENERIC_MESSAGE = "Something went wrong. Please try again."

HTTP_MESSAGES = {
    401: "Session expired. Please log in again.",
    403: "You do not have permission to perform this action.",
    404: "The requested resource was not found.",
    500: "Server error. Please try again later.",
}


@dataclass
class Toast:
    kind: NotificationKind
    message: str
    created_at: int
    expires_at: int

    def is_active(self, now_ms: int) -> bool:
        return now_ms < self.expires_at


@dataclass
class ErrorRecord:
    kind: str
    message: str
    stack: str
    location: str
    timestamp: str
    context: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def console_presenter(console: Optional[Console] = None) -> Callable[[Toast], None]:
    """Print toasts to a rich console"""
    console = console or Console(stderr=True)

    def present(toast: Toast) -> None:
        icon, style = TOAST_STYLES.get(toast.kind, ("•", ""))
        console.print(f"[{style}]{icon} {toast.message}[/{style}]" if style else f"{icon} {toast.message}")

    return present


def logging_sink(record: ErrorRecord, error: Optional[BaseException] = None) -> None:
    """Default sink: the dashboard logger"""
    if error is not None:
        logger.log_error_with_context(error, context=record.context, location=record.location,
                                      error_kind=record.kind)
    else:
        logger.error(record.message, extra={"event_type": "error", "error_kind": record.kind,
                                            "error_context": record.context, "location": record.location})


def user_message(context: str, error: BaseException) -> str:
    """Message safe to show the user; never includes a traceback"""
    if isinstance(error, HttpError) and error.status in HTTP_MESSAGES and context in ("api", "uncaught"):
        return HTTP_MESSAGES[error.status]
    if isinstance(error, NetworkError) and context in ("api", "uncaught"):
        return error.message
    return CONTEXT_MESSAGES.get(context, GENERIC_MESSAGE)


class Notifier:
    """User-facing toasts plus structured error reporting"""

    def __init__(
        self,
        clock: Clock,
        presenter: Optional[Callable[[Toast], None]] = None,
        sink: Optional[Callable[[ErrorRecord, Optional[BaseException]], None]] = None,
        location_provider: Optional[Callable[[], str]] = None,
        duration_ms: int = 5_000,
    ):
        self._clock = clock
        self._presenter = presenter if presenter is not None else console_presenter()
        self._sink = sink if sink is not None else logging_sink
        self._location_provider = location_provider or (lambda: "")
        self.duration_ms = duration_ms
        self._toasts: List[Toast] = []
        self._previous_excepthook = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._previous_loop_handler = None

    def set_location_provider(self, provider: Callable[[], str]) -> None:
        self._location_provider = provider

    def notify(self, kind, message: str) -> Toast:
        kind = NotificationKind(kind)
        now = self._clock.now_ms()
        toast = Toast(kind=kind, message=message, created_at=now, expires_at=now + self.duration_ms)
        self._toasts = [t for t in self._toasts if t.is_active(now)]
        self._toasts.append(toast)
        self._presenter(toast)
        return toast

    def active_toasts(self) -> List[Toast]:
        now = self._clock.now_ms()
        return [t for t in self._toasts if t.is_active(now)]

    def dismiss_all(self) -> None:
        self._toasts = []

    def report_error(self, context: str, error: BaseException) -> ErrorRecord:
        message = user_message(context, error)
        self.notify(NotificationKind.ERROR, message)

        record = ErrorRecord(
            kind=error.kind if isinstance(error, DashboardError) else type(error).__name__,
            message=str(error),
            stack="".join(traceback.format_exception(type(error), error, error.__traceback__)),
            location=self._location_provider(),
            timestamp=datetime.now(timezone.utc).isoformat(),
            context=context,
        )
        try:
            self._sink(record, error)
        except Exception as sink_error:
            logger.warning(f"Error sink failed: {sink_error}")
        return record

    def warn(self, warning: DashboardError) -> Toast:
        """Advisory notice; logged but not treated as a failure"""
        logger.warning(warning.message, extra={"event_type": "warning", "warning_kind": warning.kind,
                                               "warning_details": warning.details})
        return self.notify(NotificationKind.WARNING, warning.message)

    # ------------------------------------------------------------------
    # Global handlers
    # ------------------------------------------------------------------

    def install_global_handlers(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Route uncaught exceptions and unhandled task errors here"""
        if self.handlers_installed:
            return
        self._previous_excepthook = sys.excepthook
        sys.excepthook = self._excepthook

        if loop is not None:
            self._loop = loop
            self._previous_loop_handler = loop.get_exception_handler()
            loop.set_exception_handler(self._loop_exception_handler)

    @property
    def handlers_installed(self) -> bool:
        return self._previous_excepthook is not None

    def uninstall_global_handlers(self) -> None:
        if self._previous_excepthook is not None:
            sys.excepthook = self._previous_excepthook
            self._previous_excepthook = None
        if self._loop is not None:
            self._loop.set_exception_handler(self._previous_loop_handler)
            self._loop = None
            self._previous_loop_handler = None

    def _excepthook(self, exc_type, exc_value, exc_tb) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return
        self.report_error("uncaught", exc_value)

    def _loop_exception_handler(self, loop: asyncio.AbstractEventLoop, context: Dict[str, Any]) -> None:
        error = context.get("exception")
        if error is None:
            error = RuntimeError(context.get("message", "Unhandled asynchronous error"))
        self.report_error("uncaught", error)
