"""
Client-side error taxonomy.

NetworkError   the request never reached the server
HttpError      the server answered with a failure status
RenderError    a section's markup loaded but its init hook failed
TimeoutWarning loading outlived the failsafe window (advisory only)
"""

from typing import Any, Dict, Optional


class DashboardError(Exception):
    """Base exception for dashboard client errors"""

    kind = "error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "message": self.message,
            "details": self.details,
        }


class NetworkError(DashboardError):
    """Request failed before a response arrived"""

    kind = "network"

    def __init__(self, message: str = "Network error. Please check your connection.",
                 url: Optional[str] = None):
        super().__init__(message, details={"url": url} if url else None)
        self.url = url


class HttpError(DashboardError):
    """Server responded with a non-success status"""

    kind = "http"

    def __init__(self, status: int, message: str, body: Any = None, url: Optional[str] = None):
        super().__init__(message, details={"status": status, "url": url})
        self.status = status
        self.body = body
        self.url = url

    @property
    def is_unauthorized(self) -> bool:
        return self.status == 401

    @property
    def is_forbidden(self) -> bool:
        return self.status == 403

    @property
    def is_not_found(self) -> bool:
        return self.status == 404

    def __repr__(self):
        return f"HttpError({self.status}, {self.message!r})"


class RenderError(DashboardError):
    """A section's init or refresh hook raised"""

    kind = "render"

    def __init__(self, section: str, cause: BaseException, phase: str = "init"):
        super().__init__(
            f"Section '{section}' failed during {phase}: {cause}",
            details={"section": section, "phase": phase, "cause": type(cause).__name__}
        )
        self.section = section
        self.cause = cause
        self.phase = phase


class TimeoutWarning(DashboardError):
    """Loading exceeded the failsafe window"""

    kind = "timeout"

    def __init__(self, section: Optional[str], timeout_ms: int):
        super().__init__(
            "Loading is taking longer than expected. Please try again.",
            details={"section": section, "timeout_ms": timeout_ms}
        )
        self.section = section
        self.timeout_ms = timeout_ms


class AuthenticationFailed(DashboardError):
    """Login was refused by the server"""

    kind = "auth"

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)
