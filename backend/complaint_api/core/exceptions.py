"""
Custom Exceptions for the NACOS Complaint System
================================================

Raise these from endpoints instead of building HTTPException by hand; the
handler registered in ``complaint_api.main`` turns them into JSON bodies that
always carry a ``message`` key.

Usage:
    from complaint_api.core.exceptions import ComplaintNotFoundError

    if complaint is None:
        raise ComplaintNotFoundError(complaint_id)
"""

from typing import Optional, Any, Dict


class ComplaintSystemError(Exception):
    """Base exception for all complaint system errors"""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        code: str = "INTERNAL_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details
        }


# ============================================
# Authentication & Authorization Errors
# ============================================

class AuthenticationError(ComplaintSystemError):
    """User authentication failed"""

    status_code = 401

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(message, code="AUTH_FAILED")


class AuthorizationError(ComplaintSystemError):
    """User not authorized for this action"""

    status_code = 403

    def __init__(self, message: str = "Admin access required"):
        super().__init__(message, code="NOT_AUTHORIZED")


# ============================================
# Resource Errors (404-type)
# ============================================

class ResourceNotFoundError(ComplaintSystemError):
    """Base class for not found errors"""

    status_code = 404

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with ID '{resource_id}' not found",
            code=f"{resource_type.upper()}_NOT_FOUND",
            details={"resource_type": resource_type, "resource_id": resource_id}
        )


class ComplaintNotFoundError(ResourceNotFoundError):
    """Complaint not found"""

    def __init__(self, complaint_id: str):
        super().__init__("Complaint", complaint_id)


class SectionNotFoundError(ResourceNotFoundError):
    """Section markup fragment not found"""

    def __init__(self, section: str):
        super().__init__("Section", section)


# ============================================
# Validation Errors
# ============================================

class ValidationError(ComplaintSystemError):
    """Request payload failed a business rule"""

    status_code = 400

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, code="VALIDATION_ERROR")
        if field:
            self.details["field"] = field


class DuplicateAccountError(ValidationError):
    """Username or email already taken"""

    def __init__(self, message: str):
        super().__init__(message)
        self.code = "DUPLICATE_ACCOUNT"


# ============================================
# Helper function for API responses
# ============================================

def error_response(error: ComplaintSystemError) -> Dict[str, Any]:
    """Convert exception to API error response format"""
    return {
        "success": False,
        "message": error.message,
        "error": error.to_dict()
    }
