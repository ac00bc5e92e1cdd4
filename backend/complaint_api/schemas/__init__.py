from complaint_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    StudentRegister,
    AdminRegister,
    MessageResponse,
)
from complaint_api.schemas.complaint import (
    ComplaintCreate,
    ComplaintStatusUpdate,
    ComplaintResponse,
    ComplaintSubmitted,
    ComplaintStats,
)
from complaint_api.schemas.user import UserResponse

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "StudentRegister",
    "AdminRegister",
    "MessageResponse",
    "ComplaintCreate",
    "ComplaintStatusUpdate",
    "ComplaintResponse",
    "ComplaintSubmitted",
    "ComplaintStats",
    "UserResponse",
]
