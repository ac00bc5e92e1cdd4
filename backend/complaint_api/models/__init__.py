# Re-export all models for convenient imports
from complaint_api.models.user import User, AccountRole
from complaint_api.models.admin import Admin
from complaint_api.models.complaint import Complaint, ComplaintStatus

__all__ = [
    "User",
    "AccountRole",
    "Admin",
    "Complaint",
    "ComplaintStatus",
]
