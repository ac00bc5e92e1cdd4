from pydantic import BaseModel, ConfigDict
from typing import Optional
from datetime import datetime

from complaint_api.models.complaint import ComplaintStatus
from complaint_api.schemas.auth import _RequiredFieldsModel


class ComplaintCreate(_RequiredFieldsModel):
    name: Optional[str] = None
    matric: Optional[str] = None
    email: Optional[str] = None
    department: Optional[str] = None
    title: Optional[str] = None
    details: Optional[str] = None


class ComplaintStatusUpdate(BaseModel):
    status: ComplaintStatus


class ComplaintResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    matric: str
    email: str
    department: str
    title: str
    details: str
    status: str
    created_at: datetime


class ComplaintSubmitted(BaseModel):
    success: bool = True
    message: str
    complaint: ComplaintResponse


class ComplaintStats(BaseModel):
    total: int = 0
    pending: int = 0
    in_progress: int = 0
    resolved: int = 0
