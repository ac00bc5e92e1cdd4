from sqlalchemy import Column, String, DateTime, Text
from datetime import datetime
import enum

from complaint_api.core.database import Base
from complaint_api.core.types import GUID, generate_uuid


class ComplaintStatus(str, enum.Enum):
    """Complaint workflow states"""
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    RESOLVED = "resolved"


class Complaint(Base):
    """Complaint submitted through the student form"""
    __tablename__ = "complaints"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    name = Column(String(200), nullable=False)
    matric = Column(String(50), nullable=False, index=True)
    email = Column(String(255), nullable=False)
    department = Column(String(150), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    details = Column(Text, nullable=False)
    status = Column(String(20), default=ComplaintStatus.PENDING.value, nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def __repr__(self):
        return f"<Complaint {self.title} ({self.status})>"
