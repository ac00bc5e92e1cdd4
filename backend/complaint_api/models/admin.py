from sqlalchemy import Column, String, DateTime
from datetime import datetime

from complaint_api.core.database import Base
from complaint_api.core.types import GUID, generate_uuid


class Admin(Base):
    """Administrator account, stored apart from students"""
    __tablename__ = "admins"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    username = Column(String(100), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<Admin {self.username}>"
