from sqlalchemy import Column, String, DateTime
from datetime import datetime
import enum

from complaint_api.core.database import Base
from complaint_api.core.types import GUID, generate_uuid


class AccountRole(str, enum.Enum):
    """Roles returned by /api/login"""
    USER = "user"
    ADMIN = "admin"


class User(Base):
    """Student account"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    firstname = Column(String(100), nullable=False)
    lastname = Column(String(100), nullable=False)
    regno = Column(String(50), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    username = Column(String(100), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), default=AccountRole.USER.value, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    def __repr__(self):
        return f"<User {self.username}>"
