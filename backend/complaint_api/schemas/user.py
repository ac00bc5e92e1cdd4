from pydantic import BaseModel, ConfigDict
from datetime import datetime


class UserResponse(BaseModel):
    """Student account as listed to admins; never carries the password hash"""
    model_config = ConfigDict(from_attributes=True)

    id: str
    firstname: str
    lastname: str
    regno: str
    email: str
    username: str
    role: str
    created_at: datetime
