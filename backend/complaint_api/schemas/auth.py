from pydantic import BaseModel, Field, field_validator
from typing import List, Optional


class _RequiredFieldsModel(BaseModel):
    """Fields are optional at parse time so blanks become a 400 instead of a 422"""

    @field_validator("*", mode="before")
    @classmethod
    def strip_strings(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v

    def missing_fields(self) -> List[str]:
        return [name for name, value in self.model_dump().items() if not value]


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1, description="Username or email")
    password: str = Field(..., min_length=1)


class LoginResponse(BaseModel):
    success: bool
    role: Optional[str] = None
    username: Optional[str] = None
    token: Optional[str] = None
    message: Optional[str] = None


class StudentRegister(_RequiredFieldsModel):
    firstname: Optional[str] = None
    lastname: Optional[str] = None
    regno: Optional[str] = None
    email: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = None


class AdminRegister(_RequiredFieldsModel):
    username: Optional[str] = None
    password: Optional[str] = None
    email: Optional[str] = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
