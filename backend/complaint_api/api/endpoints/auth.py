from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, or_

from complaint_api.core.database import get_db
from complaint_api.core.config import settings
from complaint_api.core.exceptions import ValidationError, DuplicateAccountError
from complaint_api.core.security import verify_password, get_password_hash, create_account_token
from complaint_api.core.logging_config import logger
from complaint_api.core.rate_limiter import limiter
from complaint_api.models.user import User, AccountRole
from complaint_api.models.admin import Admin
from complaint_api.schemas.auth import (
    LoginRequest,
    LoginResponse,
    StudentRegister,
    AdminRegister,
)


router = APIRouter()


@router.post("/login", response_model=LoginResponse, response_model_exclude_none=True)
@limiter.limit(settings.RATE_LIMIT_LOGIN)
async def login(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Login with username or email.

    Admin accounts are checked first, then student accounts. A failed login
    answers 200 with success=false so the login page can show its own message.
    """
    client_ip = request.client.host if request.client else "unknown"
    identifier = credentials.username.strip()

    result = await db.execute(
        select(Admin).where(or_(Admin.username == identifier, Admin.email == identifier))
    )
    admin = result.scalar_one_or_none()
    if admin and verify_password(credentials.password, admin.hashed_password):
        logger.log_auth_event("login", True, username=admin.username, client_ip=client_ip, role="admin")
        return LoginResponse(
            success=True,
            role=AccountRole.ADMIN.value,
            username=admin.username,
            token=create_account_token(admin.id, admin.username, AccountRole.ADMIN.value),
        )

    result = await db.execute(
        select(User).where(or_(User.username == identifier, User.email == identifier))
    )
    user = result.scalar_one_or_none()
    if user and verify_password(credentials.password, user.hashed_password):
        logger.log_auth_event("login", True, username=user.username, client_ip=client_ip, role="user")
        return LoginResponse(
            success=True,
            role=AccountRole.USER.value,
            username=user.username,
            token=create_account_token(user.id, user.username, AccountRole.USER.value),
        )

    logger.log_auth_event("login", False, username=identifier, reason="Invalid credentials", client_ip=client_ip)
    return LoginResponse(success=False, message="Invalid credentials")


@router.post("/registeration", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_REGISTER)
async def register_student(
    request: Request,
    payload: StudentRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register a student account (role 'user')"""
    if payload.missing_fields():
        raise ValidationError("Missing required fields")

    result = await db.execute(select(Admin).where(Admin.email == payload.email))
    if result.scalar_one_or_none():
        logger.log_auth_event("register", False, username=payload.username, reason="email belongs to an admin")
        raise DuplicateAccountError("Email is already registered as an admin.")

    result = await db.execute(
        select(User).where(or_(User.username == payload.username, User.email == payload.email))
    )
    if result.scalar_one_or_none():
        logger.log_auth_event("register", False, username=payload.username, reason="duplicate student")
        raise DuplicateAccountError("Email or username is already registered as a student.")

    user = User(
        firstname=payload.firstname,
        lastname=payload.lastname,
        regno=payload.regno,
        email=payload.email,
        username=payload.username,
        hashed_password=get_password_hash(payload.password),
        role=AccountRole.USER.value,
    )
    db.add(user)
    await db.commit()
    logger.log_auth_event("register", True, username=user.username, role="user")

    return {
        "success": True,
        "message": "User registered successfully",
        "user": {"username": user.username, "email": user.email},
    }


@router.post("/adminRegisteration", status_code=status.HTTP_201_CREATED)
@limiter.limit(settings.RATE_LIMIT_REGISTER)
async def register_admin(
    request: Request,
    payload: AdminRegister,
    db: AsyncSession = Depends(get_db)
):
    """Register an administrator account"""
    if payload.missing_fields():
        raise ValidationError("Missing required fields")

    result = await db.execute(select(User).where(User.email == payload.email))
    if result.scalar_one_or_none():
        logger.log_auth_event("admin_register", False, username=payload.username, reason="email belongs to a student")
        raise DuplicateAccountError("Email is already registered as a student.")

    result = await db.execute(
        select(Admin).where(or_(Admin.username == payload.username, Admin.email == payload.email))
    )
    if result.scalar_one_or_none():
        logger.log_auth_event("admin_register", False, username=payload.username, reason="duplicate admin")
        raise DuplicateAccountError("Email or username is already registered as an admin.")

    admin = Admin(
        username=payload.username,
        email=payload.email,
        hashed_password=get_password_hash(payload.password),
    )
    db.add(admin)
    await db.commit()
    logger.log_auth_event("admin_register", True, username=admin.username, role="admin")

    return {
        "success": True,
        "message": "Admin registered successfully",
        "admin": {"username": admin.username, "email": admin.email},
    }
