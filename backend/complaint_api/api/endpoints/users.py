from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import List

from complaint_api.core.database import get_db
from complaint_api.models.admin import Admin
from complaint_api.models.user import User
from complaint_api.modules.auth.dependencies import get_current_admin
from complaint_api.schemas.user import UserResponse


router = APIRouter()


@router.get("/users", response_model=List[UserResponse])
async def list_users(
    db: AsyncSession = Depends(get_db),
    admin: Admin = Depends(get_current_admin)
):
    """List registered students, newest first"""
    result = await db.execute(select(User).order_by(User.created_at.desc()))
    return result.scalars().all()
