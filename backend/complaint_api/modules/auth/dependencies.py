from typing import Any, Dict, Union

from fastapi import Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from complaint_api.core.database import get_db
from complaint_api.core.logging_config import set_account
from complaint_api.core.security import get_current_user_token
from complaint_api.models.admin import Admin
from complaint_api.models.user import AccountRole, User

ACCOUNT_MODELS = {
    AccountRole.ADMIN.value: Admin,
    AccountRole.USER.value: User,
}


async def get_current_account(
    claims: Dict[str, Any] = Depends(get_current_user_token),
    db: AsyncSession = Depends(get_db)
) -> Union[Admin, User]:
    """Resolve the bearer token to an admin or student account"""
    account_id = claims.get("sub")
    model = ACCOUNT_MODELS.get(claims.get("role"))
    if not account_id or model is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    account = await db.scalar(select(model).where(model.id == account_id))
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Account not found"
        )

    set_account(account.username, claims["role"])
    return account


async def get_current_admin(
    account: Union[Admin, User] = Depends(get_current_account)
) -> Admin:
    """Require an administrator account"""
    if not isinstance(account, Admin):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin access required"
        )
    return account
