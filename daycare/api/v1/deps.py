"""FastAPI dependencies."""

from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.auth.access import resolve_user
from daycare.database import get_db
from daycare.models.user import User, UserRole


async def get_user_id(
    x_user_id: Annotated[Optional[int], Header()] = None,
) -> Optional[int]:
    return x_user_id


async def get_current_user(
    user_id: Annotated[Optional[int], Depends(get_user_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
) -> User:
    if user_id is None:
        raise HTTPException(status_code=401, detail="X-User-Id header required")
    user = await resolve_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="Unknown user")
    return user


async def require_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    if user.role != UserRole.admin:
        raise HTTPException(status_code=403, detail="Admin role required")
    return user


async def require_parent(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    if user.role != UserRole.parent:
        raise HTTPException(status_code=403, detail="Parent role required")
    return user


async def require_parent_or_admin(
    user: Annotated[User, Depends(get_current_user)],
) -> User:
    if user.role not in (UserRole.admin, UserRole.parent):
        raise HTTPException(status_code=403, detail="Parent or admin role required")
    return user

