"""Account registration and identity."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.api.v1.deps import get_current_user
from daycare.database import get_db
from daycare.models.user import User
from daycare.schemas.user import RegisterRequest, RegisterResponse, UserResponse
from daycare.services import registration_service

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", response_model=RegisterResponse, status_code=201)
async def register(
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
):
    result = await registration_service.register_user(db, body)
    return RegisterResponse(
        id=result.user.id,
        email=result.user.email,
        role=result.user.role,
        child_id=result.child.id if result.child else None,
        child_created=result.child_created,
    )


@router.get("/me", response_model=UserResponse)
async def me(user: Annotated[User, Depends(get_current_user)]):
    return user
