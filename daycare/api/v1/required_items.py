"""Required-items notices: staff ask a child's parents to bring supplies."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.api.v1.deps import get_current_user, require_admin
from daycare.auth.access import ensure_child_access
from daycare.crud import crud_child, crud_required_items
from daycare.database import get_db
from daycare.errors import NotFoundError
from daycare.models.user import User
from daycare.schemas.required_items import RequiredItemsCreate, RequiredItemsResponse

router = APIRouter(prefix="/required-items", tags=["required-items"])


@router.post("", response_model=RequiredItemsResponse, status_code=201)
async def create_required_items(
    body: RequiredItemsCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    admin: Annotated[User, Depends(require_admin)],
):
    if await crud_child.get(db, body.child_id) is None:
        raise NotFoundError("Child not found")
    return await crud_required_items.create_notice(db, obj_in=body, created_by=admin.id)


@router.get("/latest/{child_id}", response_model=Optional[RequiredItemsResponse])
async def get_latest_required_items(
    child_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    """Newest notice for the child, or null when none was posted."""
    await ensure_child_access(db, user, child_id)
    return await crud_required_items.get_latest(db, child_id)
