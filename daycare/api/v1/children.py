"""Child endpoints: listings, profile fields and authorized pickups."""
from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.api.v1.deps import get_current_user, require_admin, require_parent
from daycare.auth.access import ensure_child_access
from daycare.crud import crud_child
from daycare.database import get_db
from daycare.models.user import User
from daycare.schemas.child import (
    ChildCreate,
    ChildResponse,
    ParentNotesUpdate,
    PickupCreate,
    PickupResponse,
)
from daycare.services import cascade_service, child_service
from daycare.services.ownership import list_children_for_owner

router = APIRouter(prefix="/children", tags=["children"])


@router.get("/mine", response_model=list[ChildResponse])
async def list_my_children(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent)],
):
    return await list_children_for_owner(db, user.id)


@router.get("", response_model=list[ChildResponse])
async def list_children(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
    skip: int = 0,
    limit: int = 100,
):
    return await crud_child.get_multi(db, skip=skip, limit=limit)


@router.post("", response_model=ChildResponse, status_code=201)
async def create_child(
    body: ChildCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    return await child_service.create_child(db, body)


@router.get("/{child_id}", response_model=ChildResponse)
async def get_child(
    child_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    return await ensure_child_access(db, user, child_id)


@router.delete("/{child_id}")
async def delete_child(
    child_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    result = await cascade_service.delete_child(db, child_id)
    return {
        "success": True,
        "deleted_daily_reports": result.deleted_daily_reports,
        "deleted_monthly_reports": result.deleted_monthly_reports,
    }


@router.patch("/{child_id}/parent-notes", response_model=ChildResponse)
async def update_parent_notes(
    child_id: int,
    body: ParentNotesUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    child = await ensure_child_access(db, user, child_id)
    return await child_service.update_parent_notes(db, child, body)


@router.post("/{child_id}/pickups", response_model=PickupResponse, status_code=201)
async def add_pickup(
    child_id: int,
    body: PickupCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    child = await ensure_child_access(db, user, child_id)
    return await child_service.add_pickup(db, child, body, added_by=user.id)


@router.delete("/{child_id}/pickups/{pickup_id}")
async def remove_pickup(
    child_id: int,
    pickup_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(get_current_user)],
):
    child = await ensure_child_access(db, user, child_id)
    await child_service.remove_pickup(db, child, pickup_id)
    return {"success": True}
