"""Admin endpoints: parent accounts overview and deletion."""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.api.v1.deps import require_admin
from daycare.crud import crud_daily_report, crud_monthly_report, crud_user
from daycare.database import get_db
from daycare.models.user import User
from daycare.schemas.link import CascadeResponse
from daycare.schemas.user import ParentSummary
from daycare.services import cascade_service
from daycare.services.ownership import child_ids_for_owner

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/parents", response_model=list[ParentSummary])
async def list_parents(
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    summaries = []
    for parent in await crud_user.get_parents(db):
        child_ids = await child_ids_for_owner(db, parent.id)
        summaries.append(
            ParentSummary(
                id=parent.id,
                name=parent.name or "",
                email=parent.email,
                child_count=len(child_ids),
                daily_count=await crud_daily_report.count_for_children(db, child_ids),
                monthly_count=await crud_monthly_report.count_for_children(db, child_ids),
            )
        )
    return summaries


@router.delete("/parents/{parent_id}", response_model=CascadeResponse)
async def delete_parent(
    parent_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
    policy: Optional[str] = None,
):
    """Delete a parent account; children are handled by the cascade policy."""
    result = await cascade_service.delete_parent(db, parent_id, policy)
    return CascadeResponse(
        policy=result.policy.value,
        unlinked_children=result.unlinked_children,
        deleted_children=result.deleted_children,
        deleted_daily_reports=result.deleted_daily_reports,
        deleted_monthly_reports=result.deleted_monthly_reports,
        deleted_required_items=result.deleted_required_items,
        rehomed_children=result.rehomed_children,
    )
