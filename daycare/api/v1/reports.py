"""Daily and monthly report endpoints, all gated through the report's child."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.api.v1.deps import require_admin, require_parent_or_admin
from daycare.auth.access import ensure_child_access, ensure_report_access
from daycare.crud import crud_daily_report, crud_monthly_report
from daycare.database import get_db
from daycare.errors import ConflictError, NotFoundError
from daycare.models.report import DailyReport, DailyReportType, MonthlyReport
from daycare.models.user import User, UserRole
from daycare.schemas.report import (
    DailyReportCreate,
    DailyReportResponse,
    DailyReportUpdate,
    MonthlyReportCreate,
    MonthlyReportResponse,
    MonthlyReportUpdate,
)

daily_router = APIRouter(prefix="/daily-reports", tags=["reports"])
monthly_router = APIRouter(prefix="/monthly-reports", tags=["reports"])


async def _scope(db: AsyncSession, user: User, child_id: Optional[int]) -> dict:
    """Listing filter: one guarded child, or every child the parent owns."""
    if child_id is not None:
        await ensure_child_access(db, user, child_id)
        return {"child_id": child_id}
    if user.role == UserRole.admin:
        return {}
    return {"owner_id": user.id}


async def _save(db: AsyncSession, obj):
    try:
        async with db.begin_nested():
            db.add(obj)
            await db.flush()
    except IntegrityError as exc:
        raise ConflictError("A report for this period already exists", reason="report_exists") from exc
    await db.refresh(obj)
    return obj


# ---------------------------------------------------------------------------
# Daily
# ---------------------------------------------------------------------------


@daily_router.get("", response_model=list[DailyReportResponse])
async def list_daily_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
    child_id: Optional[int] = None,
    report_type: Optional[DailyReportType] = None,
    date_from: Optional[str] = None,
    date_to: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
):
    scope = await _scope(db, user, child_id)
    return await crud_daily_report.get_filtered(
        db,
        report_type=report_type,
        date_from=date_from,
        date_to=date_to,
        skip=(max(page, 1) - 1) * limit,
        limit=limit,
        **scope,
    )


@daily_router.post("", response_model=DailyReportResponse, status_code=201)
async def create_daily_report(
    body: DailyReportCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
):
    await ensure_child_access(db, user, body.child_id)
    return await _save(db, DailyReport(**body.model_dump(), created_by=user.id))


async def _get_daily(db: AsyncSession, user: User, report_id: int) -> DailyReport:
    report = await crud_daily_report.get(db, report_id)
    if not report:
        raise NotFoundError("Report not found")
    await ensure_report_access(db, user, report)
    return report


@daily_router.get("/{report_id}", response_model=DailyReportResponse)
async def get_daily_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
):
    return await _get_daily(db, user, report_id)


@daily_router.put("/{report_id}", response_model=DailyReportResponse)
async def update_daily_report(
    report_id: int,
    body: DailyReportUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
):
    report = await _get_daily(db, user, report_id)
    return await crud_daily_report.update(db, db_obj=report, obj_in=body)


@daily_router.delete("/{report_id}")
async def delete_daily_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    report = await crud_daily_report.remove(db, id=report_id)
    if not report:
        raise NotFoundError("Report not found")
    return {"success": True}


# ---------------------------------------------------------------------------
# Monthly
# ---------------------------------------------------------------------------


@monthly_router.get("", response_model=list[MonthlyReportResponse])
async def list_monthly_reports(
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
    child_id: Optional[int] = None,
    month: Optional[str] = None,
    page: int = 1,
    limit: int = 20,
):
    scope = await _scope(db, user, child_id)
    return await crud_monthly_report.get_filtered(
        db, month=month, skip=(max(page, 1) - 1) * limit, limit=limit, **scope
    )


@monthly_router.post("", response_model=MonthlyReportResponse, status_code=201)
async def create_monthly_report(
    body: MonthlyReportCreate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
):
    await ensure_child_access(db, user, body.child_id)
    return await _save(db, MonthlyReport(**body.model_dump()))


async def _get_monthly(db: AsyncSession, user: User, report_id: int) -> MonthlyReport:
    report = await crud_monthly_report.get(db, report_id)
    if not report:
        raise NotFoundError("Report not found")
    await ensure_report_access(db, user, report)
    return report


@monthly_router.get("/{report_id}", response_model=MonthlyReportResponse)
async def get_monthly_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
):
    return await _get_monthly(db, user, report_id)


@monthly_router.put("/{report_id}", response_model=MonthlyReportResponse)
async def update_monthly_report(
    report_id: int,
    body: MonthlyReportUpdate,
    db: Annotated[AsyncSession, Depends(get_db)],
    user: Annotated[User, Depends(require_parent_or_admin)],
):
    report = await _get_monthly(db, user, report_id)
    return await crud_monthly_report.update(db, db_obj=report, obj_in=body)


@monthly_router.delete("/{report_id}")
async def delete_monthly_report(
    report_id: int,
    db: Annotated[AsyncSession, Depends(get_db)],
    _: Annotated[User, Depends(require_admin)],
):
    report = await crud_monthly_report.remove(db, id=report_id)
    if not report:
        raise NotFoundError("Report not found")
    return {"success": True}
