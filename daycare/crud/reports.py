from typing import Optional, Sequence

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud.base import CRUDBase
from daycare.models.report import DailyReport, DailyReportType, MonthlyReport
from daycare.schemas.report import (
    DailyReportCreate,
    DailyReportUpdate,
    MonthlyReportCreate,
    MonthlyReportUpdate,
)
from daycare.services.ownership import visible_child_ids


class CRUDDailyReport(CRUDBase[DailyReport, DailyReportCreate, DailyReportUpdate]):
    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        child_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        report_type: Optional[DailyReportType] = None,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Sequence[DailyReport]:
        query = select(DailyReport)
        if child_id is not None:
            query = query.where(DailyReport.child_id == child_id)
        if owner_id is not None:
            query = query.where(DailyReport.child_id.in_(visible_child_ids(owner_id)))
        if report_type:
            query = query.where(DailyReport.report_type == report_type)
        if date_from:
            query = query.where(DailyReport.date >= date_from)
        if date_to:
            query = query.where(DailyReport.date <= date_to)
        query = (
            query.order_by(DailyReport.date.desc(), DailyReport.report_type)
            .offset(skip)
            .limit(limit)
        )
        result = await db.execute(query)
        return result.scalars().all()

    async def count_for_children(self, db: AsyncSession, child_ids: list[int]) -> int:
        if not child_ids:
            return 0
        result = await db.execute(
            select(func.count(DailyReport.id)).where(DailyReport.child_id.in_(child_ids))
        )
        return result.scalar_one()


class CRUDMonthlyReport(CRUDBase[MonthlyReport, MonthlyReportCreate, MonthlyReportUpdate]):
    async def get_filtered(
        self,
        db: AsyncSession,
        *,
        child_id: Optional[int] = None,
        owner_id: Optional[int] = None,
        month: Optional[str] = None,
        skip: int = 0,
        limit: int = 20,
    ) -> Sequence[MonthlyReport]:
        query = select(MonthlyReport)
        if child_id is not None:
            query = query.where(MonthlyReport.child_id == child_id)
        if owner_id is not None:
            query = query.where(MonthlyReport.child_id.in_(visible_child_ids(owner_id)))
        if month:
            query = query.where(MonthlyReport.month == month)
        query = query.order_by(MonthlyReport.month.desc()).offset(skip).limit(limit)
        result = await db.execute(query)
        return result.scalars().all()

    async def count_for_children(self, db: AsyncSession, child_ids: list[int]) -> int:
        if not child_ids:
            return 0
        result = await db.execute(
            select(func.count(MonthlyReport.id)).where(MonthlyReport.child_id.in_(child_ids))
        )
        return result.scalar_one()


crud_daily_report = CRUDDailyReport(DailyReport)
crud_monthly_report = CRUDMonthlyReport(MonthlyReport)
