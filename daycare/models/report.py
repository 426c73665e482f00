import enum
from typing import TYPE_CHECKING, Optional

from sqlalchemy import JSON, Enum, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daycare.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from daycare.models.child import Child


class DailyReportType(str, enum.Enum):
    pre_sleep = "pre_sleep"
    post_sleep = "post_sleep"


class DailyReport(Base, TimestampMixin):
    __tablename__ = "daily_reports"
    __table_args__ = (
        UniqueConstraint("child_id", "date", "report_type", name="uq_daily_report_identity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    child_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("children.id"), nullable=False, index=True
    )
    date: Mapped[str] = mapped_column(String(10), nullable=False)  # YYYY-MM-DD
    report_type: Mapped[DailyReportType] = mapped_column(Enum(DailyReportType), nullable=False)
    meals: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    milk_ml: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    sleep_minutes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    bathroom_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Relationships
    child: Mapped["Child"] = relationship("Child", back_populates="daily_reports")


class MonthlyReport(Base, TimestampMixin):
    __tablename__ = "monthly_reports"
    __table_args__ = (
        UniqueConstraint("child_id", "month", name="uq_monthly_report_identity"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    child_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("children.id"), nullable=False, index=True
    )
    month: Mapped[str] = mapped_column(String(7), nullable=False)  # YYYY-MM
    summary: Mapped[str] = mapped_column(Text, nullable=False, default="")
    milestones: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Relationships
    child: Mapped["Child"] = relationship("Child", back_populates="monthly_reports")
