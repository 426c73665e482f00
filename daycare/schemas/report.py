from typing import Optional

from pydantic import BaseModel, Field

from daycare.models.report import DailyReportType


class DailyReportBase(BaseModel):
    date: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")
    report_type: DailyReportType
    meals: dict[str, str] = {}
    milk_ml: int = Field(0, ge=0)
    notes: str = Field("", max_length=2000)
    sleep_minutes: Optional[int] = Field(None, ge=0)
    bathroom_count: int = Field(0, ge=0)
    photos: list[str] = []


class DailyReportCreate(DailyReportBase):
    child_id: int


class DailyReportUpdate(BaseModel):
    meals: Optional[dict[str, str]] = None
    milk_ml: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = Field(None, max_length=2000)
    sleep_minutes: Optional[int] = Field(None, ge=0)
    bathroom_count: Optional[int] = Field(None, ge=0)
    photos: Optional[list[str]] = None


class DailyReportResponse(DailyReportBase):
    model_config = {"from_attributes": True}

    id: int
    child_id: int
    created_by: Optional[int]


class MonthlyReportBase(BaseModel):
    month: str = Field(..., pattern=r"^\d{4}-\d{2}$")
    summary: str = ""
    milestones: list[str] = []
    notes: str = Field("", max_length=4000)


class MonthlyReportCreate(MonthlyReportBase):
    child_id: int


class MonthlyReportUpdate(BaseModel):
    summary: Optional[str] = None
    milestones: Optional[list[str]] = None
    notes: Optional[str] = Field(None, max_length=4000)


class MonthlyReportResponse(MonthlyReportBase):
    model_config = {"from_attributes": True}

    id: int
    child_id: int
