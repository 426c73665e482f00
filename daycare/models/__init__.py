from daycare.models.base import Base, TimestampMixin
from daycare.models.user import User, UserRole
from daycare.models.child import AuthorizedPickup, Child, ChildOwner
from daycare.models.report import DailyReport, DailyReportType, MonthlyReport
from daycare.models.required_items import RequiredItems

__all__ = [
    "Base",
    "TimestampMixin",
    "User",
    "UserRole",
    "Child",
    "ChildOwner",
    "AuthorizedPickup",
    "DailyReport",
    "DailyReportType",
    "MonthlyReport",
    "RequiredItems",
]
