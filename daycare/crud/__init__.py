from daycare.crud.users import crud_user
from daycare.crud.children import crud_child
from daycare.crud.reports import crud_daily_report, crud_monthly_report
from daycare.crud.required_items import crud_required_items

__all__ = [
    "crud_user",
    "crud_child",
    "crud_daily_report",
    "crud_monthly_report",
    "crud_required_items",
]
