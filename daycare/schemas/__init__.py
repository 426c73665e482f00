from daycare.schemas.user import (
    ParentSummary,
    RegisterChild,
    RegisterRequest,
    RegisterResponse,
    UserCreate,
    UserResponse,
    UserUpdate,
)
from daycare.schemas.child import (
    ChildCreate,
    ChildResponse,
    ChildUpdate,
    ParentNotesUpdate,
    PickupCreate,
    PickupResponse,
)
from daycare.schemas.link import (
    CascadeResponse,
    LinkChildrenRequest,
    LinkChildrenResponse,
    SelfServeLinkRequest,
    SelfServeLinkResponse,
)
from daycare.schemas.report import (
    DailyReportCreate,
    DailyReportResponse,
    DailyReportUpdate,
    MonthlyReportCreate,
    MonthlyReportResponse,
    MonthlyReportUpdate,
)
from daycare.schemas.required_items import (
    RequiredItemsCreate,
    RequiredItemsList,
    RequiredItemsResponse,
)
