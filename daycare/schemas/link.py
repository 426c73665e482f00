from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field

from daycare.schemas.child import ChildResponse


class LinkChildrenRequest(BaseModel):
    child_ids: list[int] = Field(
        default_factory=list, validation_alias=AliasChoices("child_ids", "childIds")
    )


class LinkChildrenResponse(BaseModel):
    ok: bool = True
    matched: int
    modified: int


class SelfServeLinkRequest(BaseModel):
    external_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("external_id", "externalId")
    )
    name: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("birth_date", "birthDate")
    )


class SelfServeLinkResponse(BaseModel):
    created: bool
    child: ChildResponse


class CascadeResponse(BaseModel):
    ok: bool = True
    policy: str
    unlinked_children: int
    deleted_children: int
    deleted_daily_reports: int
    deleted_monthly_reports: int
    deleted_required_items: int = 0
    rehomed_children: int
    user: int = 1
