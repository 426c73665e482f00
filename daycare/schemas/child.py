from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class ChildBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    birth_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("birth_date", "birthDate")
    )


class ChildCreate(ChildBase):
    external_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("external_id", "externalId")
    )


class ChildUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    birth_date: Optional[date] = None


class ParentNotesUpdate(BaseModel):
    medical_condition: str = ""
    special_notes: str = ""


class PickupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    phone: str = Field(..., min_length=1, max_length=40)
    photo_url: str = Field(..., min_length=1, max_length=500)


class PickupResponse(PickupCreate):
    model_config = {"from_attributes": True}

    id: int
    added_by: Optional[int]


class ChildResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    name: str
    external_id: Optional[str]
    birth_date: Optional[date]
    medical_condition: str
    special_notes: str
    owner_ids: list[int]
    legacy_parent_id: Optional[int]
    legacy_owner_id: Optional[int]
    pickups: list[PickupResponse] = []
