from datetime import datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, Field


class RequiredItemsList(BaseModel):
    diapers: bool = False
    wet_wipes: bool = Field(False, validation_alias=AliasChoices("wet_wipes", "wetWipes"))
    clothing: bool = False
    other: str = Field("", max_length=500)


class RequiredItemsCreate(BaseModel):
    child_id: int = Field(..., validation_alias=AliasChoices("child_id", "childId", "child"))
    items: RequiredItemsList = Field(default_factory=RequiredItemsList)


class RequiredItemsResponse(BaseModel):
    model_config = {"from_attributes": True}

    id: int
    child_id: int
    diapers: bool
    wet_wipes: bool
    clothing: bool
    other: str
    created_by: Optional[int]
    created_at: datetime
