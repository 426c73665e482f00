from datetime import date
from typing import Optional

from pydantic import AliasChoices, BaseModel, EmailStr, Field

from daycare.models.user import UserRole


class UserBase(BaseModel):
    name: str = Field("", max_length=100)
    email: EmailStr


class UserCreate(UserBase):
    role: UserRole = UserRole.parent


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    role: Optional[UserRole] = None


class UserResponse(UserBase):
    model_config = {"from_attributes": True}

    id: int
    role: UserRole
    child_ids: list[int]


class RegisterChild(BaseModel):
    external_id: str = Field(
        ..., min_length=1, validation_alias=AliasChoices("external_id", "externalId")
    )
    name: Optional[str] = Field(None, max_length=100)
    birth_date: Optional[date] = Field(
        None, validation_alias=AliasChoices("birth_date", "birthDate")
    )


class RegisterRequest(BaseModel):
    name: str = Field("", max_length=100)
    email: EmailStr
    role: UserRole = UserRole.parent
    child: Optional[RegisterChild] = None


class RegisterResponse(BaseModel):
    id: int
    email: str
    role: UserRole
    child_id: Optional[int] = None
    child_created: bool = False


class ParentSummary(BaseModel):
    id: int
    name: str
    email: str
    child_count: int
    daily_count: int
    monthly_count: int
