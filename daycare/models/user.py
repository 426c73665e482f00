import enum
from typing import TYPE_CHECKING

from sqlalchemy import JSON, Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daycare.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from daycare.models.child import ChildOwner


class UserRole(str, enum.Enum):
    guest = "guest"
    parent = "parent"
    admin = "admin"


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    role: Mapped[UserRole] = mapped_column(Enum(UserRole), nullable=False, default=UserRole.guest)
    # Derived cache of owned child ids; rebuilt from the ownership query, never trusted
    child_ids: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)

    # Relationships
    ownerships: Mapped[list["ChildOwner"]] = relationship(
        "ChildOwner", back_populates="user", passive_deletes=True
    )
