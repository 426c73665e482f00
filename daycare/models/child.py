from datetime import date
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Date, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from daycare.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from daycare.models.report import DailyReport, MonthlyReport
    from daycare.models.user import User


class ChildOwner(Base):
    """One row per (child, parent) pair: the multi-parent owner set."""

    __tablename__ = "child_owners"

    child_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("children.id", ondelete="CASCADE"), primary_key=True
    )
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True, index=True
    )

    child: Mapped["Child"] = relationship("Child", back_populates="owner_links")
    user: Mapped["User"] = relationship("User", back_populates="ownerships")


class Child(Base, TimestampMixin):
    __tablename__ = "children"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Uppercased human-typed code; NULLs are exempt from the unique index
    external_id: Mapped[Optional[str]] = mapped_column(String(64), unique=True, nullable=True)
    birth_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    medical_condition: Mapped[str] = mapped_column(Text, nullable=False, default="")
    special_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")

    # Single-parent shapes written before multi-parent support existed
    legacy_parent_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    legacy_owner_id: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # Relationships
    owner_links: Mapped[list["ChildOwner"]] = relationship(
        "ChildOwner", back_populates="child", lazy="selectin", cascade="all, delete-orphan"
    )
    pickups: Mapped[list["AuthorizedPickup"]] = relationship(
        "AuthorizedPickup",
        back_populates="child",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="AuthorizedPickup.id",
    )
    daily_reports: Mapped[list["DailyReport"]] = relationship(
        "DailyReport", back_populates="child"
    )
    monthly_reports: Mapped[list["MonthlyReport"]] = relationship(
        "MonthlyReport", back_populates="child"
    )

    @property
    def owner_ids(self) -> list[int]:
        return sorted(link.user_id for link in self.owner_links)


class AuthorizedPickup(Base, TimestampMixin):
    __tablename__ = "authorized_pickups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    child_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(40), nullable=False)
    photo_url: Mapped[str] = mapped_column(String(500), nullable=False)
    added_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    child: Mapped["Child"] = relationship("Child", back_populates="pickups")
