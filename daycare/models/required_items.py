from typing import Optional

from sqlalchemy import Boolean, ForeignKey, Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from daycare.models.base import Base, TimestampMixin


class RequiredItems(Base, TimestampMixin):
    """A staff notice asking a child's parents to bring supplies."""

    __tablename__ = "required_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    child_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("children.id", ondelete="CASCADE"), nullable=False, index=True
    )
    diapers: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    wet_wipes: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    clothing: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    other: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_by: Mapped[Optional[int]] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )
