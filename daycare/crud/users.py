from typing import Optional, Sequence

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud.base import CRUDBase
from daycare.models.user import User, UserRole
from daycare.schemas.user import UserCreate, UserUpdate


class CRUDUser(CRUDBase[User, UserCreate, UserUpdate]):
    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def get_parents(self, db: AsyncSession) -> Sequence[User]:
        result = await db.execute(
            select(User).where(User.role == UserRole.parent).order_by(User.created_at.desc(), User.id.desc())
        )
        return result.scalars().all()

    async def create(self, db: AsyncSession, *, obj_in: UserCreate) -> User:
        data = obj_in.model_dump()
        data["email"] = data["email"].lower()
        db_obj = User(**data, child_ids=[])
        db.add(db_obj)
        await db.flush()
        await db.refresh(db_obj)
        return db_obj

    async def hard_delete(self, db: AsyncSession, user_id: int) -> int:
        """Delete by primary key without loading relationships; returns rows removed."""
        result = await db.execute(delete(User).where(User.id == user_id))
        return result.rowcount


crud_user = CRUDUser(User)
