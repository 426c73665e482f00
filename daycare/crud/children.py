from typing import Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud.base import CRUDBase
from daycare.models.child import AuthorizedPickup, Child
from daycare.schemas.child import ChildCreate, ChildUpdate


class CRUDChild(CRUDBase[Child, ChildCreate, ChildUpdate]):
    async def get(self, db: AsyncSession, id: int) -> Optional[Child]:
        # Owner rows are written with bulk statements, so always reload them
        result = await db.execute(
            select(Child).where(Child.id == id).execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_by_external_id(self, db: AsyncSession, external_id: str) -> Optional[Child]:
        result = await db.execute(
            select(Child)
            .where(Child.external_id == external_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get_multi(
        self, db: AsyncSession, *, skip: int = 0, limit: int = 100
    ) -> Sequence[Child]:
        result = await db.execute(
            select(Child)
            .order_by(Child.created_at.desc(), Child.id.desc())
            .offset(skip)
            .limit(limit)
            .execution_options(populate_existing=True)
        )
        return result.scalars().all()

    async def get_existing_ids(self, db: AsyncSession, ids: list[int]) -> list[int]:
        result = await db.execute(select(Child.id).where(Child.id.in_(ids)))
        return list(result.scalars().all())

    async def add_pickup(
        self, db: AsyncSession, child: Child, *, name: str, phone: str, photo_url: str, added_by: int
    ) -> AuthorizedPickup:
        pickup = AuthorizedPickup(
            child_id=child.id,
            name=name.strip(),
            phone=phone.strip(),
            photo_url=photo_url,
            added_by=added_by,
        )
        db.add(pickup)
        await db.flush()
        await db.refresh(pickup)
        return pickup

    async def get_pickup(
        self, db: AsyncSession, child_id: int, pickup_id: int
    ) -> Optional[AuthorizedPickup]:
        result = await db.execute(
            select(AuthorizedPickup).where(
                AuthorizedPickup.id == pickup_id, AuthorizedPickup.child_id == child_id
            )
        )
        return result.scalar_one_or_none()


crud_child = CRUDChild(Child)
