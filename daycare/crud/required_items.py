from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud.base import CRUDBase
from daycare.models.required_items import RequiredItems
from daycare.schemas.required_items import RequiredItemsCreate


class CRUDRequiredItems(CRUDBase[RequiredItems, RequiredItemsCreate, RequiredItemsCreate]):
    async def create_notice(
        self, db: AsyncSession, *, obj_in: RequiredItemsCreate, created_by: int
    ) -> RequiredItems:
        notice = RequiredItems(
            child_id=obj_in.child_id,
            created_by=created_by,
            **obj_in.items.model_dump(),
        )
        db.add(notice)
        await db.flush()
        await db.refresh(notice)
        return notice

    async def get_latest(self, db: AsyncSession, child_id: int) -> Optional[RequiredItems]:
        result = await db.execute(
            select(RequiredItems)
            .where(RequiredItems.child_id == child_id)
            .order_by(RequiredItems.created_at.desc(), RequiredItems.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()


crud_required_items = CRUDRequiredItems(RequiredItems)
