"""Administrative child creation and owner-editable child fields."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud import crud_child
from daycare.errors import ConflictError, NotFoundError
from daycare.models.child import AuthorizedPickup, Child
from daycare.schemas.child import ChildCreate, ParentNotesUpdate, PickupCreate
from daycare.services.link_resolver import normalize_external_id
from daycare.services.photo_storage import commit_then_remove_photo_files

logger = logging.getLogger(__name__)


async def create_child(db: AsyncSession, body: ChildCreate) -> Child:
    """Create an unowned child; the unique index rejects a duplicate external id."""
    code = normalize_external_id(body.external_id)
    child = Child(name=body.name.strip(), external_id=code, birth_date=body.birth_date)
    try:
        async with db.begin_nested():
            db.add(child)
            await db.flush()
    except IntegrityError as exc:
        raise ConflictError(
            "A child with this ID already exists", reason="external_id_taken"
        ) from exc
    logger.info("Created child %d (%s)", child.id, code)
    return await crud_child.get(db, child.id)


async def update_parent_notes(db: AsyncSession, child: Child, body: ParentNotesUpdate) -> Child:
    await crud_child.update(db, db_obj=child, obj_in=body.model_dump())
    return await crud_child.get(db, child.id)


async def add_pickup(
    db: AsyncSession, child: Child, body: PickupCreate, *, added_by: int
) -> AuthorizedPickup:
    return await crud_child.add_pickup(
        db,
        child,
        name=body.name,
        phone=body.phone,
        photo_url=body.photo_url,
        added_by=added_by,
    )


async def remove_pickup(db: AsyncSession, child: Child, pickup_id: int) -> None:
    pickup = await crud_child.get_pickup(db, child.id, pickup_id)
    if pickup is None:
        raise NotFoundError("Pickup not found")
    photo_url = pickup.photo_url
    await db.delete(pickup)
    await commit_then_remove_photo_files(db, [photo_url])
