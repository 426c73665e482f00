"""Ownership resolution across the three stored shapes.

A child's owners are the union of its ``child_owners`` rows and its two
legacy single-owner columns. ``resolve_owners`` is the in-memory form and
``owned_by`` the query form of the same rule; everything that decides
access goes through one of the two. Admin bypass lives in the access guard,
not here.
"""

from typing import Iterable, Optional, Protocol, Sequence

from sqlalchemy import ColumnElement, and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.models.child import Child, ChildOwner


class OwnedRecord(Protocol):
    owner_ids: Sequence[int]
    legacy_parent_id: Optional[int]
    legacy_owner_id: Optional[int]


def resolve_owners(child: OwnedRecord) -> set[int]:
    """Normalize owner set and both legacy fields into one set of user ids."""
    owners = set(child.owner_ids)
    for legacy in (child.legacy_parent_id, child.legacy_owner_id):
        if legacy is not None:
            owners.add(legacy)
    return owners


def owns(user_id: int, child: OwnedRecord) -> bool:
    return user_id in resolve_owners(child)


def designate_owner(owners: Iterable[int]) -> Optional[int]:
    """Deterministic pick for the single-value legacy fields: lowest id."""
    return min(owners, default=None)


def owner_row_exists(user_id: Optional[int] = None) -> ColumnElement[bool]:
    q = select(ChildOwner.child_id).where(ChildOwner.child_id == Child.id)
    if user_id is not None:
        q = q.where(ChildOwner.user_id == user_id)
    return q.exists()


def owned_by(user_id: int) -> ColumnElement[bool]:
    """WHERE clause selecting every child ``user_id`` owns under any shape."""
    return or_(
        owner_row_exists(user_id),
        Child.legacy_parent_id == user_id,
        Child.legacy_owner_id == user_id,
    )


def unowned() -> ColumnElement[bool]:
    """WHERE clause selecting children with no owner under any shape."""
    return and_(
        ~owner_row_exists(),
        Child.legacy_parent_id.is_(None),
        Child.legacy_owner_id.is_(None),
    )


def visible_child_ids(user_id: int):
    return select(Child.id).where(owned_by(user_id))


async def child_ids_for_owner(db: AsyncSession, user_id: int) -> list[int]:
    result = await db.execute(visible_child_ids(user_id).order_by(Child.id))
    return list(result.scalars().all())


async def list_children_for_owner(db: AsyncSession, user_id: int) -> Sequence[Child]:
    result = await db.execute(
        select(Child)
        .where(owned_by(user_id))
        .order_by(Child.created_at.desc(), Child.id.desc())
        .execution_options(populate_existing=True)
    )
    return result.scalars().all()
