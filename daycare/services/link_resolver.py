"""Linking parents to children: administrative batches and self-service claims.

Self-service registration is keyed by the human-typed external id. The only
serialization point between concurrent callers is the unique index on
``children.external_id``: a caller first tries to claim an existing row with
one conditional UPDATE (rows it already owns or rows nobody owns), and only
when nothing matched does it INSERT. A unique violation on that INSERT means
another caller got there first and is reported as a conflict unless the row
turns out to be claimable after all.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from sqlalchemy import delete, func, insert, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.crud import crud_child, crud_user
from daycare.errors import ConflictError, ForbiddenError, NotFoundError, ValidationError
from daycare.models.child import Child, ChildOwner
from daycare.models.user import User, UserRole
from daycare.services.ownership import child_ids_for_owner, owned_by, owner_row_exists, unowned

logger = logging.getLogger(__name__)

EXTERNAL_ID_PATTERN = re.compile(r"^[A-Z0-9-]+$")
EXTERNAL_ID_MAX_LENGTH = 64


@dataclass
class LinkResult:
    matched: int
    modified: int


@dataclass
class LinkOrCreateResult:
    child: Child
    created: bool


def normalize_external_id(raw: Optional[str]) -> str:
    """Trim and uppercase; raise ValidationError unless alphanumeric plus hyphen."""
    value = (raw or "").strip().upper()
    if not value:
        raise ValidationError("external_id is required", reason="external_id_missing")
    if len(value) > EXTERNAL_ID_MAX_LENGTH or not EXTERNAL_ID_PATTERN.match(value):
        raise ValidationError(
            "external_id may only contain letters, digits and hyphens",
            reason="external_id_invalid",
        )
    return value


def _normalize_child_ids(child_ids: Iterable[int]) -> list[int]:
    ids = sorted(set(child_ids or []))
    if not ids:
        raise ValidationError("child_ids must be a non-empty array", reason="child_ids_missing")
    return ids


async def _get_user(db: AsyncSession, user_id: int) -> User:
    user = await crud_user.get(db, user_id)
    if user is None:
        raise NotFoundError("Parent not found")
    return user


async def _require_parent(db: AsyncSession, parent_id: int) -> User:
    user = await _get_user(db, parent_id)
    if user.role != UserRole.parent:
        raise ValidationError("Target user is not a parent", reason="not_a_parent")
    return user


async def refresh_child_cache(db: AsyncSession, user_ids: Iterable[int]) -> None:
    """Rebuild users.child_ids from the ownership query."""
    for user_id in set(user_ids):
        ids = await child_ids_for_owner(db, user_id)
        await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(child_ids=ids)
        )


# ---------------------------------------------------------------------------
# Administrative link / unlink
# ---------------------------------------------------------------------------


async def administrative_link(
    db: AsyncSession, parent_id: int, child_ids: Iterable[int]
) -> LinkResult:
    """Add ``parent_id`` to every listed child's owner set.

    Children that already carry an owner row for the parent are left as they
    are, so repeating the call reports ``modified=0``. Newly linked children
    get empty legacy fields stamped with the parent id. A populated legacy
    field already names a current owner and is kept, so legacy-only owners
    are never displaced.
    """
    parent = await _require_parent(db, parent_id)
    ids = _normalize_child_ids(child_ids)

    existing = await crud_child.get_existing_ids(db, ids)
    if not existing:
        return LinkResult(matched=0, modified=0)

    linked: list[int] = []
    for child_id in await _unlinked_child_ids(db, parent.id, existing):
        try:
            async with db.begin_nested():
                await db.execute(insert(ChildOwner).values(child_id=child_id, user_id=parent.id))
        except IntegrityError:
            # A concurrent request linked it first; relinking is a no-op
            logger.debug("Child %d already linked to parent %d", child_id, parent.id)
            continue
        linked.append(child_id)

    if linked:
        await db.execute(
            update(Child)
            .where(Child.id.in_(linked))
            .values(
                legacy_parent_id=func.coalesce(Child.legacy_parent_id, parent.id),
                legacy_owner_id=func.coalesce(Child.legacy_owner_id, parent.id),
            )
            .execution_options(synchronize_session=False)
        )

    await refresh_child_cache(db, [parent.id])
    logger.info(
        "Linked parent %d: matched=%d modified=%d", parent.id, len(existing), len(linked)
    )
    return LinkResult(matched=len(existing), modified=len(linked))


async def _unlinked_child_ids(db: AsyncSession, parent_id: int, child_ids: list[int]) -> list[int]:
    result = await db.execute(
        select(Child.id)
        .where(Child.id.in_(child_ids), ~owner_row_exists(parent_id))
        .order_by(Child.id)
    )
    return list(result.scalars().all())


async def administrative_unlink(
    db: AsyncSession, parent_id: int, child_ids: Iterable[int]
) -> LinkResult:
    """Remove ``parent_id`` from the listed children. Children are never deleted."""
    parent = await _get_user(db, parent_id)
    ids = _normalize_child_ids(child_ids)

    existing = await crud_child.get_existing_ids(db, ids)
    if not existing:
        return LinkResult(matched=0, modified=0)

    result = await db.execute(
        select(Child.id).where(Child.id.in_(existing), owned_by(parent.id))
    )
    affected = list(result.scalars().all())
    if affected:
        await unlink_owner(db, parent.id, affected)

    await refresh_child_cache(db, [parent.id])
    logger.info(
        "Unlinked parent %d: matched=%d modified=%d", parent.id, len(existing), len(affected)
    )
    return LinkResult(matched=len(existing), modified=len(affected))


async def unlink_owner(db: AsyncSession, user_id: int, child_ids: list[int]) -> None:
    """Drop ``user_id`` from owner rows and from any legacy field that holds it."""
    await db.execute(
        delete(ChildOwner)
        .where(ChildOwner.user_id == user_id, ChildOwner.child_id.in_(child_ids))
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        update(Child)
        .where(Child.id.in_(child_ids), Child.legacy_parent_id == user_id)
        .values(legacy_parent_id=None)
        .execution_options(synchronize_session=False)
    )
    await db.execute(
        update(Child)
        .where(Child.id.in_(child_ids), Child.legacy_owner_id == user_id)
        .values(legacy_owner_id=None)
        .execution_options(synchronize_session=False)
    )


# ---------------------------------------------------------------------------
# Self-service link-or-create
# ---------------------------------------------------------------------------


async def _claim_existing(db: AsyncSession, user_id: int, external_id: str) -> Optional[Child]:
    """Atomically claim the row for ``external_id`` if the caller may own it.

    Matches a row the caller already owns under any shape, or a row with no
    owner at all. Returns None when no row matched.
    """
    result = await db.execute(
        update(Child)
        .where(Child.external_id == external_id, or_(owned_by(user_id), unowned()))
        .values(
            legacy_parent_id=func.coalesce(Child.legacy_parent_id, user_id),
            legacy_owner_id=func.coalesce(Child.legacy_owner_id, user_id),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        return None

    child = await crud_child.get_by_external_id(db, external_id)
    if user_id not in child.owner_ids:
        try:
            async with db.begin_nested():
                await db.execute(insert(ChildOwner).values(child_id=child.id, user_id=user_id))
        except IntegrityError:
            # Same caller raced itself; the owner row is already there
            logger.debug("Owner row for child %d / user %d already present", child.id, user_id)
        child = await crud_child.get(db, child.id)
    return child


async def _insert_new(
    db: AsyncSession,
    user_id: int,
    external_id: str,
    name_hint: Optional[str],
    birth_date_hint: Optional[date],
) -> Child:
    child = Child(
        name=(name_hint or "").strip() or external_id,
        external_id=external_id,
        birth_date=birth_date_hint,
        legacy_parent_id=user_id,
        legacy_owner_id=user_id,
    )
    async with db.begin_nested():
        db.add(child)
        await db.flush()
        await db.execute(insert(ChildOwner).values(child_id=child.id, user_id=user_id))
    return await crud_child.get(db, child.id)


async def self_serve_link_or_create(
    db: AsyncSession,
    user_id: int,
    external_id: str,
    name_hint: Optional[str] = None,
    birth_date_hint: Optional[date] = None,
) -> LinkOrCreateResult:
    """Link the caller to the child with ``external_id``, creating it if absent.

    Raises ConflictError when the code belongs to another parent, including
    when a concurrent caller created it first.
    """
    code = normalize_external_id(external_id)
    user = await _get_user(db, user_id)
    if user.role != UserRole.parent:
        raise ForbiddenError("Only parents can link children", reason="not_a_parent")

    created = False
    child = await _claim_existing(db, user.id, code)
    if child is None:
        try:
            child = await _insert_new(db, user.id, code, name_hint, birth_date_hint)
            created = True
        except IntegrityError as exc:
            # A row exists now: either it was created concurrently or it is owned by someone else
            child = await _claim_existing(db, user.id, code)
            if child is None:
                logger.warning("Child ID %s is owned by another parent (user %d)", code, user.id)
                raise ConflictError(
                    "This child ID is already linked to another parent",
                    reason="external_id_taken",
                ) from exc

    await refresh_child_cache(db, [user.id])
    logger.info(
        "User %d %s child %d (%s)", user.id, "created" if created else "linked", child.id, code
    )
    return LinkOrCreateResult(child=child, created=created)
