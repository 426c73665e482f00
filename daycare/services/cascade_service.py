"""Parent-account deletion and administrative child deletion.

Deleting a parent runs as one unit: validate, unlink the parent from every
child it owns, apply the configured policy, delete the user. All database
work happens inside a single savepoint bounded by a deadline; a timeout or
storage failure rolls the whole unit back and surfaces as TransactionError.
The deleting transaction is committed before any pickup photo file is
unlinked, so a failed commit never leaves rows pointing at missing files.

Policies:
  hard         delete children owned only by this parent, with their reports
  orphan_safe  unlink first, then delete children left with no owner at all
  preserve     never delete children; re-stamp the legacy single-owner fields
               with a remaining owner (default)
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Union

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.config import get_settings
from daycare.crud import crud_child, crud_user
from daycare.errors import NotFoundError, TransactionError, ValidationError
from daycare.models.child import AuthorizedPickup, Child, ChildOwner
from daycare.models.report import DailyReport, MonthlyReport
from daycare.models.required_items import RequiredItems
from daycare.models.user import UserRole
from daycare.services.link_resolver import refresh_child_cache, unlink_owner
from daycare.services.ownership import (
    child_ids_for_owner,
    designate_owner,
    resolve_owners,
    unowned,
)
from daycare.services.photo_storage import commit_then_remove_photo_files

logger = logging.getLogger(__name__)


class CascadePolicy(str, enum.Enum):
    hard = "hard"
    orphan_safe = "orphan_safe"
    preserve = "preserve"


@dataclass
class CascadeResult:
    policy: CascadePolicy
    unlinked_children: int = 0
    deleted_children: int = 0
    deleted_daily_reports: int = 0
    deleted_monthly_reports: int = 0
    deleted_required_items: int = 0
    rehomed_children: int = 0
    photo_urls: list[str] = field(default_factory=list)


def parse_policy(value: Union[CascadePolicy, str]) -> CascadePolicy:
    try:
        return CascadePolicy(value)
    except ValueError as exc:
        allowed = ", ".join(p.value for p in CascadePolicy)
        raise ValidationError(
            f"Unknown cascade policy {value!r}; expected one of: {allowed}",
            reason="invalid_policy",
        ) from exc


async def _owners_by_child(db: AsyncSession, child_ids: list[int]) -> dict[int, set[int]]:
    if not child_ids:
        return {}
    result = await db.execute(
        select(Child).where(Child.id.in_(child_ids)).execution_options(populate_existing=True)
    )
    return {child.id: resolve_owners(child) for child in result.scalars().all()}


async def _purge_children(db: AsyncSession, child_ids: list[int], result: CascadeResult) -> None:
    """Delete children with their reports, notices, pickups and owner rows."""
    if not child_ids:
        return
    photos = await db.execute(
        select(AuthorizedPickup.photo_url).where(AuthorizedPickup.child_id.in_(child_ids))
    )
    result.photo_urls.extend(photos.scalars().all())

    daily = await db.execute(delete(DailyReport).where(DailyReport.child_id.in_(child_ids)))
    monthly = await db.execute(delete(MonthlyReport).where(MonthlyReport.child_id.in_(child_ids)))
    await db.execute(delete(AuthorizedPickup).where(AuthorizedPickup.child_id.in_(child_ids)))
    notices = await db.execute(delete(RequiredItems).where(RequiredItems.child_id.in_(child_ids)))
    await db.execute(delete(ChildOwner).where(ChildOwner.child_id.in_(child_ids)))
    children = await db.execute(delete(Child).where(Child.id.in_(child_ids)))

    result.deleted_daily_reports += daily.rowcount
    result.deleted_monthly_reports += monthly.rowcount
    result.deleted_required_items += notices.rowcount
    result.deleted_children += children.rowcount


async def _rehome(
    db: AsyncSession, owners_by_child: dict[int, set[int]], result: CascadeResult
) -> None:
    for child_id, owners in owners_by_child.items():
        owner = designate_owner(owners)
        if owner is None:
            continue
        await db.execute(
            update(Child)
            .where(Child.id == child_id)
            .values(
                legacy_parent_id=func.coalesce(Child.legacy_parent_id, owner),
                legacy_owner_id=func.coalesce(Child.legacy_owner_id, owner),
            )
            .execution_options(synchronize_session=False)
        )
        result.rehomed_children += 1


async def _run_cascade(db: AsyncSession, parent_id: int, policy: CascadePolicy) -> CascadeResult:
    parent = await crud_user.get(db, parent_id)
    if parent is None:
        raise NotFoundError("Parent not found")
    if parent.role != UserRole.parent:
        raise ValidationError("Target user is not a parent", reason="not_a_parent")

    result = CascadeResult(policy=policy)
    try:
        async with db.begin_nested():
            owned = await child_ids_for_owner(db, parent.id)
            result.unlinked_children = len(owned)
            before = await _owners_by_child(db, owned)

            if policy is CascadePolicy.hard:
                sole = [cid for cid, owners in before.items() if owners == {parent.id}]
                await unlink_owner(db, parent.id, owned)
                await _purge_children(db, sole, result)
            elif policy is CascadePolicy.orphan_safe:
                await unlink_owner(db, parent.id, owned)
                orphans: list[int] = []
                if owned:
                    rows = await db.execute(
                        select(Child.id).where(Child.id.in_(owned), unowned())
                    )
                    orphans = list(rows.scalars().all())
                await _purge_children(db, orphans, result)
            else:
                await unlink_owner(db, parent.id, owned)
                await _rehome(db, await _owners_by_child(db, owned), result)

            co_owners = set().union(*before.values()) - {parent.id} if before else set()
            await refresh_child_cache(db, co_owners)
            await crud_user.hard_delete(db, parent.id)
    except SQLAlchemyError as exc:
        logger.error("Cascade for parent %d failed, rolled back: %s", parent_id, exc)
        raise TransactionError("Parent deletion failed and was rolled back") from exc
    return result


async def delete_parent(
    db: AsyncSession, parent_id: int, policy: Union[CascadePolicy, str, None] = None
) -> CascadeResult:
    """Delete a parent account under ``policy`` (configured default when None)."""
    settings = get_settings()
    policy = parse_policy(policy or settings.CASCADE_POLICY)
    try:
        result = await asyncio.wait_for(
            _run_cascade(db, parent_id, policy), timeout=settings.CASCADE_TIMEOUT_SECONDS
        )
    except asyncio.TimeoutError as exc:
        logger.error(
            "Cascade for parent %d exceeded %.1fs, rolled back",
            parent_id,
            settings.CASCADE_TIMEOUT_SECONDS,
        )
        raise TransactionError(
            "Parent deletion timed out and was rolled back; retry the whole operation",
            reason="cascade_timeout",
        ) from exc

    await commit_then_remove_photo_files(db, result.photo_urls)
    logger.info(
        "Deleted parent %d (%s): unlinked=%d deleted=%d rehomed=%d",
        parent_id,
        policy.value,
        result.unlinked_children,
        result.deleted_children,
        result.rehomed_children,
    )
    return result


async def delete_child(db: AsyncSession, child_id: int) -> CascadeResult:
    """Administrative delete of one child with its reports and pickup photos."""
    child = await crud_child.get(db, child_id)
    if child is None:
        raise NotFoundError("Child not found")

    owners = resolve_owners(child)
    result = CascadeResult(policy=CascadePolicy.hard)
    async with db.begin_nested():
        await _purge_children(db, [child.id], result)
        await refresh_child_cache(db, owners)

    await commit_then_remove_photo_files(db, result.photo_urls)
    logger.info(
        "Deleted child %d with %d daily and %d monthly reports",
        child_id,
        result.deleted_daily_reports,
        result.deleted_monthly_reports,
    )
    return result
