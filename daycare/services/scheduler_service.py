"""APScheduler cron jobs (runs in-process with single uvicorn worker)."""
import logging

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy import insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from daycare.config import get_settings
from daycare.database import AsyncSessionLocal
from daycare.models.child import Child, ChildOwner
from daycare.models.user import User, UserRole
from daycare.services.link_resolver import refresh_child_cache
from daycare.services.ownership import designate_owner, owner_row_exists

logger = logging.getLogger(__name__)

scheduler = AsyncIOScheduler()


async def backfill_ownership(db: AsyncSession) -> dict[str, int]:
    """Converge the three ownership shapes without changing who owns what.

    - legacy owners missing from child_owners get an owner row
    - children with owner rows but empty legacy fields get the lowest owner stamped
    - every parent's child_ids cache is rebuilt
    """
    stats = {"owner_rows_added": 0, "legacy_fields_stamped": 0, "caches_rebuilt": 0}

    user_ids = set((await db.execute(select(User.id))).scalars().all())
    result = await db.execute(
        select(Child).execution_options(populate_existing=True).order_by(Child.id)
    )
    for child in result.scalars().all():
        owners = set(child.owner_ids)
        legacy = {
            uid for uid in (child.legacy_parent_id, child.legacy_owner_id)
            if uid is not None and uid in user_ids
        }
        for uid in sorted(legacy - owners):
            await db.execute(insert(ChildOwner).values(child_id=child.id, user_id=uid))
            stats["owner_rows_added"] += 1
        owners |= legacy

        if owners and (child.legacy_parent_id is None or child.legacy_owner_id is None):
            owner = designate_owner(owners)
            await db.execute(
                update(Child)
                .where(Child.id == child.id)
                .values(
                    legacy_parent_id=child.legacy_parent_id or owner,
                    legacy_owner_id=child.legacy_owner_id or owner,
                )
                .execution_options(synchronize_session=False)
            )
            stats["legacy_fields_stamped"] += 1

    parents = await db.execute(select(User.id).where(User.role == UserRole.parent))
    parent_ids = list(parents.scalars().all())
    await refresh_child_cache(db, parent_ids)
    stats["caches_rebuilt"] = len(parent_ids)
    return stats


async def count_unconverged(db: AsyncSession) -> int:
    """Children owned only through a legacy field."""
    result = await db.execute(
        select(Child.id).where(
            ~owner_row_exists(),
            (Child.legacy_parent_id.is_not(None)) | (Child.legacy_owner_id.is_not(None)),
        )
    )
    return len(result.scalars().all())


async def _run_ownership_backfill():
    """Nightly – converge legacy ownership fields into the owner set."""
    async with AsyncSessionLocal() as db:
        try:
            pending = await count_unconverged(db)
            stats = await backfill_ownership(db)
            await db.commit()
            logger.info("Ownership backfill done (%d legacy-only children): %s", pending, stats)
        except Exception as exc:
            logger.error("Ownership backfill failed: %s", exc)
            await db.rollback()


def setup_scheduler():
    """Register all cron jobs. Call once at app startup."""
    settings = get_settings()
    scheduler.add_job(
        _run_ownership_backfill,
        CronTrigger(hour=settings.OWNERSHIP_BACKFILL_HOUR, minute=0),
        id="ownership_backfill",
        replace_existing=True,
    )
    logger.info("Scheduler jobs registered: %s", [j.id for j in scheduler.get_jobs()])
