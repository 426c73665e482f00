"""Nightly convergence of legacy ownership fields into the owner set."""
import pytest

from daycare.crud import crud_child, crud_user
from daycare.services.ownership import resolve_owners
from daycare.services.scheduler_service import backfill_ownership, count_unconverged, scheduler, setup_scheduler


@pytest.mark.asyncio
async def test_backfill_converges_without_changing_owners(db, make_user, make_child):
    p = await make_user("p@example.com")
    q = await make_user("q@example.com")
    legacy_only = await make_child("legacy", legacy_parent_id=p.id, legacy_owner_id=q.id)
    set_only = await make_child("set", owners=(q.id, p.id))
    nobody = await make_child("nobody")
    before = {c.id: resolve_owners(c) for c in (legacy_only, set_only, nobody)}

    assert await count_unconverged(db) == 1
    stats = await backfill_ownership(db)

    assert stats["owner_rows_added"] == 2
    assert stats["legacy_fields_stamped"] == 1
    assert stats["caches_rebuilt"] == 2
    assert await count_unconverged(db) == 0

    for child_id, owners in before.items():
        fresh = await crud_child.get(db, child_id)
        assert resolve_owners(fresh) == owners

    converged = await crud_child.get(db, legacy_only.id)
    assert converged.owner_ids == sorted([p.id, q.id])
    stamped = await crud_child.get(db, set_only.id)
    assert stamped.legacy_parent_id == min(p.id, q.id)
    assert (await crud_user.get(db, q.id)).child_ids == sorted([legacy_only.id, set_only.id])


@pytest.mark.asyncio
async def test_backfill_is_idempotent(db, make_user, make_child):
    p = await make_user("p@example.com")
    await make_child("legacy", legacy_owner_id=p.id)
    await backfill_ownership(db)
    again = await backfill_ownership(db)
    assert again["owner_rows_added"] == 0
    assert again["legacy_fields_stamped"] == 0


def test_setup_scheduler_registers_backfill_job():
    setup_scheduler()
    job = scheduler.get_job("ownership_backfill")
    assert job is not None
    scheduler.remove_job("ownership_backfill")
