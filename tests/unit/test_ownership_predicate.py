"""Ownership is the union of owner rows and both legacy single-owner columns."""
from types import SimpleNamespace

import pytest
import pytest_asyncio
from sqlalchemy import select

from daycare.models.child import Child
from daycare.models.user import UserRole
from daycare.services.ownership import (
    child_ids_for_owner,
    designate_owner,
    list_children_for_owner,
    owned_by,
    owns,
    resolve_owners,
    unowned,
)


def _record(owner_ids=(), a=None, b=None):
    return SimpleNamespace(owner_ids=list(owner_ids), legacy_parent_id=a, legacy_owner_id=b)


def test_resolve_owners_unions_all_shapes():
    assert resolve_owners(_record([1, 2], a=3, b=1)) == {1, 2, 3}


def test_resolve_owners_ignores_empty_legacy_fields():
    assert resolve_owners(_record()) == set()
    assert resolve_owners(_record(b=7)) == {7}


@pytest.mark.parametrize(
    "record",
    [_record([5]), _record(a=5), _record(b=5), _record([9], a=5, b=9)],
)
def test_owns_through_any_single_shape(record):
    assert owns(5, record)


def test_owns_false_for_stranger():
    assert not owns(4, _record([1], a=2, b=3))


def test_designate_owner_is_lowest_id():
    assert designate_owner({8, 3, 5}) == 3
    assert designate_owner(set()) is None


# ---------------------------------------------------------------------------
# Query form agrees with the in-memory form
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def mixed_shapes(make_user, make_child):
    p1 = await make_user("p1@example.com")
    p2 = await make_user("p2@example.com")
    children = [
        await make_child("set-only", owners=(p1.id,)),
        await make_child("legacy-a", legacy_parent_id=p1.id),
        await make_child("legacy-b", legacy_owner_id=p1.id),
        await make_child("co-owned", owners=(p1.id, p2.id), legacy_parent_id=p2.id),
        await make_child("other", owners=(p2.id,), legacy_owner_id=p2.id),
        await make_child("nobody"),
    ]
    return p1, p2, children


@pytest.mark.asyncio
async def test_query_filter_matches_predicate(db, mixed_shapes):
    p1, p2, children = mixed_shapes
    for user in (p1, p2):
        expected = sorted(c.id for c in children if owns(user.id, c))
        assert await child_ids_for_owner(db, user.id) == expected


@pytest.mark.asyncio
async def test_list_children_for_owner_sees_legacy_children(db, mixed_shapes):
    p1, _, _ = mixed_shapes
    names = {c.name for c in await list_children_for_owner(db, p1.id)}
    assert names == {"set-only", "legacy-a", "legacy-b", "co-owned"}


@pytest.mark.asyncio
async def test_unowned_selects_only_ownerless_children(db, mixed_shapes):
    _, _, children = mixed_shapes
    result = await db.execute(select(Child.name).where(unowned()))
    assert list(result.scalars().all()) == ["nobody"]
    assert [c.name for c in children if not resolve_owners(c)] == ["nobody"]


@pytest.mark.asyncio
async def test_owned_by_has_no_admin_bypass(db, make_user, mixed_shapes):
    admin = await make_user("boss@example.com", role=UserRole.admin)
    result = await db.execute(select(Child.id).where(owned_by(admin.id)))
    assert result.scalars().all() == []
