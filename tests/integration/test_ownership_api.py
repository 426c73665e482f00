"""HTTP-level tests for linking, registration, parent deletion and guarded reads."""
import pytest
import pytest_asyncio

from daycare.models.report import DailyReport, DailyReportType, MonthlyReport
from daycare.models.user import UserRole


def _as(user) -> dict:
    return {"X-User-Id": str(user.id)}


@pytest_asyncio.fixture
async def people(make_user):
    admin = await make_user("admin@example.com", role=UserRole.admin)
    mom = await make_user("mom@example.com")
    dad = await make_user("dad@example.com")
    guest = await make_user("guest@example.com", role=UserRole.guest)
    return admin, mom, dad, guest


# ---------------------------------------------------------------------------
# Administrative link / unlink
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_admin_link_and_relink(client, people, make_child):
    admin, mom, _, _ = people
    kid = await make_child("Kid")
    url = f"/api/v1/parents/{mom.id}/link-children"

    first = await client.post(url, json={"childIds": [kid.id]}, headers=_as(admin))
    assert first.status_code == 200
    assert first.json() == {"ok": True, "matched": 1, "modified": 1}

    second = await client.post(url, json={"child_ids": [kid.id]}, headers=_as(admin))
    assert second.json()["modified"] == 0


@pytest.mark.asyncio
async def test_admin_link_errors(client, people, make_child):
    admin, mom, _, guest = people
    kid = await make_child("Kid")

    resp = await client.post(f"/api/v1/parents/{mom.id}/link-children", json={"child_ids": []}, headers=_as(admin))
    assert resp.status_code == 400

    resp = await client.post("/api/v1/parents/9999/link-children", json={"child_ids": [kid.id]}, headers=_as(admin))
    assert resp.status_code == 404

    resp = await client.post(f"/api/v1/parents/{guest.id}/link-children", json={"child_ids": [kid.id]}, headers=_as(admin))
    assert resp.status_code == 400
    assert resp.json()["reason"] == "not_a_parent"

    resp = await client.post(f"/api/v1/parents/{mom.id}/link-children", json={"child_ids": [kid.id]}, headers=_as(mom))
    assert resp.status_code == 403

    resp = await client.post(f"/api/v1/parents/{mom.id}/link-children", json={"child_ids": [kid.id]})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_admin_unlink_keeps_child(client, people, make_child):
    admin, mom, _, _ = people
    kid = await make_child("Kid", owners=(mom.id,), legacy_parent_id=mom.id)

    resp = await client.post(
        f"/api/v1/parents/{mom.id}/unlink-children", json={"child_ids": [kid.id]}, headers=_as(admin)
    )
    assert resp.status_code == 200
    assert resp.json()["modified"] == 1

    child = (await client.get(f"/api/v1/children/{kid.id}", headers=_as(admin))).json()
    assert child["owner_ids"] == []
    assert child["legacy_parent_id"] is None
    assert (await client.get(f"/api/v1/children/{kid.id}", headers=_as(mom))).status_code == 403


# ---------------------------------------------------------------------------
# Self-service link-or-create
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_link_child_created_then_linked(client, people):
    _, mom, _, _ = people
    created = await client.post(
        "/api/v1/parents/link-child",
        json={"externalId": "a12-345", "name": "Mia", "birthDate": "2022-01-02"},
        headers=_as(mom),
    )
    assert created.status_code == 201
    body = created.json()
    assert body["created"] is True
    assert body["child"]["external_id"] == "A12-345"
    assert body["child"]["owner_ids"] == [mom.id]

    again = await client.post("/api/v1/parents/link-child", json={"externalId": "A12-345"}, headers=_as(mom))
    assert again.status_code == 200
    assert again.json()["created"] is False
    assert again.json()["child"]["id"] == body["child"]["id"]


@pytest.mark.asyncio
async def test_link_child_owned_by_another_parent(client, people):
    _, mom, dad, _ = people
    await client.post("/api/v1/parents/link-child", json={"externalId": "Z-1"}, headers=_as(mom))
    resp = await client.post("/api/v1/parents/link-child", json={"externalId": "z-1"}, headers=_as(dad))
    assert resp.status_code == 409
    assert resp.json()["reason"] == "external_id_taken"


@pytest.mark.asyncio
async def test_link_child_rejects_bad_code_and_non_parents(client, people):
    admin, mom, _, guest = people
    resp = await client.post("/api/v1/parents/link-child", json={"externalId": "A 1"}, headers=_as(mom))
    assert resp.status_code == 400
    resp = await client.post("/api/v1/parents/link-child", json={"externalId": "A-1"}, headers=_as(guest))
    assert resp.status_code == 403
    resp = await client.post("/api/v1/parents/link-child", json={"externalId": "A-1"}, headers=_as(admin))
    assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_register_with_child(client):
    resp = await client.post(
        "/api/v1/auth/register",
        json={"name": "New", "email": "new@example.com", "child": {"externalId": "r-1", "name": "Rae"}},
    )
    assert resp.status_code == 201
    body = resp.json()
    assert body["role"] == "parent"
    assert body["child_created"] is True

    me = await client.get("/api/v1/auth/me", headers={"X-User-Id": str(body["id"])})
    assert me.json()["child_ids"] == [body["child_id"]]


@pytest.mark.asyncio
async def test_register_rolls_back_account_on_child_conflict(client, people, make_child):
    _, mom, _, _ = people
    await make_child("Taken", external_id="T-1", owners=(mom.id,))
    resp = await client.post(
        "/api/v1/auth/register", json={"email": "late@example.com", "child": {"externalId": "T-1"}}
    )
    assert resp.status_code == 409

    retry = await client.post("/api/v1/auth/register", json={"email": "late@example.com"})
    assert retry.status_code == 201


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    await client.post("/api/v1/auth/register", json={"email": "twice@example.com"})
    resp = await client.post("/api/v1/auth/register", json={"email": "twice@example.com"})
    assert resp.status_code == 409


# ---------------------------------------------------------------------------
# Admin parent overview and deletion
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def shared_child(db, people, make_child):
    _, mom, dad, _ = people
    shared = await make_child("Shared", owners=(mom.id, dad.id), legacy_parent_id=mom.id, legacy_owner_id=mom.id)
    solo = await make_child("Solo", legacy_parent_id=mom.id)
    db.add_all(
        [
            DailyReport(child_id=shared.id, date="2024-04-01", report_type=DailyReportType.post_sleep),
            DailyReport(child_id=solo.id, date="2024-04-01", report_type=DailyReportType.post_sleep),
            MonthlyReport(child_id=solo.id, month="2024-04"),
        ]
    )
    await db.flush()
    return shared, solo


@pytest.mark.asyncio
async def test_list_parents_counts_through_query_filter(client, people, shared_child):
    admin, mom, dad, _ = people
    resp = await client.get("/api/v1/admin/parents", headers=_as(admin))
    assert resp.status_code == 200
    by_id = {p["id"]: p for p in resp.json()}
    assert (by_id[mom.id]["child_count"], by_id[mom.id]["daily_count"], by_id[mom.id]["monthly_count"]) == (2, 2, 1)
    assert (by_id[dad.id]["child_count"], by_id[dad.id]["daily_count"]) == (1, 1)


@pytest.mark.asyncio
async def test_delete_parent_preserve_by_default(client, people, shared_child):
    admin, mom, dad, _ = people
    shared, solo = shared_child
    resp = await client.delete(f"/api/v1/admin/parents/{mom.id}", headers=_as(admin))
    assert resp.status_code == 200
    assert resp.json()["policy"] == "preserve"
    assert resp.json()["deleted_children"] == 0

    child = (await client.get(f"/api/v1/children/{shared.id}", headers=_as(dad))).json()
    assert child["owner_ids"] == [dad.id]
    assert child["legacy_parent_id"] == dad.id
    assert (await client.get(f"/api/v1/children/{solo.id}", headers=_as(admin))).status_code == 200


@pytest.mark.asyncio
async def test_delete_parent_hard_policy_override(client, people, shared_child):
    admin, mom, dad, _ = people
    shared, solo = shared_child
    resp = await client.delete(f"/api/v1/admin/parents/{mom.id}?policy=hard", headers=_as(admin))
    assert resp.status_code == 200
    assert resp.json()["deleted_children"] == 1
    assert resp.json()["deleted_daily_reports"] == 1
    assert (await client.get(f"/api/v1/children/{solo.id}", headers=_as(admin))).status_code == 404
    assert (await client.get(f"/api/v1/children/{shared.id}", headers=_as(dad))).status_code == 200


@pytest.mark.asyncio
async def test_delete_parent_errors(client, people):
    admin, mom, _, guest = people
    assert (await client.delete("/api/v1/admin/parents/9999", headers=_as(admin))).status_code == 404
    assert (await client.delete(f"/api/v1/admin/parents/{guest.id}", headers=_as(admin))).status_code == 400
    resp = await client.delete(f"/api/v1/admin/parents/{mom.id}?policy=nuke", headers=_as(admin))
    assert resp.status_code == 400
    assert resp.json()["reason"] == "invalid_policy"
    assert (await client.delete(f"/api/v1/admin/parents/{mom.id}", headers=_as(mom))).status_code == 403


# ---------------------------------------------------------------------------
# Children and reports behind the access guard
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_children_mine_and_guarded_reads(client, people, shared_child):
    _, mom, dad, guest = people
    shared, solo = shared_child

    mine = await client.get("/api/v1/children/mine", headers=_as(mom))
    assert {c["id"] for c in mine.json()} == {shared.id, solo.id}

    assert (await client.get(f"/api/v1/children/{solo.id}", headers=_as(dad))).status_code == 403
    assert (await client.get("/api/v1/children/9999", headers=_as(dad))).status_code == 404
    assert (await client.get(f"/api/v1/children/{solo.id}", headers=_as(guest))).status_code == 403
    assert (await client.get("/api/v1/children/mine", headers=_as(guest))).status_code == 403


@pytest.mark.asyncio
async def test_admin_creates_child_with_unique_code(client, people):
    admin, _, _, _ = people
    resp = await client.post("/api/v1/children", json={"name": "Ivy", "externalId": "iv-1"}, headers=_as(admin))
    assert resp.status_code == 201
    assert resp.json()["external_id"] == "IV-1"
    assert resp.json()["owner_ids"] == []

    dup = await client.post("/api/v1/children", json={"name": "Ivy 2", "externalId": "IV-1"}, headers=_as(admin))
    assert dup.status_code == 409


@pytest.mark.asyncio
async def test_parent_notes_and_pickups(client, people, shared_child):
    _, mom, dad, _ = people
    shared, solo = shared_child

    resp = await client.patch(
        f"/api/v1/children/{solo.id}/parent-notes",
        json={"medical_condition": "peanut allergy", "special_notes": "naps at noon"},
        headers=_as(mom),
    )
    assert resp.status_code == 200
    assert resp.json()["medical_condition"] == "peanut allergy"

    denied = await client.patch(f"/api/v1/children/{solo.id}/parent-notes", json={}, headers=_as(dad))
    assert denied.status_code == 403

    pickup = await client.post(
        f"/api/v1/children/{shared.id}/pickups",
        json={"name": "Grandpa", "phone": "555-0100", "photo_url": "/uploads/gp.jpg"},
        headers=_as(dad),
    )
    assert pickup.status_code == 201
    pickup_id = pickup.json()["id"]

    removed = await client.delete(f"/api/v1/children/{shared.id}/pickups/{pickup_id}", headers=_as(mom))
    assert removed.status_code == 200
    missing = await client.delete(f"/api/v1/children/{shared.id}/pickups/{pickup_id}", headers=_as(mom))
    assert missing.status_code == 404


@pytest.mark.asyncio
async def test_parent_report_listing_covers_legacy_children(client, people, shared_child):
    _, mom, dad, _ = people
    shared, solo = shared_child

    mom_daily = await client.get("/api/v1/daily-reports", headers=_as(mom))
    assert {r["child_id"] for r in mom_daily.json()} == {shared.id, solo.id}

    dad_daily = await client.get("/api/v1/daily-reports", headers=_as(dad))
    assert {r["child_id"] for r in dad_daily.json()} == {shared.id}

    forbidden = await client.get(f"/api/v1/monthly-reports?child_id={solo.id}", headers=_as(dad))
    assert forbidden.status_code == 403


@pytest.mark.asyncio
async def test_report_create_conflict_and_guard(client, people, shared_child):
    admin, mom, dad, _ = people
    _, solo = shared_child
    payload = {"child_id": solo.id, "date": "2024-04-02", "report_type": "pre_sleep", "milk_ml": 120}

    created = await client.post("/api/v1/daily-reports", json=payload, headers=_as(mom))
    assert created.status_code == 201
    assert created.json()["created_by"] == mom.id

    dup = await client.post("/api/v1/daily-reports", json=payload, headers=_as(admin))
    assert dup.status_code == 409

    other = await client.post("/api/v1/daily-reports", json={**payload, "date": "2024-04-03"}, headers=_as(dad))
    assert other.status_code == 403

    report_id = created.json()["id"]
    assert (await client.get(f"/api/v1/daily-reports/{report_id}", headers=_as(dad))).status_code == 403
    assert (await client.delete(f"/api/v1/daily-reports/{report_id}", headers=_as(mom))).status_code == 403
    assert (await client.delete(f"/api/v1/daily-reports/{report_id}", headers=_as(admin))).status_code == 200

    gone = await client.get(f"/api/v1/daily-reports/{report_id}", headers=_as(admin))
    assert gone.status_code == 404
    assert gone.json()["reason"] == "not_found"
    missing = await client.delete("/api/v1/monthly-reports/9999", headers=_as(admin))
    assert missing.json() == {"detail": "Report not found", "reason": "not_found"}


# ---------------------------------------------------------------------------
# Required-items notices
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_required_items_posted_by_admin_read_by_owner(client, people, shared_child):
    admin, mom, dad, guest = people
    _, solo = shared_child

    empty = await client.get(f"/api/v1/required-items/latest/{solo.id}", headers=_as(mom))
    assert empty.status_code == 200
    assert empty.json() is None

    for items in ({"diapers": True}, {"wetWipes": True, "other": "sun hat"}):
        resp = await client.post(
            "/api/v1/required-items", json={"child": solo.id, "items": items}, headers=_as(admin)
        )
        assert resp.status_code == 201

    latest = await client.get(f"/api/v1/required-items/latest/{solo.id}", headers=_as(mom))
    body = latest.json()
    assert (body["diapers"], body["wet_wipes"], body["other"]) == (False, True, "sun hat")
    assert body["created_by"] == admin.id

    assert (await client.get(f"/api/v1/required-items/latest/{solo.id}", headers=_as(dad))).status_code == 403
    assert (await client.get("/api/v1/required-items/latest/9999", headers=_as(mom))).status_code == 404


@pytest.mark.asyncio
async def test_required_items_create_is_admin_only(client, people, shared_child):
    admin, mom, _, _ = people
    shared, _ = shared_child
    denied = await client.post("/api/v1/required-items", json={"child_id": shared.id}, headers=_as(mom))
    assert denied.status_code == 403
    missing = await client.post("/api/v1/required-items", json={"child_id": 9999}, headers=_as(admin))
    assert missing.status_code == 404
