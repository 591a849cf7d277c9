import uuid

import pytest

from conftest import auth_headers, leave_payload

STUDENT_BASE = "/api/student/leave"
ADMIN_BASE = "/api/admin/leave"


async def submit(client, user, **overrides):
    res = await client.post(STUDENT_BASE, json=leave_payload(**overrides), headers=auth_headers(user))
    assert res.status_code == 201, res.text
    return res.json()["id"]


async def decide(client, admin, leave_id, status, remarks=None):
    return await client.put(
        f"{ADMIN_BASE}/{leave_id}",
        json={"status": status, "remarks": remarks},
        headers=auth_headers(admin),
    )


@pytest.mark.asyncio
async def test_admin_sees_every_student(client, student, other_student, admin):
    await submit(client, student)
    await submit(client, other_student)

    res = await client.get(ADMIN_BASE, headers=auth_headers(admin))
    assert res.status_code == 200
    body = res.json()
    assert len(body["data"]) == 2
    assert body["counts"] == {"pending": 2, "approved": 0, "rejected": 0, "total": 2}


@pytest.mark.asyncio
async def test_student_cannot_list_all(client, student):
    res = await client.get(ADMIN_BASE, headers=auth_headers(student))
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_approve_sets_approver_and_remarks(client, student, admin):
    leave_id = await submit(client, student)

    res = await decide(client, admin, leave_id, "approved", "  Travel safe ")
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["status"] == "approved"
    assert body["status_label"] == "Approved"
    assert body["approved_by"] == str(admin.id)
    assert body["approval_date"] is not None
    assert body["remarks"] == "Travel safe"
    assert body["version"] == 2


@pytest.mark.asyncio
async def test_second_decision_is_rejected_with_conflict(client, student, admin):
    leave_id = await submit(client, student)
    assert (await decide(client, admin, leave_id, "rejected", "Exams")).status_code == 200

    res = await decide(client, admin, leave_id, "approved")
    assert res.status_code == 409
    assert res.json()["detail"]["kind"] == "InvalidState"

    res = await client.get(f"{ADMIN_BASE}/{leave_id}", headers=auth_headers(admin))
    assert res.json()["status"] == "rejected"
    assert res.json()["remarks"] == "Exams"


@pytest.mark.asyncio
async def test_decision_to_pending_is_bad_request(client, student, admin):
    leave_id = await submit(client, student)
    res = await decide(client, admin, leave_id, "pending")
    assert res.status_code == 400
    assert res.json()["detail"] == {
        "message": "status must be 'approved' or 'rejected'",
        "kind": "MissingField",
        "field": "status",
    }


@pytest.mark.asyncio
async def test_decision_on_unknown_leave(client, admin):
    res = await decide(client, admin, uuid.uuid4(), "approved")
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_student_cannot_decide(client, student):
    leave_id = await submit(client, student)
    res = await client.put(
        f"{ADMIN_BASE}/{leave_id}", json={"status": "approved"}, headers=auth_headers(student)
    )
    assert res.status_code == 403


@pytest.mark.asyncio
async def test_status_tabs_and_counts(client, student, admin):
    first = await submit(client, student)
    second = await submit(client, student, reason="Medical checkup")
    await submit(client, student, reason="Cousin's engagement")
    await decide(client, admin, first, "approved")
    await decide(client, admin, second, "rejected")

    headers = auth_headers(admin)
    for status, expected in [("approved", {first}), ("rejected", {second}), ("all", None)]:
        res = await client.get(ADMIN_BASE, params={"status": status}, headers=headers)
        assert res.status_code == 200
        body = res.json()
        ids = {item["id"] for item in body["data"]}
        if expected is not None:
            assert ids == expected
        else:
            assert len(ids) == 3
        assert body["counts"] == {"pending": 1, "approved": 1, "rejected": 1, "total": 3}

    res = await client.get(ADMIN_BASE, params={"status": "bogus"}, headers=headers)
    assert res.status_code == 400
    assert res.json()["detail"]["kind"] == "MissingField"
    assert res.json()["detail"]["field"] == "status"


@pytest.mark.asyncio
async def test_search_narrows_rows_but_not_tab_counts(client, student, admin):
    await submit(client, student, destination="Varanasi")
    await submit(client, student, destination="Lucknow")

    res = await client.get(ADMIN_BASE, params={"q": "varanasi"}, headers=auth_headers(admin))
    body = res.json()
    assert [item["destination"] for item in body["data"]] == ["Varanasi"]
    assert body["counts"] == {"pending": 2, "approved": 0, "rejected": 0, "total": 2}


@pytest.mark.asyncio
async def test_search_by_student_name(client, student, other_student, admin):
    mine = await submit(client, student)
    await submit(client, other_student)

    res = await client.get(ADMIN_BASE, params={"q": "asha"}, headers=auth_headers(admin))
    assert res.status_code == 200
    body = res.json()
    assert [item["id"] for item in body["data"]] == [mine]
    assert body["data"][0]["student_name"] == "Asha Student"
    assert body["counts"]["total"] == 2


@pytest.mark.asyncio
async def test_rows_carry_student_name(client, student, admin):
    leave_id = await submit(client, student)

    res = await client.get(f"{ADMIN_BASE}/{leave_id}", headers=auth_headers(admin))
    assert res.json()["student_name"] == "Asha Student"

    res = await decide(client, admin, leave_id, "approved")
    assert res.json()["student_name"] == "Asha Student"


@pytest.mark.asyncio
async def test_history_records_each_step(client, student, admin):
    leave_id = await submit(client, student)
    res = await client.put(
        f"{STUDENT_BASE}/{leave_id}/edit",
        json=leave_payload(reason="Brother's wedding"),
        headers=auth_headers(student),
    )
    assert res.status_code == 200
    await decide(client, admin, leave_id, "approved", "Granted")

    res = await client.get(f"{ADMIN_BASE}/{leave_id}/history", headers=auth_headers(admin))
    assert res.status_code == 200
    entries = res.json()
    assert sorted(e["action"] for e in entries) == ["approved", "created", "edited"]
    approved = next(e for e in entries if e["action"] == "approved")
    assert approved["actor_id"] == str(admin.id)
    assert approved["remarks"] == "Granted"


@pytest.mark.asyncio
async def test_audit_log_filter_by_action(client, student, admin):
    leave_id = await submit(client, student)
    await client.delete(f"{STUDENT_BASE}/{leave_id}/delete", headers=auth_headers(student))

    res = await client.get(
        "/api/admin/audit-logs", params={"action": "deleted"}, headers=auth_headers(admin)
    )
    assert res.status_code == 200
    entries = res.json()
    assert len(entries) == 1
    assert entries[0]["leave_id"] == leave_id
