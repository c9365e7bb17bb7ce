import pytest
from httpx import AsyncClient

from app.auth.security import create_access_token
from app.core.models import SYSTEM_AUTO_EMERGENCY

BASE = "/api/v1/leaves"


def _leave_body(employee_id: str, leave_type: str = "ANNUAL", **overrides) -> dict:
    body = {
        "employee_id": employee_id,
        "leave_type": leave_type,
        "start_date": "2024-06-01",
        "end_date": "2024-06-05",
        "reason": "Family function",
    }
    body.update(overrides)
    return body


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "up"}


@pytest.mark.asyncio
async def test_lookup_endpoints(client: AsyncClient) -> None:
    types = await client.get(f"{BASE}/types")
    assert types.status_code == 200
    assert types.json() == ["SICK", "CASUAL", "ANNUAL", "EMERGENCY"]

    statuses = await client.get(f"{BASE}/statuses")
    assert statuses.status_code == 200
    assert set(statuses.json()) == {"PENDING", "SUPERVISOR_APPROVED", "HR_APPROVED", "AGENCY_APPROVED", "REJECTED"}


@pytest.mark.asyncio
async def test_requires_token(client: AsyncClient) -> None:
    assert (await client.get(BASE)).status_code == 401
    assert (await client.post(BASE, json=_leave_body("x"))).status_code == 401


@pytest.mark.asyncio
async def test_rejects_inactive_user_token(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard", is_active=False)
    resp = await client.get(BASE, headers=auth_headers(guard))
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_rejects_garbage_token(client: AsyncClient) -> None:
    resp = await client.get(BASE, headers={"Authorization": "Bearer not-a-jwt"})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_create_leave(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("Ravi Guard", "Guard")
    resp = await client.post(BASE, json=_leave_body(guard.employee_id), headers=auth_headers(guard))
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "PENDING"
    assert data["pending_with"] == "Supervisor"
    assert data["employee"]["name"] == "Ravi Guard"
    assert data["employee"]["role"] == "Guard"
    assert data["employee"]["designation"]["name"] == "Security Officer"


@pytest.mark.asyncio
async def test_create_emergency_accepts_lowercase_type(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    resp = await client.post(BASE, json=_leave_body(guard.employee_id, "emergency"), headers=auth_headers(guard))
    assert resp.status_code == 201
    data = resp.json()
    assert data["status"] == "AGENCY_APPROVED"
    assert data["agency_approved_by"] == SYSTEM_AUTO_EMERGENCY
    assert data["pending_with"] == "Supervisor (Post-Acceptance)"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "overrides",
    [
        {"start_date": "2024-06-05", "end_date": "2024-06-01"},
        {"leave_type": "MATERNITY"},
        {"reason": ""},
    ],
)
async def test_create_validation_errors(client: AsyncClient, staff, auth_headers, overrides) -> None:
    guard = await staff.add("G", "Guard")
    resp = await client.post(BASE, json=_leave_body(guard.employee_id, **overrides), headers=auth_headers(guard))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_create_for_foreign_employee_is_not_found(client: AsyncClient, staff, other_staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    outsider = await other_staff.add("O", "Guard")
    resp = await client.post(BASE, json=_leave_body(outsider.employee_id), headers=auth_headers(guard))
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Employee not found in your agency context"


@pytest.mark.asyncio
async def test_full_approval_chain(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    sup = await staff.add("S", "Site Supervisor")
    hr = await staff.add("H", "HR Manager")
    leave_id = (await client.post(BASE, json=_leave_body(guard.employee_id), headers=auth_headers(guard))).json()["id"]

    resp = await client.put(
        f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(sup)
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "SUPERVISOR_APPROVED"
    assert resp.json()["pending_with"] == "HR"

    resp = await client.put(
        f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(hr)
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["status"] == "AGENCY_APPROVED"
    assert data["supervisor_approved_by"] == sup.id
    assert data["hr_approved_by"] == hr.id
    assert data["agency_approved_by"] == hr.id
    assert data["pending_with"] == ""


@pytest.mark.asyncio
async def test_list_is_role_scoped(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    peer = await staff.add("P", "Guard")
    sup = await staff.add("S", "Site Supervisor")
    own = (await client.post(BASE, json=_leave_body(guard.employee_id), headers=auth_headers(guard))).json()["id"]
    other = (await client.post(BASE, json=_leave_body(peer.employee_id), headers=auth_headers(peer))).json()["id"]

    guard_view = await client.get(BASE, headers=auth_headers(guard))
    assert guard_view.status_code == 200
    assert [lr["id"] for lr in guard_view.json()] == [own]

    sup_view = await client.get(BASE, headers=auth_headers(sup))
    assert {lr["id"] for lr in sup_view.json()} == {own, other}


@pytest.mark.asyncio
async def test_approve_without_permission_is_forbidden(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    peer = await staff.add("P", "Guard")
    leave_id = (await client.post(BASE, json=_leave_body(peer.employee_id), headers=auth_headers(peer))).json()["id"]

    resp = await client.put(
        f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(guard)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "You do not have permission to access this resource"


@pytest.mark.asyncio
async def test_permission_does_not_grant_approval_authority(client: AsyncClient, staff, auth_headers) -> None:
    lead = await staff.add("L", "Shift Lead", permissions=["approve_leave"])
    peer = await staff.add("P", "Guard")
    leave_id = (await client.post(BASE, json=_leave_body(peer.employee_id), headers=auth_headers(peer))).json()["id"]

    resp = await client.put(
        f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(lead)
    )
    assert resp.status_code == 403
    assert resp.json()["detail"] == "You are not authorized to perform this action"


@pytest.mark.asyncio
async def test_supervisor_cannot_approve_hr_leave(client: AsyncClient, staff, auth_headers) -> None:
    sup = await staff.add("S", "Site Supervisor")
    hr = await staff.add("H", "HR Manager")
    leave_id = (await client.post(BASE, json=_leave_body(hr.employee_id), headers=auth_headers(hr))).json()["id"]

    resp = await client.put(
        f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(sup)
    )
    assert resp.status_code == 403


@pytest.mark.asyncio
async def test_reject_requires_reason(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    sup = await staff.add("S", "Site Supervisor")
    leave_id = (await client.post(BASE, json=_leave_body(guard.employee_id), headers=auth_headers(guard))).json()["id"]

    resp = await client.put(f"{BASE}/{leave_id}/approve", json={"status": "REJECTED"}, headers=auth_headers(sup))
    assert resp.status_code == 422


@pytest.mark.asyncio
async def test_rejected_leave_cannot_be_acted_on(client: AsyncClient, staff, auth_headers) -> None:
    guard = await staff.add("G", "Guard")
    sup = await staff.add("S", "Site Supervisor")
    admin = await staff.add("A", "Agency Admin", with_employee=False)
    leave_id = (await client.post(BASE, json=_leave_body(guard.employee_id), headers=auth_headers(guard))).json()["id"]

    resp = await client.put(
        f"{BASE}/{leave_id}/approve",
        json={"status": "REJECTED", "rejection_reason": "Short staffed"},
        headers=auth_headers(sup),
    )
    assert resp.status_code == 200
    assert resp.json()["status"] == "REJECTED"
    assert resp.json()["rejection_reason"] == "Short staffed"
    assert resp.json()["pending_with"] == ""

    resp = await client.put(
        f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(admin)
    )
    assert resp.status_code == 409


@pytest.mark.asyncio
async def test_approve_unknown_leave(client: AsyncClient, staff, auth_headers) -> None:
    admin = await staff.add("A", "Agency Admin", with_employee=False)
    resp = await client.put(
        f"{BASE}/does-not-exist/approve", json={"status": "AGENCY_APPROVED"}, headers=auth_headers(admin)
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Leave request not found"


@pytest.mark.asyncio
async def test_roleless_account_ignores_token_role_claim(client: AsyncClient, staff, auth_headers) -> None:
    nobody = await staff.add("N", None)
    peer = await staff.add("P", "Guard")
    leave_id = (await client.post(BASE, json=_leave_body(peer.employee_id), headers=auth_headers(peer))).json()["id"]
    token = create_access_token(
        subject={"sub": nobody.id, "agency_id": nobody.agency_id, "role": "Agency Admin"}
    )
    headers = {"Authorization": f"Bearer {token}"}

    resp = await client.put(f"{BASE}/{leave_id}/approve", json={"status": "AGENCY_APPROVED"}, headers=headers)
    assert resp.status_code == 403

    listed = await client.get(BASE, headers=headers)
    assert listed.status_code == 200
    assert listed.json() == []
