from typing import Dict
from uuid import uuid4

import pytest
from httpx import AsyncClient

from feetracker.backend.base import BackendUser
from feetracker.backend.sql import SqlBackend
from conftest import ADMIN_EMAIL, login


@pytest.mark.asyncio
async def test_list_staff_includes_emails(
    client: AsyncClient, admin_headers: Dict[str, str], staff_user: BackendUser
) -> None:
    response = await client.get("/api/v1/staff", headers=admin_headers)
    assert response.status_code == 200
    emails = {s["email"]: s["role"] for s in response.json()}
    assert emails == {ADMIN_EMAIL: "admin", "staff@example.com": "staff"}


@pytest.mark.asyncio
async def test_create_staff_with_password_can_sign_in(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {"email": "esi@example.com", "full_name": "Esi Quaye", "password": "EsiPass123"}
    response = await client.post("/api/v1/staff", json=payload, headers=admin_headers)
    assert response.status_code == 201
    created = [s for s in response.json() if s["email"] == "esi@example.com"]
    assert created and created[0]["role"] == "staff"

    headers = await login(client, "esi@example.com", "EsiPass123")
    me = await client.get("/api/v1/auth/me", headers=headers)
    assert me.json()["name"] == "Esi Quaye"


@pytest.mark.asyncio
async def test_create_staff_duplicate_email(
    client: AsyncClient, admin_headers: Dict[str, str], staff_user: BackendUser
) -> None:
    payload = {"email": "staff@example.com", "full_name": "Someone Else", "password": "Another123"}
    response = await client.post("/api/v1/staff", json=payload, headers=admin_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_create_staff_rejects_bad_email(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    payload = {"email": "not-an-email", "full_name": "Nobody"}
    response = await client.post("/api/v1/staff", json=payload, headers=admin_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_change_role(client: AsyncClient, admin_headers: Dict[str, str], staff_user: BackendUser) -> None:
    response = await client.patch(
        f"/api/v1/staff/{staff_user.id}/role", json={"role": "admin"}, headers=admin_headers
    )
    assert response.status_code == 200
    roles = {s["id"]: s["role"] for s in response.json()}
    assert roles[str(staff_user.id)] == "admin"


@pytest.mark.asyncio
async def test_change_role_unknown_value(
    client: AsyncClient, admin_headers: Dict[str, str], staff_user: BackendUser
) -> None:
    response = await client.patch(
        f"/api/v1/staff/{staff_user.id}/role", json={"role": "principal"}, headers=admin_headers
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_delete_staff_removes_account(
    client: AsyncClient, admin_headers: Dict[str, str], staff_user: BackendUser
) -> None:
    response = await client.delete(f"/api/v1/staff/{staff_user.id}", headers=admin_headers)
    assert response.status_code == 200
    assert [s["email"] for s in response.json()] == [ADMIN_EMAIL]

    response = await client.post(
        "/api/v1/auth/login", json={"email": "staff@example.com", "password": "StaffPass123"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_delete_unknown_staff(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.delete(
        "/api/v1/staff/00000000-0000-0000-0000-000000000000", headers=admin_headers
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_profile_without_account_has_no_email(
    client: AsyncClient, backend: SqlBackend, admin_headers: Dict[str, str]
) -> None:
    orphan_id = uuid4()
    await backend.insert("user_profiles", {"id": orphan_id, "full_name": "Abena Sarpong", "role": "staff"})

    response = await client.get("/api/v1/staff", headers=admin_headers)
    emails = {s["id"]: s["email"] for s in response.json()}
    assert emails[str(orphan_id)] is None
