from typing import Dict

import pytest
from httpx import AsyncClient

from feetracker.backend.base import BackendUser
from feetracker.backend.sql import SqlBackend
from conftest import ADMIN_EMAIL, ADMIN_PASSWORD, STAFF_EMAIL, STAFF_PASSWORD, login


@pytest.mark.asyncio
async def test_login_success(client: AsyncClient, admin_user: BackendUser) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    assert response.status_code == 200
    data = response.json()
    assert data["token_type"] == "bearer"
    assert data["access_token"]
    assert data["user"]["role"] == "admin"
    assert data["user"]["name"] == "Ama Mensah"
    assert response.cookies.get("token") == data["access_token"]


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, admin_user: BackendUser) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": ADMIN_EMAIL, "password": "wrong-password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid login credentials"


@pytest.mark.asyncio
async def test_login_unknown_email(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": "whatever"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_login_without_profile_is_refused(client: AsyncClient, backend: SqlBackend) -> None:
    await backend.create_user("orphan@example.com", "OrphanPass123")
    response = await client.post(
        "/api/v1/auth/login", json={"email": "orphan@example.com", "password": "OrphanPass123"}
    )
    assert response.status_code == 403
    assert response.json()["detail"] == "No staff profile found for this account"


@pytest.mark.asyncio
async def test_oauth_form_login(client: AsyncClient, staff_user: BackendUser) -> None:
    response = await client.post(
        "/api/v1/auth/login-oauth", data={"username": STAFF_EMAIL, "password": STAFF_PASSWORD}
    )
    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_me_returns_identity(client: AsyncClient, staff_headers: Dict[str, str]) -> None:
    response = await client.get("/api/v1/auth/me", headers=staff_headers)
    assert response.status_code == 200
    assert response.json()["email"] == STAFF_EMAIL
    assert response.json()["role"] == "staff"


@pytest.mark.asyncio
async def test_me_requires_token(client: AsyncClient) -> None:
    response = await client.get("/api/v1/auth/me")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_backend_session(client: AsyncClient, staff_user: BackendUser) -> None:
    headers = await login(client, STAFF_EMAIL, STAFF_PASSWORD)
    response = await client.post("/api/v1/auth/logout", headers=headers)
    assert response.status_code == 204

    response = await client.get("/api/v1/auth/me", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_without_session_is_harmless(client: AsyncClient) -> None:
    response = await client.post("/api/v1/auth/logout")
    assert response.status_code == 204


@pytest.mark.asyncio
async def test_dashboard_tools_follow_role(
    client: AsyncClient, admin_headers: Dict[str, str], staff_headers: Dict[str, str]
) -> None:
    admin = (await client.get("/dashboard", headers=admin_headers)).json()
    staff = (await client.get("/dashboard", headers=staff_headers)).json()

    assert admin["full_name"] == "Ama Mensah"
    assert [t["title"] for t in admin["tools"]] == [
        "Set Up Term",
        "Manage Students",
        "Manage Classes",
        "Manage Staff",
        "View Reports",
    ]
    assert [t["title"] for t in staff["tools"]] == ["Scan Student QR", "View Records"]


@pytest.mark.asyncio
async def test_staff_cannot_reach_admin_routes(client: AsyncClient, staff_headers: Dict[str, str]) -> None:
    response = await client.get("/api/v1/classes", headers=staff_headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Insufficient permissions"


@pytest.mark.asyncio
async def test_form_logout_redirects_to_login(client: AsyncClient, admin_user: BackendUser) -> None:
    response = await client.post("/login", data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD})
    client.cookies.set("token", response.cookies.get("token"))

    response = await client.post("/logout")
    assert response.status_code == 303
    assert response.headers["location"] == "/login"

    client.cookies.clear()
    response = await client.get("/dashboard")
    assert response.status_code == 307


@pytest.mark.asyncio
async def test_demoted_admin_loses_admin_routes_immediately(
    client: AsyncClient, backend: SqlBackend, admin_user: BackendUser, admin_headers: Dict[str, str]
) -> None:
    assert (await client.get("/api/v1/staff", headers=admin_headers)).status_code == 200

    await backend.update("user_profiles", {"id": admin_user.id}, {"role": "staff"})

    response = await client.get("/api/v1/staff", headers=admin_headers)
    assert response.status_code == 403
    me = await client.get("/api/v1/auth/me", headers=admin_headers)
    assert me.json()["role"] == "staff"


@pytest.mark.asyncio
async def test_removed_profile_ends_session(
    client: AsyncClient, backend: SqlBackend, staff_user: BackendUser, staff_headers: Dict[str, str]
) -> None:
    await backend.delete("user_profiles", {"id": staff_user.id})

    response = await client.get("/api/v1/auth/me", headers=staff_headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_dashboard_tools_link_to_live_routes(
    client: AsyncClient, admin_headers: Dict[str, str], staff_headers: Dict[str, str]
) -> None:
    for headers in (admin_headers, staff_headers):
        tools = (await client.get("/dashboard", headers=headers)).json()["tools"]
        for tool in tools:
            response = await client.get(tool["path"], headers=headers)
            assert response.status_code == 200, tool["path"]
