from typing import Dict

import pytest
from httpx import AsyncClient

NEW_STUDENT = {
    "student_code": "STU-2002",
    "name": "Yaw Asante",
    "parent_contact": "0205550199",
}


@pytest.mark.asyncio
async def test_create_student_returns_refreshed_list(
    client: AsyncClient, admin_headers: Dict[str, str], school: Dict[str, dict]
) -> None:
    payload = {**NEW_STUDENT, "class_id": school["class"]["id"]}
    response = await client.post("/api/v1/students", json=payload, headers=admin_headers)
    assert response.status_code == 201
    students = response.json()
    # Newest first
    assert [s["name"] for s in students] == ["Yaw Asante", "Akosua Owusu"]
    assert students[0]["class_name"] == "Primary 1"


@pytest.mark.asyncio
async def test_create_student_requires_all_fields(
    client: AsyncClient, admin_headers: Dict[str, str], school: Dict[str, dict]
) -> None:
    payload = {**NEW_STUDENT, "class_id": school["class"]["id"], "parent_contact": " "}
    response = await client.post("/api/v1/students", json=payload, headers=admin_headers)
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_student_unknown_class(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.post("/api/v1/students", json={**NEW_STUDENT, "class_id": 42}, headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Class not found"


@pytest.mark.asyncio
async def test_duplicate_student_code_conflicts(
    client: AsyncClient, admin_headers: Dict[str, str], school: Dict[str, dict]
) -> None:
    payload = {**NEW_STUDENT, "student_code": "STU-1001", "class_id": school["class"]["id"]}
    response = await client.post("/api/v1/students", json=payload, headers=admin_headers)
    assert response.status_code == 409


@pytest.mark.asyncio
async def test_search_by_name_or_contact(
    client: AsyncClient, admin_headers: Dict[str, str], school: Dict[str, dict]
) -> None:
    await client.post(
        "/api/v1/students", json={**NEW_STUDENT, "class_id": school["class"]["id"]}, headers=admin_headers
    )

    by_name = await client.get("/api/v1/students", params={"search": "akosua"}, headers=admin_headers)
    assert [s["student_code"] for s in by_name.json()] == ["STU-1001"]

    by_contact = await client.get("/api/v1/students", params={"search": "0205"}, headers=admin_headers)
    assert [s["student_code"] for s in by_contact.json()] == ["STU-2002"]


@pytest.mark.asyncio
async def test_update_student(client: AsyncClient, admin_headers: Dict[str, str], school: Dict[str, dict]) -> None:
    student_id = school["student"]["id"]
    response = await client.patch(
        f"/api/v1/students/{student_id}", json={"name": "Akosua Owusu-Ansah"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()[0]["name"] == "Akosua Owusu-Ansah"
    assert response.json()[0]["student_code"] == "STU-1001"


@pytest.mark.asyncio
async def test_delete_student(client: AsyncClient, admin_headers: Dict[str, str], school: Dict[str, dict]) -> None:
    student_id = school["student"]["id"]
    response = await client.delete(f"/api/v1/students/{student_id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() == []

    response = await client.delete(f"/api/v1/students/{student_id}", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Student not found"
