from datetime import timedelta
from decimal import Decimal
from typing import Dict

import pytest
from httpx import AsyncClient

from feetracker.backend.base import BackendUser
from feetracker.backend.sql import SqlBackend
from conftest import TODAY

YESTERDAY = TODAY - timedelta(days=1)


@pytest.fixture()
async def recorded(
    backend: SqlBackend, staff_user: BackendUser, admin_user: BackendUser, school: Dict[str, dict]
) -> Dict[str, dict]:
    student_id = school["student"]["id"]
    return {
        "feeding_today": await backend.insert(
            "feeding_fees", {"student_id": student_id, "staff_id": staff_user.id, "amount": 6, "date_paid": TODAY}
        ),
        "transport_yesterday": await backend.insert(
            "transport_fees",
            {"student_id": student_id, "staff_id": staff_user.id, "amount": 6, "date_paid": YESTERDAY},
        ),
        "admin_feeding": await backend.insert(
            "feeding_fees",
            {"student_id": student_id, "staff_id": admin_user.id, "amount": 6, "date_paid": YESTERDAY},
        ),
    }


@pytest.mark.asyncio
async def test_staff_sees_only_own_records(
    client: AsyncClient, staff_headers: Dict[str, str], recorded: Dict[str, dict]
) -> None:
    response = await client.get("/api/v1/records", headers=staff_headers)
    assert response.status_code == 200
    rows = response.json()
    assert [(r["category"], r["date_paid"]) for r in rows] == [
        ("feeding", TODAY.isoformat()),
        ("transport", YESTERDAY.isoformat()),
    ]
    assert rows[0]["student_name"] == "Akosua Owusu"
    assert rows[0]["class_name"] == "Primary 1"
    assert [r["editable"] for r in rows] == [True, False]


@pytest.mark.asyncio
async def test_staff_amends_todays_record(
    client: AsyncClient, backend: SqlBackend, staff_headers: Dict[str, str], recorded: Dict[str, dict]
) -> None:
    record_id = recorded["feeding_today"]["id"]
    response = await client.patch(f"/api/v1/records/feeding/{record_id}", json={"amount": "5"}, headers=staff_headers)
    assert response.status_code == 200
    assert Decimal(response.json()[0]["amount_paid"]) == Decimal("5")

    stored = await backend.select_one("feeding_fees", {"id": record_id})
    assert Decimal(str(stored["amount"])) == Decimal("5")


@pytest.mark.asyncio
async def test_older_records_are_locked(
    client: AsyncClient, staff_headers: Dict[str, str], recorded: Dict[str, dict]
) -> None:
    record_id = recorded["transport_yesterday"]["id"]
    response = await client.patch(f"/api/v1/records/transport/{record_id}", json={"amount": 3}, headers=staff_headers)
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_other_staff_records_are_not_found(
    client: AsyncClient, staff_headers: Dict[str, str], recorded: Dict[str, dict]
) -> None:
    record_id = recorded["admin_feeding"]["id"]
    response = await client.patch(f"/api/v1/records/feeding/{record_id}", json={"amount": 3}, headers=staff_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_school_records_are_not_amended_here(
    client: AsyncClient, staff_headers: Dict[str, str], recorded: Dict[str, dict]
) -> None:
    response = await client.patch("/api/v1/records/school/1", json={"amount": 3}, headers=staff_headers)
    assert response.status_code == 400
