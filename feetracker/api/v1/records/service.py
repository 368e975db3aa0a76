"""A staff member's own feeding and transport records."""

from datetime import date
from decimal import Decimal
from typing import List
from uuid import UUID

from feetracker.api.v1.reports.service import (
    amend_payment,
    as_date,
    as_decimal,
    fetch_lookups,
)
from feetracker.api.v1.reports.schemas import StaffRecordRow
from feetracker.backend.base import Backend, BackendError
from feetracker.core.enums import FeeCategory
from feetracker.core.exceptions import backend_failure

RECORDED_CATEGORIES = (FeeCategory.TRANSPORT, FeeCategory.FEEDING)


async def list_own_records(backend: Backend, staff_id: UUID, today: date) -> List[StaffRecordRow]:
    lookups = await fetch_lookups(backend)
    rows: List[StaffRecordRow] = []
    for category in RECORDED_CATEGORIES:
        try:
            payments = await backend.select(category.table, {"staff_id": staff_id})
        except BackendError as e:
            raise backend_failure(e, f"Error fetching {category.value} records")
        for p in payments:
            student = lookups.students.get(str(p["student_id"]), {})
            cls = lookups.student_class(student) if student else None
            day = as_date(p.get("date_paid"))
            rows.append(
                StaffRecordRow(
                    record_id=p["id"],
                    category=category,
                    student_name=student.get("name"),
                    class_name=cls["class_name"] if cls else None,
                    amount_paid=as_decimal(p.get("amount")),
                    date_paid=day,
                    editable=day == today,
                )
            )
    return sorted(rows, key=lambda r: (r.date_paid, r.record_id), reverse=True)


async def amend_own_record(
    backend: Backend,
    staff_id: UUID,
    category: FeeCategory,
    record_id: int,
    amount: Decimal,
    today: date,
) -> List[StaffRecordRow]:
    await amend_payment(backend, category, record_id, amount, today, staff_id=staff_id)
    return await list_own_records(backend, staff_id, today)
