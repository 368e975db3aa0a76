"""Fee reports: per-student balances derived from already-fetched rows."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from fastapi import status

from feetracker.backend.base import Backend, BackendConflictError, BackendError, Row
from feetracker.core.enums import FeeCategory, PaymentStatusFilter
from feetracker.core.exceptions import ServiceError, backend_failure

from .schemas import FeeRow, PaymentRow

logger = logging.getLogger(__name__)


def as_decimal(value: Any) -> Decimal:
    if value is None:
        return Decimal("0")
    return value if isinstance(value, Decimal) else Decimal(str(value))


def as_date(value: Any) -> Optional[date]:
    if value is None or isinstance(value, date):
        return value
    return date.fromisoformat(str(value)[:10])


def _key(value: Any) -> str:
    return str(value)


@dataclass
class Lookups:
    """Reference rows keyed by id, fetched once per report."""

    students: Dict[str, Row]
    classes: Dict[str, Row]
    profiles: Dict[str, Row]

    def student_class(self, student: Row) -> Optional[Row]:
        class_id = student.get("class_id")
        return self.classes.get(_key(class_id)) if class_id is not None else None

    def staff(self, staff_id: Any) -> Row:
        return self.profiles.get(_key(staff_id), {}) if staff_id is not None else {}


def index_lookups(students: Iterable[Row], classes: Iterable[Row], profiles: Iterable[Row]) -> Lookups:
    return Lookups(
        students={_key(s["id"]): s for s in students},
        classes={_key(c["id"]): c for c in classes},
        profiles={_key(p["id"]): p for p in profiles},
    )


def in_range(day: Optional[date], start_date: Optional[date], end_date: Optional[date]) -> bool:
    if day is None:
        return False
    if start_date and day < start_date:
        return False
    if end_date and day > end_date:
        return False
    return True


def build_fee_rows(
    category: FeeCategory,
    lookups: Lookups,
    payments: Iterable[Row],
    today: date,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[FeeRow]:
    """One row per student: balance = class fee - sum of the student's payments.

    Payments outside ``start_date``..``end_date`` are not counted. A student with
    no counted payments owes the full class fee.
    """
    by_student: Dict[str, List[Row]] = defaultdict(list)
    for p in payments:
        if in_range(as_date(p.get("date_paid")), start_date, end_date):
            by_student[_key(p["student_id"])].append(p)

    rows: List[FeeRow] = []
    for key, student in lookups.students.items():
        cls = lookups.student_class(student)
        total = as_decimal(cls.get(category.class_fee_column)) if cls else Decimal("0")
        paid_rows = by_student.get(key, [])
        paid = sum((as_decimal(p.get("amount")) for p in paid_rows), Decimal("0"))
        latest = max(paid_rows, key=lambda p: (as_date(p.get("date_paid")), p["id"]), default=None)
        staff = lookups.staff(latest.get("staff_id")) if latest else {}
        latest_date = as_date(latest.get("date_paid")) if latest else None
        rows.append(
            FeeRow(
                student_id=student["id"],
                student_name=student["name"],
                class_id=student.get("class_id"),
                class_name=cls["class_name"] if cls else None,
                total_fees=total,
                amount_paid=paid,
                balance=total - paid,
                payment_count=len(paid_rows),
                latest_payment_id=latest["id"] if latest else None,
                latest_amount=as_decimal(latest.get("amount")) if latest else None,
                date_paid=latest_date,
                staff_name=staff.get("full_name"),
                staff_role=staff.get("role"),
                editable=latest_date == today,
            )
        )
    # Students without a class come last
    return sorted(rows, key=lambda r: (r.class_name is None, r.class_name or "", r.student_name))


def filter_fee_rows(
    rows: Iterable[FeeRow],
    class_id: Optional[int] = None,
    payment_status: PaymentStatusFilter = PaymentStatusFilter.ALL,
) -> List[FeeRow]:
    result = []
    for r in rows:
        if class_id is not None and r.class_id != class_id:
            continue
        if payment_status == PaymentStatusFilter.PAID and r.balance > 0:
            continue
        if payment_status == PaymentStatusFilter.OWING and r.balance <= 0:
            continue
        result.append(r)
    return result


def build_payment_rows(
    category: FeeCategory,
    lookups: Lookups,
    payments: Iterable[Row],
    today: date,
) -> List[PaymentRow]:
    rows: List[PaymentRow] = []
    for p in payments:
        student = lookups.students.get(_key(p["student_id"]))
        if student is None:
            continue
        cls = lookups.student_class(student)
        total = as_decimal(cls.get(category.class_fee_column)) if cls else Decimal("0")
        amount = as_decimal(p.get("amount"))
        staff = lookups.staff(p.get("staff_id"))
        day = as_date(p.get("date_paid"))
        rows.append(
            PaymentRow(
                record_id=p["id"],
                student_id=student["id"],
                student_name=student["name"],
                class_id=student.get("class_id"),
                class_name=cls["class_name"] if cls else None,
                total_fees=total,
                amount_paid=amount,
                balance=total - amount,
                date_paid=day,
                staff_name=staff.get("full_name"),
                staff_role=staff.get("role"),
                editable=day == today,
            )
        )
    return sorted(rows, key=lambda r: (r.date_paid, r.record_id), reverse=True)


async def fetch_lookups(backend: Backend) -> Lookups:
    try:
        students = await backend.select("students")
        classes = await backend.select("classes")
        profiles = await backend.select("user_profiles")
    except BackendError as e:
        raise backend_failure(e, "Error fetching records")
    return index_lookups(students, classes, profiles)


async def fee_report(
    backend: Backend,
    category: FeeCategory,
    today: date,
    class_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    payment_status: PaymentStatusFilter = PaymentStatusFilter.ALL,
) -> List[FeeRow]:
    lookups = await fetch_lookups(backend)
    try:
        payments = await backend.select(category.table)
    except BackendError as e:
        raise backend_failure(e, "Error fetching records")
    rows = build_fee_rows(category, lookups, payments, today, start_date, end_date)
    return filter_fee_rows(rows, class_id, payment_status)


async def payment_records(
    backend: Backend,
    category: FeeCategory,
    today: date,
    class_id: Optional[int] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[PaymentRow]:
    lookups = await fetch_lookups(backend)
    try:
        payments = await backend.select(category.table, order_by="date_paid", descending=True)
    except BackendError as e:
        raise backend_failure(e, "Error fetching records")
    rows = build_payment_rows(category, lookups, payments, today)
    return [
        r
        for r in rows
        if (class_id is None or r.class_id == class_id) and in_range(r.date_paid, start_date, end_date)
    ]


def _duplicate_message(student: Row, category: FeeCategory) -> str:
    return f"{student['name']} already paid {category.value} fees today."


async def add_payment(
    backend: Backend,
    category: FeeCategory,
    student_id: int,
    amount: Decimal,
    staff_id: UUID,
    today: date,
) -> List[FeeRow]:
    """Record a payment dated today on behalf of ``staff_id``, then refresh the report."""
    try:
        student = await backend.select_one("students", {"id": student_id})
        existing = None
        if student and category.is_daily:
            existing = await backend.select_one(category.table, {"student_id": student_id, "date_paid": today})
    except BackendError as e:
        raise backend_failure(e, "Failed to add payment")
    if not student:
        raise ServiceError("Student not found", status.HTTP_404_NOT_FOUND)
    if existing:
        logger.info("Duplicate %s payment for student %s on %s", category.value, student_id, today)
        raise ServiceError(_duplicate_message(student, category), status.HTTP_409_CONFLICT)

    try:
        await backend.insert(
            category.table,
            {"student_id": student_id, "staff_id": staff_id, "amount": amount, "date_paid": today},
        )
    except BackendConflictError as e:
        # Another device recorded the same payment between check and insert
        logger.warning("Concurrent %s payment for student %s on %s", category.value, student_id, today)
        raise ServiceError(_duplicate_message(student, category), status.HTTP_409_CONFLICT) from e
    except BackendError as e:
        raise backend_failure(e, "Failed to add payment")
    logger.info("Added %s payment of %s for student %s", category.value, amount, student_id)
    return await fee_report(backend, category, today)


async def amend_payment(
    backend: Backend,
    category: FeeCategory,
    record_id: int,
    amount: Decimal,
    today: date,
    staff_id: Optional[UUID] = None,
) -> Row:
    """Change the amount of a payment dated today; ``staff_id`` limits it to that recorder's rows."""
    filters: Dict[str, Any] = {"id": record_id}
    if staff_id is not None:
        filters["staff_id"] = staff_id
    try:
        record = await backend.select_one(category.table, filters)
    except BackendError as e:
        raise backend_failure(e, "Failed to update payment")
    if not record:
        raise ServiceError("Payment not found", status.HTTP_404_NOT_FOUND)
    if as_date(record.get("date_paid")) != today:
        raise ServiceError("Only payments recorded today can be edited", status.HTTP_403_FORBIDDEN)

    try:
        rows = await backend.update(category.table, filters, {"amount": amount})
    except BackendError as e:
        raise backend_failure(e, "Failed to update payment")
    if not rows:
        raise ServiceError("Payment not found", status.HTTP_404_NOT_FOUND)
    logger.info("Amended %s payment %s to %s", category.value, record_id, amount)
    return rows[0]
