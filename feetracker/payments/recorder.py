"""Daily fee recording for scanned students.

A payment is written at most once per (student, category, calendar day): the
recorder checks for an existing row first, and the daily fee tables carry a
unique constraint so that two devices racing past the check still produce a
single row. The losing insert is reported as a duplicate.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Callable, Optional
from uuid import UUID

from feetracker.backend.base import Backend, BackendConflictError, BackendError
from feetracker.core.enums import FeeCategory, PaymentResult

logger = logging.getLogger(__name__)

# Flat amount charged per scan; not read from the class fee configuration.
DAILY_FEE_AMOUNT = Decimal("6")
CURRENCY = "GHS"


@dataclass(frozen=True)
class StudentCard:
    id: int
    student_code: str
    name: str
    class_name: Optional[str] = None


@dataclass(frozen=True)
class PaymentOutcome:
    result: PaymentResult
    message: str
    category: FeeCategory
    record_id: Optional[int] = None


def duplicate_message(student: StudentCard, category: FeeCategory) -> str:
    return f"{student.name} already paid {category.value} fees today."


def recorded_message(category: FeeCategory, amount: Decimal) -> str:
    return f"{category.value} fee of {CURRENCY} {amount} recorded successfully!"


class PaymentRecorder:
    def __init__(
        self,
        backend: Backend,
        staff_id: UUID,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._backend = backend
        self._staff_id = staff_id
        self._today = today

    async def resolve_student(self, code: str) -> Optional[StudentCard]:
        """Look up a scanned code. Backend errors propagate as BackendError."""
        student = await self._backend.select_one("students", {"student_code": code})
        if not student:
            logger.info("No student for scanned code %r", code)
            return None

        class_name = None
        if student.get("class_id") is not None:
            cls = await self._backend.select_one("classes", {"id": student["class_id"]})
            class_name = cls["class_name"] if cls else None
        return StudentCard(
            id=student["id"],
            student_code=student["student_code"],
            name=student["name"],
            class_name=class_name,
        )

    async def has_paid(self, student_id: int, category: FeeCategory, on_date: date) -> bool:
        existing = await self._backend.select_one(
            category.table, {"student_id": student_id, "date_paid": on_date}
        )
        return existing is not None

    async def record(self, student: StudentCard, category: FeeCategory) -> PaymentOutcome:
        if not category.is_daily:
            raise ValueError(f"{category.value} fees are not recorded by scanning")

        today = self._today()
        try:
            if await self.has_paid(student.id, category, today):
                logger.info("Duplicate %s payment for student %s on %s", category.value, student.id, today)
                return PaymentOutcome(PaymentResult.DUPLICATE, duplicate_message(student, category), category)

            row = await self._backend.insert(
                category.table,
                {
                    "student_id": student.id,
                    "staff_id": self._staff_id,
                    "amount": DAILY_FEE_AMOUNT,
                    "date_paid": today,
                },
            )
        except BackendConflictError:
            # Another device recorded the same payment between check and insert
            logger.warning("Concurrent %s payment for student %s on %s", category.value, student.id, today)
            return PaymentOutcome(PaymentResult.DUPLICATE, duplicate_message(student, category), category)
        except BackendError as e:
            logger.error("Failed to record %s payment for student %s: %s", category.value, student.id, e.message)
            return PaymentOutcome(PaymentResult.FAILED, "Failed to record payment", category)

        logger.info("Recorded %s payment %s for student %s", category.value, row.get("id"), student.id)
        return PaymentOutcome(
            PaymentResult.RECORDED,
            recorded_message(category, DAILY_FEE_AMOUNT),
            category,
            record_id=row.get("id"),
        )
