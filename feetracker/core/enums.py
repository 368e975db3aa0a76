from enum import Enum


class Role(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class FeeCategory(str, Enum):
    FEEDING = "feeding"
    TRANSPORT = "transport"
    SCHOOL = "school"

    @property
    def table(self) -> str:
        return f"{self.value}_fees"

    @property
    def class_fee_column(self) -> str:
        """Column on ``classes`` holding the fixed fee for this category."""
        return f"set_{self.value}_fees"

    @property
    def is_daily(self) -> bool:
        # Feeding and transport are paid once per student per day.
        return self in (FeeCategory.FEEDING, FeeCategory.TRANSPORT)


class PaymentStatusFilter(str, Enum):
    ALL = "all"
    PAID = "paid"
    OWING = "owing"


class ScanState(str, Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    CODE_DECODED = "code_decoded"
    STUDENT_FOUND = "student_found"
    STUDENT_NOT_FOUND = "student_not_found"
    PAYMENT_RECORDED = "payment_recorded"
    PAYMENT_DUPLICATE = "payment_duplicate"
    PAYMENT_FAILED = "payment_failed"


class PaymentResult(str, Enum):
    RECORDED = "recorded"
    DUPLICATE = "duplicate"
    FAILED = "failed"
