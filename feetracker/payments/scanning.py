"""QR scan sessions.

A session runs from scanner activation to a recorded payment, a reported error
or an operator restart. The capture surface lives on the client and reports
every decoded frame; the session keeps only the first distinct code per
activation and asks the client to tear the scanner down once one is accepted.
"""

import logging
from typing import Dict, Optional
from uuid import UUID

from feetracker.backend.base import BackendError
from feetracker.core.enums import FeeCategory, PaymentResult, ScanState
from feetracker.payments.recorder import PaymentOutcome, PaymentRecorder, StudentCard

logger = logging.getLogger(__name__)

STUDENT_NOT_FOUND = "Student not found"

_OUTCOME_STATES = {
    PaymentResult.RECORDED: ScanState.PAYMENT_RECORDED,
    PaymentResult.DUPLICATE: ScanState.PAYMENT_DUPLICATE,
    PaymentResult.FAILED: ScanState.PAYMENT_FAILED,
}

# States in which a student card is on screen and a fee may be taken
_CARD_STATES = (
    ScanState.STUDENT_FOUND,
    ScanState.PAYMENT_RECORDED,
    ScanState.PAYMENT_DUPLICATE,
    ScanState.PAYMENT_FAILED,
)


class ScanSessionError(Exception):
    """Operation not allowed in the session's current state."""


class ScanSession:
    def __init__(self, recorder: PaymentRecorder) -> None:
        self._recorder = recorder
        self.state = ScanState.IDLE
        self.last_code: Optional[str] = None
        self.student: Optional[StudentCard] = None
        self.error: Optional[str] = None
        self.message: Optional[str] = None

    @property
    def scanner_active(self) -> bool:
        return self.state == ScanState.SCANNING

    def start(self) -> None:
        self.state = ScanState.SCANNING
        self.last_code = None
        self.student = None
        self.error = None
        self.message = None

    async def decode(self, text: str) -> bool:
        """Handle one decoded frame. Returns True when it triggered a lookup."""
        if self.state != ScanState.SCANNING or text == self.last_code:
            return False

        # Accept and tear down before the lookup so repeated frames are dropped
        self.last_code = text
        self.state = ScanState.CODE_DECODED
        self.student = None
        self.error = None
        self.message = None

        try:
            student = await self._recorder.resolve_student(text)
        except BackendError as e:
            logger.warning("Student lookup for %r failed: %s", text, e.message)
            student = None

        if student is None:
            self.state = ScanState.STUDENT_NOT_FOUND
            self.error = STUDENT_NOT_FOUND
        else:
            self.state = ScanState.STUDENT_FOUND
            self.student = student
        return True

    async def pay(self, category: FeeCategory) -> PaymentOutcome:
        if self.state not in _CARD_STATES or self.student is None:
            raise ScanSessionError("No student selected; scan a student code first")

        outcome = await self._recorder.record(self.student, category)
        self.state = _OUTCOME_STATES[outcome.result]
        if outcome.result == PaymentResult.RECORDED:
            self.message, self.error = outcome.message, None
        else:
            self.message, self.error = None, outcome.message
        return outcome


class ScanSessionStore:
    """One scan session per staff member; starting again replaces the old one."""

    def __init__(self) -> None:
        self._sessions: Dict[UUID, ScanSession] = {}

    def start(self, staff_id: UUID, recorder: PaymentRecorder) -> ScanSession:
        session = ScanSession(recorder)
        session.start()
        self._sessions[staff_id] = session
        return session

    def get(self, staff_id: UUID) -> Optional[ScanSession]:
        return self._sessions.get(staff_id)

    def discard(self, staff_id: UUID) -> None:
        self._sessions.pop(staff_id, None)
