"""Tables behind the SQL backend. Names mirror the hosted backend's tables."""

import uuid

from sqlalchemy import Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from feetracker.db.session import Base


class AuthUser(Base):
    """Backend account. Password hash is null for invited accounts."""

    __tablename__ = "auth_users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(255), nullable=False, unique=True)
    password_hash = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class AuthSession(Base):
    """Live backend session; deleting the row revokes its access token."""

    __tablename__ = "auth_sessions"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("auth_users.id", ondelete="CASCADE"), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id = Column(UUID(as_uuid=True), ForeignKey("auth_users.id", ondelete="CASCADE"), primary_key=True)
    full_name = Column(String(255), nullable=False)
    # admin | staff
    role = Column(String(20), nullable=False, default="staff")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class SchoolClass(Base):
    """Class with its fixed per-category fee amounts."""

    __tablename__ = "classes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    class_name = Column(String(100), nullable=False, unique=True)
    set_feeding_fees = Column(Numeric(12, 2), nullable=False, default=6)
    set_transport_fees = Column(Numeric(12, 2), nullable=False, default=6)
    set_school_fees = Column(Numeric(12, 2), nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class Student(Base):
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, autoincrement=True)
    # Value printed in the student's QR code
    student_code = Column(String(50), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    class_id = Column(Integer, ForeignKey("classes.id", ondelete="RESTRICT"), nullable=True)
    parent_contact = Column(String(100), nullable=False, default="")
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class FeeRecordMixin:
    id = Column(Integer, primary_key=True, autoincrement=True)
    amount = Column(Numeric(12, 2), nullable=False)
    date_paid = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)


class FeedingFee(FeeRecordMixin, Base):
    __tablename__ = "feeding_fees"
    __table_args__ = (
        # One feeding payment per student per calendar day
        UniqueConstraint("student_id", "date_paid", name="uq_feeding_fee_student_day"),
    )

    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)


class TransportFee(FeeRecordMixin, Base):
    __tablename__ = "transport_fees"
    __table_args__ = (
        UniqueConstraint("student_id", "date_paid", name="uq_transport_fee_student_day"),
    )

    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)


class SchoolFee(FeeRecordMixin, Base):
    """School fees are paid in installments; several per day are allowed."""

    __tablename__ = "school_fees"

    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    staff_id = Column(UUID(as_uuid=True), ForeignKey("user_profiles.id", ondelete="SET NULL"), nullable=True)
