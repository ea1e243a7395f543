"""Teacher salary and attendance models."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from school_payroll.models.base import Base, TimestampMixin, uuid_pk


class TeacherSalary(Base, TimestampMixin):
    """Monthly base salary of a teacher.

    Superseded rows are deactivated, never deleted. At most one row per
    teacher is active.
    """

    __tablename__ = "teacher_salary"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(nullable=False)
    monthly_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("monthly_salary >= 0", name="teacher_salary_amount_check"),
        Index(
            "teacher_salary_one_active",
            "teacher_id",
            unique=True,
            postgresql_where=text("is_active"),
            sqlite_where=text("is_active = 1"),
        ),
    )


class TeacherAttendanceRecord(Base, TimestampMixin):
    """A single absence event for a teacher on a date."""

    __tablename__ = "teacher_attendance"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(nullable=False)
    attendance_date: Mapped[date] = mapped_column("date", Date, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="absent")
    is_deductible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("teacher_id", "date", name="teacher_attendance_teacher_date_unique"),
        CheckConstraint(
            "status IN ('absent', 'casual_leave', 'earned_leave')",
            name="teacher_attendance_status_check",
        ),
    )
