"""Monthly teacher payroll and period lock models."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    DateTime,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from school_payroll.models.base import Base, TimestampMixin, uuid_pk


class TeacherPayroll(Base, TimestampMixin):
    """One computed payroll row per teacher per month.

    net_salary is the authoritative payable amount. final_salary is the
    legacy "gross minus attendance deduction" figure and is derived.
    """

    __tablename__ = "teacher_payroll"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    monthly_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    carry_forward: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    gross_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_days_in_month: Mapped[int] = mapped_column(Integer, nullable=False)
    deductible_absences: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    per_day_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    total_deduction: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    security_deposit_deduction: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    advance_deduction: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    loan_deduction: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    net_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)

    status: Mapped[str] = mapped_column(String, nullable=False, default="pending")
    paid_date: Mapped[date | None] = mapped_column(Date, nullable=True)
    is_locked: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("teacher_id", "month", "year", name="teacher_payroll_period_unique"),
        CheckConstraint("status IN ('pending', 'paid')", name="teacher_payroll_status_check"),
        CheckConstraint("month BETWEEN 1 AND 12", name="teacher_payroll_month_check"),
        CheckConstraint(
            "status != 'paid' OR paid_date IS NOT NULL",
            name="teacher_payroll_paid_date_check",
        ),
    )

    @property
    def final_salary(self) -> Decimal:
        """Gross salary minus the attendance deduction only."""
        return self.gross_salary - self.total_deduction

    @property
    def all_deductions(self) -> Decimal:
        """Sum of attendance and ledger deductions."""
        return (
            self.total_deduction
            + self.security_deposit_deduction
            + self.advance_deduction
            + self.loan_deduction
        )


class PayrollPeriodLock(Base):
    """Marks a school's payroll month as generated and locked.

    The unique constraint makes concurrent generation for one period fail
    instead of double-applying ledger deductions.
    """

    __tablename__ = "payroll_period_lock"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    locked_by_user_id: Mapped[UUID | None] = mapped_column(nullable=True)
    locked_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("school_id", "month", "year", name="payroll_period_lock_unique"),
    )
    __mapper_args__ = {"eager_defaults": True}
