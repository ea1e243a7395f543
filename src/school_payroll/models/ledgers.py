"""Deduction ledgers: security deposits, salary advances and loans."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from sqlalchemy import CheckConstraint, Index, Integer, Numeric, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from school_payroll.models.base import Base, TimestampMixin, uuid_pk


class TeacherSecurityDeposit(Base, TimestampMixin):
    """Security deposit collected from a teacher in payroll installments.

    collected_amount + remaining_balance == total_deposit at all times.
    """

    __tablename__ = "teacher_security_deposit"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(nullable=False)
    base_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deposit_percentage: Mapped[Decimal] = mapped_column(Numeric(5, 2), nullable=False)
    total_deposit: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    collected_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    remaining_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    installment_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'completed')",
            name="teacher_security_deposit_status_check",
        ),
        CheckConstraint(
            "remaining_balance >= 0",
            name="teacher_security_deposit_remaining_check",
        ),
        Index(
            "teacher_security_deposit_one_active",
            "teacher_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )


class TeacherAdvance(Base, TimestampMixin):
    """Cash advance, recovered in full from one scheduled payroll month."""

    __tablename__ = "teacher_advance"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(nullable=False)
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    deduction_month: Mapped[int] = mapped_column(Integer, nullable=False)
    deduction_year: Mapped[int] = mapped_column(Integer, nullable=False)
    deducted_amount: Mapped[Decimal] = mapped_column(
        Numeric(12, 2), nullable=False, default=Decimal("0")
    )
    remaining_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="approved")
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('pending', 'approved', 'deducted', 'carried_forward')",
            name="teacher_advance_status_check",
        ),
        CheckConstraint(
            "deduction_month BETWEEN 1 AND 12",
            name="teacher_advance_month_check",
        ),
        CheckConstraint("amount > 0", name="teacher_advance_amount_check"),
    )


class TeacherLoan(Base, TimestampMixin):
    """Loan recovered in fixed monthly installments."""

    __tablename__ = "teacher_loan"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    teacher_id: Mapped[UUID] = mapped_column(nullable=False)
    total_loan_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    remaining_balance: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    installment_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    start_month: Mapped[int] = mapped_column(Integer, nullable=False)
    start_year: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[str] = mapped_column(String, nullable=False, default="active")
    approved_by: Mapped[UUID | None] = mapped_column(nullable=True)
    remarks: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint(
            "status IN ('active', 'completed')",
            name="teacher_loan_status_check",
        ),
        CheckConstraint("start_month BETWEEN 1 AND 12", name="teacher_loan_month_check"),
        CheckConstraint("remaining_balance >= 0", name="teacher_loan_remaining_check"),
    )
