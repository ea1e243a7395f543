"""Type definitions for the payroll calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from uuid import UUID


class SalaryCalculationType(str, Enum):
    """How the per-day salary divisor is derived."""

    CALENDAR_DAYS = "calendar_days"
    WORKING_DAYS = "working_days"


class AttendanceStatus(str, Enum):
    ABSENT = "absent"
    CASUAL_LEAVE = "casual_leave"
    EARNED_LEAVE = "earned_leave"


class DepositStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class AdvanceStatus(str, Enum):
    PENDING = "pending"
    APPROVED = "approved"
    DEDUCTED = "deducted"
    CARRIED_FORWARD = "carried_forward"


class LoanStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


class LedgerKind(str, Enum):
    """Deduction ledger a payroll deduction was taken from."""

    SECURITY_DEPOSIT = "security_deposit"
    ADVANCE = "advance"
    LOAN = "loan"


@dataclass(frozen=True)
class PayrollPolicy:
    """Per-school settings that drive the calculation."""

    salary_calculation_type: SalaryCalculationType = SalaryCalculationType.CALENDAR_DAYS
    max_yearly_absences: int = 7
    floor_net_salary: bool = False


@dataclass
class DepositInput:
    """Active security deposit as seen by the calculator."""

    deposit_id: UUID
    installment_amount: Decimal
    remaining_balance: Decimal


@dataclass
class AdvanceInput:
    """Approved advance scheduled for the payroll month."""

    advance_id: UUID
    remaining_balance: Decimal


@dataclass
class LoanInput:
    """Active loan as seen by the calculator."""

    loan_id: UUID
    installment_amount: Decimal
    remaining_balance: Decimal


@dataclass
class TeacherPayrollInputs:
    """Everything needed to compute one teacher's payroll for a month."""

    teacher_id: UUID
    monthly_salary: Decimal
    deductible_absences: int = 0
    carry_forward: Decimal = Decimal("0")
    deposits: list[DepositInput] = field(default_factory=list)
    advances: list[AdvanceInput] = field(default_factory=list)
    loans: list[LoanInput] = field(default_factory=list)


@dataclass(frozen=True)
class LedgerDeduction:
    """Amount to take from one ledger row once the payroll is written."""

    kind: LedgerKind
    ledger_id: UUID
    amount: Decimal


@dataclass
class PayrollComputation:
    """Result of calculating one teacher's payroll for a month."""

    teacher_id: UUID
    month: int
    year: int
    monthly_salary: Decimal
    carry_forward: Decimal
    gross_salary: Decimal
    total_days_in_month: int
    deductible_absences: int
    per_day_salary: Decimal
    attendance_deduction: Decimal
    security_deposit_deduction: Decimal
    advance_deduction: Decimal
    loan_deduction: Decimal
    net_salary: Decimal
    ledger_deductions: list[LedgerDeduction] = field(default_factory=list)

    @property
    def total_deductions(self) -> Decimal:
        return (
            self.attendance_deduction
            + self.security_deposit_deduction
            + self.advance_deduction
            + self.loan_deduction
        )
