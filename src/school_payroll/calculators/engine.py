"""Payroll calculator - pure computation of one teacher's month."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from school_payroll.calculators.periods import (
    days_in_month,
    validate_period,
    working_days_in_month,
)
from school_payroll.calculators.types import (
    LedgerDeduction,
    LedgerKind,
    PayrollComputation,
    PayrollPolicy,
    SalaryCalculationType,
    TeacherPayrollInputs,
)

ZERO = Decimal("0")


class PayrollCalculator:
    """Computes a teacher's monthly payroll from pre-loaded inputs.

    Calculation order (stable per teacher):
    1) Day divisor from the school's salary calculation type
    2) Gross = monthly salary + carry-forward from last month
    3) Per-day salary from the monthly salary only
    4) Attendance deduction = per-day salary x deductible absences
    5) Security deposit installment, capped at the remaining balance
    6) Full remaining balance of advances scheduled for this month
    7) Loan installments, each capped at its remaining balance
    8) Net = gross - all deductions

    Internal arithmetic is unrounded; every monetary output is rounded to
    cents with ROUND_HALF_UP. The calculator does no I/O.
    """

    OUTPUT_PRECISION = Decimal("0.01")

    def __init__(self, policy: PayrollPolicy | None = None):
        self.policy = policy or PayrollPolicy()

    @staticmethod
    def round_to_cents(amount: Decimal) -> Decimal:
        """Round amount to 2 decimal places (cents)."""
        return amount.quantize(PayrollCalculator.OUTPUT_PRECISION, rounding=ROUND_HALF_UP)

    def total_days(self, year: int, month: int) -> int:
        """Divisor for the per-day salary under the current policy."""
        if self.policy.salary_calculation_type == SalaryCalculationType.WORKING_DAYS:
            return working_days_in_month(year, month)
        return days_in_month(year, month)

    def calculate(
        self, inputs: TeacherPayrollInputs, year: int, month: int
    ) -> PayrollComputation:
        validate_period(year, month)
        if inputs.monthly_salary < 0:
            raise ValueError(
                f"Monthly salary for teacher {inputs.teacher_id} cannot be negative"
            )
        if inputs.deductible_absences < 0:
            raise ValueError("Deductible absences cannot be negative")

        total_days = self.total_days(year, month)
        monthly_salary = Decimal(inputs.monthly_salary)
        carry_forward = Decimal(inputs.carry_forward or ZERO)

        gross = monthly_salary + carry_forward
        per_day = monthly_salary / Decimal(total_days)
        attendance_deduction = self.round_to_cents(per_day * inputs.deductible_absences)

        ledger_deductions: list[LedgerDeduction] = []

        deposit_deduction = ZERO
        # At most one active deposit per teacher; the first eligible one is used
        for deposit in inputs.deposits:
            if deposit.remaining_balance <= 0:
                continue
            amount = self.round_to_cents(
                min(deposit.installment_amount, deposit.remaining_balance)
            )
            if amount > 0:
                deposit_deduction = amount
                ledger_deductions.append(
                    LedgerDeduction(LedgerKind.SECURITY_DEPOSIT, deposit.deposit_id, amount)
                )
            break

        advance_deduction = ZERO
        for advance in inputs.advances:
            if advance.remaining_balance <= 0:
                continue
            amount = self.round_to_cents(advance.remaining_balance)
            advance_deduction += amount
            ledger_deductions.append(
                LedgerDeduction(LedgerKind.ADVANCE, advance.advance_id, amount)
            )

        loan_deduction = ZERO
        for loan in inputs.loans:
            if loan.remaining_balance <= 0:
                continue
            amount = self.round_to_cents(min(loan.installment_amount, loan.remaining_balance))
            if amount <= 0:
                continue
            loan_deduction += amount
            ledger_deductions.append(LedgerDeduction(LedgerKind.LOAN, loan.loan_id, amount))

        gross = self.round_to_cents(gross)
        net = gross - (
            attendance_deduction + deposit_deduction + advance_deduction + loan_deduction
        )
        if self.policy.floor_net_salary and net < 0:
            net = ZERO

        return PayrollComputation(
            teacher_id=inputs.teacher_id,
            month=month,
            year=year,
            monthly_salary=self.round_to_cents(monthly_salary),
            carry_forward=self.round_to_cents(carry_forward),
            gross_salary=gross,
            total_days_in_month=total_days,
            deductible_absences=inputs.deductible_absences,
            per_day_salary=self.round_to_cents(per_day),
            attendance_deduction=attendance_deduction,
            security_deposit_deduction=self.round_to_cents(deposit_deduction),
            advance_deduction=self.round_to_cents(advance_deduction),
            loan_deduction=self.round_to_cents(loan_deduction),
            net_salary=self.round_to_cents(net),
            ledger_deductions=ledger_deductions,
        )
