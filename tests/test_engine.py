"""Unit tests for PayrollCalculator.

The calculator is pure, so these tests build inputs directly.
"""

from decimal import Decimal
from uuid import uuid4

import pytest

from school_payroll.calculators.engine import PayrollCalculator
from school_payroll.calculators.types import (
    AdvanceInput,
    DepositInput,
    LedgerKind,
    LoanInput,
    PayrollPolicy,
    SalaryCalculationType,
    TeacherPayrollInputs,
)


def make_inputs(monthly_salary: str = "30000", **kwargs) -> TeacherPayrollInputs:
    return TeacherPayrollInputs(
        teacher_id=uuid4(),
        monthly_salary=Decimal(monthly_salary),
        **kwargs,
    )


class TestRounding:
    """Test cent rounding."""

    def test_round_to_cents(self):
        assert PayrollCalculator.round_to_cents(Decimal("10.125")) == Decimal("10.13")
        assert PayrollCalculator.round_to_cents(Decimal("10.124")) == Decimal("10.12")
        assert PayrollCalculator.round_to_cents(Decimal("-10.125")) == Decimal("-10.13")

    def test_attendance_deduction_uses_unrounded_per_day(self):
        """20000 / 31 days x 7 absences rounds once, at the end."""
        result = PayrollCalculator().calculate(
            make_inputs("20000", deductible_absences=7), 2024, 1
        )

        assert result.per_day_salary == Decimal("645.16")
        assert result.attendance_deduction == Decimal("4516.13")
        assert result.net_salary == Decimal("15483.87")


class TestAttendanceDeduction:
    """Test per-day salary and absence deductions."""

    def test_calendar_days(self):
        """30000 over a 30-day month with 3 deductible absences."""
        result = PayrollCalculator().calculate(
            make_inputs("30000", deductible_absences=3), 2024, 4
        )

        assert result.total_days_in_month == 30
        assert result.per_day_salary == Decimal("1000.00")
        assert result.attendance_deduction == Decimal("3000.00")
        assert result.net_salary == Decimal("27000.00")

    def test_working_days(self):
        """Working-day policy divides by non-Sunday days."""
        policy = PayrollPolicy(salary_calculation_type=SalaryCalculationType.WORKING_DAYS)
        result = PayrollCalculator(policy).calculate(
            make_inputs("26000", deductible_absences=2), 2024, 11
        )

        assert result.total_days_in_month == 26
        assert result.per_day_salary == Decimal("1000.00")
        assert result.attendance_deduction == Decimal("2000.00")

    def test_no_absences(self):
        result = PayrollCalculator().calculate(make_inputs("30000"), 2024, 4)

        assert result.attendance_deduction == Decimal("0.00")
        assert result.net_salary == Decimal("30000.00")


class TestCarryForward:
    """Test carry-forward handling."""

    def test_carry_forward_added_to_gross_only(self):
        """Carry-forward raises gross but not the per-day salary."""
        result = PayrollCalculator().calculate(
            make_inputs("30000", carry_forward=Decimal("5000"), deductible_absences=1),
            2024,
            4,
        )

        assert result.carry_forward == Decimal("5000.00")
        assert result.gross_salary == Decimal("35000.00")
        assert result.per_day_salary == Decimal("1000.00")
        assert result.net_salary == Decimal("34000.00")


class TestLedgerDeductions:
    """Test deposit, advance and loan deductions."""

    def test_net_salary_example(self):
        """30000 less deposit 2000, advance 5000 and loan 1500 is 21500."""
        deposit_id, advance_id, loan_id = uuid4(), uuid4(), uuid4()
        inputs = make_inputs(
            "30000",
            deposits=[DepositInput(deposit_id, Decimal("2000"), Decimal("6000"))],
            advances=[AdvanceInput(advance_id, Decimal("5000"))],
            loans=[LoanInput(loan_id, Decimal("1500"), Decimal("10000"))],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.gross_salary == Decimal("30000.00")
        assert result.security_deposit_deduction == Decimal("2000.00")
        assert result.advance_deduction == Decimal("5000.00")
        assert result.loan_deduction == Decimal("1500.00")
        assert result.net_salary == Decimal("21500.00")
        assert result.total_deductions == Decimal("8500.00")
        assert {(d.kind, d.ledger_id, d.amount) for d in result.ledger_deductions} == {
            (LedgerKind.SECURITY_DEPOSIT, deposit_id, Decimal("2000.00")),
            (LedgerKind.ADVANCE, advance_id, Decimal("5000.00")),
            (LedgerKind.LOAN, loan_id, Decimal("1500.00")),
        }

    def test_deposit_capped_at_remaining_balance(self):
        inputs = make_inputs(
            deposits=[DepositInput(uuid4(), Decimal("2000"), Decimal("500"))],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.security_deposit_deduction == Decimal("500.00")

    def test_only_first_eligible_deposit_is_used(self):
        first, second = uuid4(), uuid4()
        inputs = make_inputs(
            deposits=[
                DepositInput(first, Decimal("1000"), Decimal("4000")),
                DepositInput(second, Decimal("3000"), Decimal("9000")),
            ],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.security_deposit_deduction == Decimal("1000.00")
        assert [d.ledger_id for d in result.ledger_deductions] == [first]

    def test_loans_summed_and_capped(self):
        inputs = make_inputs(
            loans=[
                LoanInput(uuid4(), Decimal("1500"), Decimal("10000")),
                LoanInput(uuid4(), Decimal("1000"), Decimal("400")),
            ],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.loan_deduction == Decimal("1900.00")

    def test_completed_balances_are_skipped(self):
        """Ledgers with nothing remaining contribute zero."""
        inputs = make_inputs(
            deposits=[DepositInput(uuid4(), Decimal("2000"), Decimal("0"))],
            loans=[LoanInput(uuid4(), Decimal("1500"), Decimal("0"))],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.security_deposit_deduction == Decimal("0.00")
        assert result.loan_deduction == Decimal("0.00")
        assert result.ledger_deductions == []

    def test_multiple_advances_recovered_in_full(self):
        inputs = make_inputs(
            advances=[
                AdvanceInput(uuid4(), Decimal("2500")),
                AdvanceInput(uuid4(), Decimal("1250.50")),
            ],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.advance_deduction == Decimal("3750.50")


class TestNegativeNet:
    """Test handling of deductions larger than gross."""

    def test_negative_net_not_clamped_by_default(self):
        inputs = make_inputs(
            "10000",
            advances=[AdvanceInput(uuid4(), Decimal("15000"))],
        )

        result = PayrollCalculator().calculate(inputs, 2024, 4)

        assert result.net_salary == Decimal("-5000.00")

    def test_floor_policy_clamps_net_but_keeps_deductions(self):
        advance_id = uuid4()
        inputs = make_inputs(
            "10000",
            advances=[AdvanceInput(advance_id, Decimal("15000"))],
        )

        result = PayrollCalculator(PayrollPolicy(floor_net_salary=True)).calculate(
            inputs, 2024, 4
        )

        assert result.net_salary == Decimal("0.00")
        assert result.advance_deduction == Decimal("15000.00")
        assert result.ledger_deductions[0].amount == Decimal("15000.00")


class TestValidation:
    """Test input validation."""

    def test_negative_salary_rejected(self):
        with pytest.raises(ValueError, match="cannot be negative"):
            PayrollCalculator().calculate(make_inputs("-1"), 2024, 4)

    def test_invalid_month_rejected(self):
        with pytest.raises(ValueError):
            PayrollCalculator().calculate(make_inputs(), 2024, 13)
