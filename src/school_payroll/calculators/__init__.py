"""Payroll calculation engine."""

from school_payroll.calculators.engine import PayrollCalculator
from school_payroll.calculators.periods import (
    days_in_month,
    month_bounds,
    previous_month,
    working_days_in_month,
)
from school_payroll.calculators.types import (
    PayrollComputation,
    PayrollPolicy,
    SalaryCalculationType,
    TeacherPayrollInputs,
)

__all__ = [
    "PayrollCalculator",
    "PayrollComputation",
    "PayrollPolicy",
    "SalaryCalculationType",
    "TeacherPayrollInputs",
    "days_in_month",
    "month_bounds",
    "previous_month",
    "working_days_in_month",
]
