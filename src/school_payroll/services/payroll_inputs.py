"""Readers that load the inputs of a payroll month from the database."""

from __future__ import annotations

import logging
from decimal import Decimal
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.calculators.periods import month_bounds, previous_month
from school_payroll.calculators.types import (
    AdvanceInput,
    AdvanceStatus,
    DepositInput,
    DepositStatus,
    LoanInput,
    LoanStatus,
    PayrollPolicy,
    SalaryCalculationType,
)
from school_payroll.config import get_settings
from school_payroll.models import (
    SchoolAttendanceSettings,
    TeacherAdvance,
    TeacherAttendanceRecord,
    TeacherLoan,
    TeacherPayroll,
    TeacherSalary,
    TeacherSecurityDeposit,
)
from school_payroll.services.state_machine import PayrollStateMachine

logger = logging.getLogger(__name__)


class PayrollInputReader:
    """Loads salaries, attendance, carry-forward and ledgers for a month.

    All reads are scoped to one school. Results are keyed by teacher_id so
    the payroll service can assemble per-teacher calculator inputs.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_policy(self, school_id: UUID) -> PayrollPolicy:
        """Build the payroll policy from the school's settings row.

        Process-wide defaults apply only to schools without a settings row.
        """
        settings = get_settings()
        result = await self.session.execute(
            select(SchoolAttendanceSettings).where(
                SchoolAttendanceSettings.school_id == school_id
            )
        )
        row = result.scalar_one_or_none()
        if row is None:
            return PayrollPolicy(
                salary_calculation_type=SalaryCalculationType(
                    settings.default_salary_calculation_type
                ),
                max_yearly_absences=settings.default_max_yearly_absences,
                floor_net_salary=settings.floor_net_salary,
            )
        return PayrollPolicy(
            salary_calculation_type=SalaryCalculationType(row.salary_calculation_type),
            max_yearly_absences=row.max_yearly_absences,
            floor_net_salary=row.floor_net_salary,
        )

    async def get_active_salaries(self, school_id: UUID) -> dict[UUID, TeacherSalary]:
        """Return the active salary row of each teacher in the school.

        Teachers without an active salary are absent from the result. If a
        teacher somehow has several active rows, the latest effective_from wins.
        """
        result = await self.session.execute(
            select(TeacherSalary)
            .where(
                TeacherSalary.school_id == school_id,
                TeacherSalary.is_active.is_(True),
            )
            .order_by(TeacherSalary.teacher_id, TeacherSalary.effective_from.desc())
        )
        salaries: dict[UUID, TeacherSalary] = {}
        for salary in result.scalars().all():
            if salary.teacher_id in salaries:
                logger.warning(
                    "Teacher %s has more than one active salary; using the one effective %s",
                    salary.teacher_id,
                    salaries[salary.teacher_id].effective_from,
                )
                continue
            salaries[salary.teacher_id] = salary
        return salaries

    async def count_deductible_absences(
        self, school_id: UUID, year: int, month: int
    ) -> dict[UUID, int]:
        """Count deductible attendance rows per teacher within the calendar month."""
        start, end = month_bounds(year, month)
        result = await self.session.execute(
            select(TeacherAttendanceRecord.teacher_id, func.count())
            .where(
                TeacherAttendanceRecord.school_id == school_id,
                TeacherAttendanceRecord.is_deductible.is_(True),
                TeacherAttendanceRecord.attendance_date >= start,
                TeacherAttendanceRecord.attendance_date <= end,
            )
            .group_by(TeacherAttendanceRecord.teacher_id)
        )
        return {teacher_id: count for teacher_id, count in result.all()}

    async def get_carry_forward(
        self, school_id: UUID, year: int, month: int
    ) -> dict[UUID, Decimal]:
        """Unpaid net salary of the previous month, per teacher.

        Only pending rows carry forward; a paid previous month contributes
        nothing.
        """
        prev_year, prev_month = previous_month(year, month)
        result = await self.session.execute(
            select(TeacherPayroll.teacher_id, TeacherPayroll.net_salary, TeacherPayroll.status)
            .where(
                TeacherPayroll.school_id == school_id,
                TeacherPayroll.month == prev_month,
                TeacherPayroll.year == prev_year,
            )
        )
        return {
            teacher_id: Decimal(net_salary)
            for teacher_id, net_salary, status in result.all()
            if PayrollStateMachine.is_carry_forward_eligible(status)
        }

    async def get_active_deposits(self, school_id: UUID) -> dict[UUID, list[DepositInput]]:
        result = await self.session.execute(
            select(TeacherSecurityDeposit)
            .where(
                TeacherSecurityDeposit.school_id == school_id,
                TeacherSecurityDeposit.status == DepositStatus.ACTIVE.value,
                TeacherSecurityDeposit.remaining_balance > 0,
            )
            .order_by(TeacherSecurityDeposit.created_at)
        )
        deposits: dict[UUID, list[DepositInput]] = {}
        for row in result.scalars().all():
            deposits.setdefault(row.teacher_id, []).append(
                DepositInput(
                    deposit_id=row.id,
                    installment_amount=row.installment_amount,
                    remaining_balance=row.remaining_balance,
                )
            )
        return deposits

    async def get_eligible_advances(
        self, school_id: UUID, year: int, month: int
    ) -> dict[UUID, list[AdvanceInput]]:
        """Approved advances scheduled for deduction in this month."""
        result = await self.session.execute(
            select(TeacherAdvance)
            .where(
                TeacherAdvance.school_id == school_id,
                TeacherAdvance.status == AdvanceStatus.APPROVED.value,
                TeacherAdvance.deduction_month == month,
                TeacherAdvance.deduction_year == year,
            )
            .order_by(TeacherAdvance.created_at)
        )
        advances: dict[UUID, list[AdvanceInput]] = {}
        for row in result.scalars().all():
            advances.setdefault(row.teacher_id, []).append(
                AdvanceInput(advance_id=row.id, remaining_balance=row.remaining_balance)
            )
        return advances

    async def get_active_loans(self, school_id: UUID) -> dict[UUID, list[LoanInput]]:
        """Active loans with a balance left.

        The loan start month is not consulted; an active loan is deducted from
        every payroll generated while it has a balance.
        """
        result = await self.session.execute(
            select(TeacherLoan)
            .where(
                TeacherLoan.school_id == school_id,
                TeacherLoan.status == LoanStatus.ACTIVE.value,
                TeacherLoan.remaining_balance > 0,
            )
            .order_by(TeacherLoan.created_at)
        )
        loans: dict[UUID, list[LoanInput]] = {}
        for row in result.scalars().all():
            loans.setdefault(row.teacher_id, []).append(
                LoanInput(
                    loan_id=row.id,
                    installment_amount=row.installment_amount,
                    remaining_balance=row.remaining_balance,
                )
            )
        return loans
