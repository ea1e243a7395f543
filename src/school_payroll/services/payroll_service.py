"""Payroll service - main orchestrator for monthly teacher payroll."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.calculators.engine import PayrollCalculator
from school_payroll.calculators.periods import month_name, validate_period
from school_payroll.calculators.types import (
    LedgerDeduction,
    PayrollComputation,
    TeacherPayrollInputs,
)
from school_payroll.models import TeacherPayroll
from school_payroll.services.ledger_service import LedgerService
from school_payroll.services.locking_service import LockingService, PayrollLockedError
from school_payroll.services.payroll_inputs import PayrollInputReader
from school_payroll.services.state_machine import PayrollStateMachine, PayrollStatus

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


class NoActiveSalariesError(Exception):
    """Raised when a school has no teacher with an active salary."""

    def __init__(self, school_id: UUID):
        self.school_id = school_id
        super().__init__(f"No active teacher salaries found for school {school_id}")


@dataclass
class PayrollSummary:
    """Totals of one school's payroll month."""

    year: int
    month: int
    teacher_count: int = 0
    total_gross: Decimal = ZERO
    total_deductions: Decimal = ZERO
    total_net: Decimal = ZERO
    total_paid: Decimal = ZERO
    total_pending: Decimal = ZERO

    @classmethod
    def from_records(cls, year: int, month: int, records: list[TeacherPayroll]) -> PayrollSummary:
        summary = cls(year=year, month=month)
        for record in records:
            summary.teacher_count += 1
            summary.total_gross += record.gross_salary
            summary.total_deductions += record.all_deductions
            summary.total_net += record.net_salary
            if record.status == PayrollStatus.PAID:
                summary.total_paid += record.net_salary
            else:
                summary.total_pending += record.net_salary
        return summary


@dataclass
class PayrollGenerationResult:
    """Result of generating payroll for a school month."""

    school_id: UUID
    year: int
    month: int
    records: list[TeacherPayroll]
    summary: PayrollSummary


class PayrollService:
    """Service for the teacher payroll lifecycle.

    Operations:
    - generate_payroll: compute, persist and lock a month, then update ledgers
    - mark_paid: pending → paid for a single payroll row
    - list_payroll / get_teacher_history / summarize: read models

    Generation runs inside the caller's transaction and only flushes. Any
    failure leaves nothing behind once the caller rolls back: payroll rows,
    the period lock and ledger balances change together or not at all.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.locking_service = LockingService(session)
        self.input_reader = PayrollInputReader(session)
        self.ledger_service = LedgerService(session)

    async def generate_payroll(
        self,
        school_id: UUID,
        year: int,
        month: int,
        generated_by: UUID | None = None,
    ) -> PayrollGenerationResult:
        """Generate and lock payroll for every salaried teacher of a school.

        Raises:
            PayrollLockedError: the month is already generated, or another
                generation for it is in flight
            NoActiveSalariesError: no teacher has an active salary
        """
        validate_period(year, month)
        logger.info(
            "Generating payroll for school %s, %s %s", school_id, month_name(month), year
        )

        await self.locking_service.ensure_unlocked(school_id, year, month)

        salaries = await self.input_reader.get_active_salaries(school_id)
        if not salaries:
            raise NoActiveSalariesError(school_id)

        await self.locking_service.acquire_period_lock(
            school_id, year, month, locked_by_user_id=generated_by
        )

        policy = await self.input_reader.get_policy(school_id)
        absences = await self.input_reader.count_deductible_absences(school_id, year, month)
        carry_forward = await self.input_reader.get_carry_forward(school_id, year, month)
        deposits = await self.input_reader.get_active_deposits(school_id)
        advances = await self.input_reader.get_eligible_advances(school_id, year, month)
        loans = await self.input_reader.get_active_loans(school_id)

        calculator = PayrollCalculator(policy)
        computations: list[PayrollComputation] = []
        for teacher_id in sorted(salaries, key=str):
            inputs = TeacherPayrollInputs(
                teacher_id=teacher_id,
                monthly_salary=salaries[teacher_id].monthly_salary,
                deductible_absences=absences.get(teacher_id, 0),
                carry_forward=carry_forward.get(teacher_id, ZERO),
                deposits=deposits.get(teacher_id, []),
                advances=advances.get(teacher_id, []),
                loans=loans.get(teacher_id, []),
            )
            computations.append(calculator.calculate(inputs, year, month))

        records = await self._upsert_records(school_id, year, month, computations)

        ledger_deductions: list[LedgerDeduction] = [
            deduction for c in computations for deduction in c.ledger_deductions
        ]
        await self.ledger_service.apply_deductions(ledger_deductions)

        summary = PayrollSummary.from_records(year, month, records)
        logger.info(
            "Generated payroll for %d teachers of school %s: net %s, deductions %s",
            summary.teacher_count,
            school_id,
            summary.total_net,
            summary.total_deductions,
        )
        return PayrollGenerationResult(
            school_id=school_id,
            year=year,
            month=month,
            records=records,
            summary=summary,
        )

    async def _upsert_records(
        self,
        school_id: UUID,
        year: int,
        month: int,
        computations: list[PayrollComputation],
    ) -> list[TeacherPayroll]:
        """Write one locked payroll row per computation, keyed by teacher and month.

        Existing unlocked rows for the same key are overwritten in place.
        """
        teacher_ids = [c.teacher_id for c in computations]
        result = await self.session.execute(
            select(TeacherPayroll).where(
                TeacherPayroll.teacher_id.in_(teacher_ids),
                TeacherPayroll.month == month,
                TeacherPayroll.year == year,
            )
        )
        existing = {row.teacher_id: row for row in result.scalars().all()}

        records: list[TeacherPayroll] = []
        for computation in computations:
            record = existing.get(computation.teacher_id)
            if record is None:
                record = TeacherPayroll(
                    school_id=school_id,
                    teacher_id=computation.teacher_id,
                    month=month,
                    year=year,
                )
                self.session.add(record)
            elif record.is_locked:
                raise PayrollLockedError(
                    school_id, year, month, f"teacher {computation.teacher_id} already locked"
                )

            record.school_id = school_id
            record.monthly_salary = computation.monthly_salary
            record.carry_forward = computation.carry_forward
            record.gross_salary = computation.gross_salary
            record.total_days_in_month = computation.total_days_in_month
            record.deductible_absences = computation.deductible_absences
            record.per_day_salary = computation.per_day_salary
            record.total_deduction = computation.attendance_deduction
            record.security_deposit_deduction = computation.security_deposit_deduction
            record.advance_deduction = computation.advance_deduction
            record.loan_deduction = computation.loan_deduction
            record.net_salary = computation.net_salary
            record.status = PayrollStatus.PENDING.value
            record.paid_date = None
            record.is_locked = True
            records.append(record)

        await self.session.flush()
        return records

    async def get_payroll(self, school_id: UUID, payroll_id: UUID) -> TeacherPayroll | None:
        result = await self.session.execute(
            select(TeacherPayroll).where(
                TeacherPayroll.id == payroll_id,
                TeacherPayroll.school_id == school_id,
            )
        )
        return result.scalar_one_or_none()

    async def mark_paid(
        self,
        school_id: UUID,
        payroll_id: UUID,
        paid_date: date | None = None,
    ) -> TeacherPayroll:
        """Transition a payroll row from pending to paid.

        paid_date defaults to today. Raises InvalidTransitionError if the row
        is already paid.
        """
        record = await self.get_payroll(school_id, payroll_id)
        if record is None:
            raise ValueError(f"Payroll {payroll_id} not found")

        PayrollStateMachine.validate_transition(record.status, PayrollStatus.PAID)
        record.status = PayrollStatus.PAID.value
        record.paid_date = paid_date or date.today()
        await self.session.flush()

        logger.info("Payroll %s marked paid on %s", payroll_id, record.paid_date)
        return record

    async def list_payroll(self, school_id: UUID, year: int, month: int) -> list[TeacherPayroll]:
        validate_period(year, month)
        result = await self.session.execute(
            select(TeacherPayroll)
            .where(
                TeacherPayroll.school_id == school_id,
                TeacherPayroll.month == month,
                TeacherPayroll.year == year,
            )
            .order_by(TeacherPayroll.teacher_id)
        )
        return list(result.scalars().all())

    async def get_teacher_history(
        self, school_id: UUID, teacher_id: UUID
    ) -> list[TeacherPayroll]:
        """All payroll rows of one teacher, newest month first."""
        result = await self.session.execute(
            select(TeacherPayroll)
            .where(
                TeacherPayroll.school_id == school_id,
                TeacherPayroll.teacher_id == teacher_id,
            )
            .order_by(TeacherPayroll.year.desc(), TeacherPayroll.month.desc())
        )
        return list(result.scalars().all())

    async def summarize(self, school_id: UUID, year: int, month: int) -> PayrollSummary:
        records = await self.list_payroll(school_id, year, month)
        return PayrollSummary.from_records(year, month, records)
