"""Deduction ledger service: security deposits, advances and loans."""

from __future__ import annotations

import logging
import math
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.calculators.periods import validate_period
from school_payroll.calculators.types import (
    AdvanceStatus,
    DepositStatus,
    LedgerDeduction,
    LedgerKind,
    LoanStatus,
)
from school_payroll.models import TeacherAdvance, TeacherLoan, TeacherSecurityDeposit

logger = logging.getLogger(__name__)

DEFAULT_DEPOSIT_PERCENTAGE = Decimal("20")
ZERO = Decimal("0")


def estimate_installments(total_amount: Decimal, installment_amount: Decimal) -> int:
    """Number of monthly installments needed to repay total_amount."""
    if installment_amount <= 0:
        raise ValueError("Installment amount must be positive")
    return math.ceil(Decimal(total_amount) / Decimal(installment_amount))


class LedgerService:
    """Service for creating deduction ledgers and applying payroll deductions.

    Balance rules applied per payroll:
    - Deposit: collected grows by the deduction; remaining is recomputed from
      the total and the deposit completes when nothing remains
    - Advance: recovered in full and marked deducted
    - Loan: remaining shrinks by the installment and the loan completes at 0

    Balances never go below zero.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def apply_deductions(self, deductions: list[LedgerDeduction]) -> None:
        """Apply the ledger side of computed payroll deductions.

        Rows are fetched through the session identity map, so ledgers already
        loaded during generation are not queried again.
        """
        for deduction in deductions:
            if deduction.kind == LedgerKind.SECURITY_DEPOSIT:
                await self._apply_deposit(deduction)
            elif deduction.kind == LedgerKind.ADVANCE:
                await self._apply_advance(deduction)
            elif deduction.kind == LedgerKind.LOAN:
                await self._apply_loan(deduction)
            else:
                raise ValueError(f"Unknown ledger kind: {deduction.kind}")
        await self.session.flush()

    async def _apply_deposit(self, deduction: LedgerDeduction) -> None:
        deposit = await self.session.get(TeacherSecurityDeposit, deduction.ledger_id)
        if deposit is None:
            raise ValueError(f"Security deposit {deduction.ledger_id} not found")

        deposit.collected_amount = deposit.collected_amount + deduction.amount
        remaining = deposit.total_deposit - deposit.collected_amount
        deposit.remaining_balance = max(remaining, ZERO)
        if deposit.remaining_balance <= 0:
            deposit.status = DepositStatus.COMPLETED.value
            logger.info("Security deposit %s fully collected", deposit.id)

    async def _apply_advance(self, deduction: LedgerDeduction) -> None:
        advance = await self.session.get(TeacherAdvance, deduction.ledger_id)
        if advance is None:
            raise ValueError(f"Advance {deduction.ledger_id} not found")

        advance.deducted_amount = advance.amount
        advance.remaining_balance = ZERO
        advance.status = AdvanceStatus.DEDUCTED.value

    async def _apply_loan(self, deduction: LedgerDeduction) -> None:
        loan = await self.session.get(TeacherLoan, deduction.ledger_id)
        if loan is None:
            raise ValueError(f"Loan {deduction.ledger_id} not found")

        loan.remaining_balance = max(loan.remaining_balance - deduction.amount, ZERO)
        if loan.remaining_balance <= 0:
            loan.status = LoanStatus.COMPLETED.value
            logger.info("Loan %s fully repaid", loan.id)

    # Ledger creation

    @staticmethod
    def _check_deposit_terms(
        base_salary: Decimal, percentage: Decimal, installment_amount: Decimal
    ) -> Decimal:
        """Validate deposit terms and return the total, rounded to a whole unit."""
        if base_salary <= 0:
            raise ValueError("Base salary must be positive")
        if not ZERO < percentage <= Decimal("100"):
            raise ValueError("Deposit percentage must be between 0 and 100")
        if installment_amount < 0:
            raise ValueError("Installment amount cannot be negative")
        return (Decimal(base_salary) * percentage / Decimal("100")).quantize(
            Decimal("1"), rounding=ROUND_HALF_UP
        )

    async def create_security_deposit(
        self,
        school_id: UUID,
        teacher_id: UUID,
        base_salary: Decimal,
        installment_amount: Decimal,
        deposit_percentage: Decimal | None = None,
    ) -> TeacherSecurityDeposit:
        """Open a security deposit of deposit_percentage of base_salary.

        The total is rounded to a whole currency unit. A teacher can hold
        only one active deposit.
        """
        percentage = DEFAULT_DEPOSIT_PERCENTAGE
        if deposit_percentage is not None:
            percentage = Decimal(deposit_percentage)
        total = self._check_deposit_terms(base_salary, percentage, installment_amount)

        existing = await self.session.execute(
            select(TeacherSecurityDeposit.id).where(
                TeacherSecurityDeposit.teacher_id == teacher_id,
                TeacherSecurityDeposit.status == DepositStatus.ACTIVE.value,
            )
        )
        if existing.first() is not None:
            raise ValueError(f"Teacher {teacher_id} already has an active security deposit")

        deposit = TeacherSecurityDeposit(
            school_id=school_id,
            teacher_id=teacher_id,
            base_salary=base_salary,
            deposit_percentage=percentage,
            total_deposit=total,
            collected_amount=ZERO,
            remaining_balance=total,
            installment_amount=installment_amount,
            status=DepositStatus.ACTIVE.value,
        )
        self.session.add(deposit)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ValueError(
                f"Teacher {teacher_id} already has an active security deposit"
            ) from e
        return deposit

    async def update_security_deposit(
        self,
        school_id: UUID,
        deposit_id: UUID,
        base_salary: Decimal | None = None,
        deposit_percentage: Decimal | None = None,
        installment_amount: Decimal | None = None,
    ) -> TeacherSecurityDeposit:
        """Change a deposit's terms and recompute its total.

        Amounts already collected are kept; the remaining balance follows the
        new total and the deposit completes when nothing is left to collect.
        """
        result = await self.session.execute(
            select(TeacherSecurityDeposit).where(
                TeacherSecurityDeposit.id == deposit_id,
                TeacherSecurityDeposit.school_id == school_id,
            )
        )
        deposit = result.scalar_one_or_none()
        if deposit is None:
            raise ValueError(f"Security deposit {deposit_id} not found")

        base = deposit.base_salary if base_salary is None else Decimal(base_salary)
        percentage = (
            deposit.deposit_percentage
            if deposit_percentage is None
            else Decimal(deposit_percentage)
        )
        installment = (
            deposit.installment_amount
            if installment_amount is None
            else Decimal(installment_amount)
        )
        total = self._check_deposit_terms(base, percentage, installment)
        if total < deposit.collected_amount:
            raise ValueError(
                f"Deposit total {total} cannot be below the collected amount "
                f"{deposit.collected_amount}"
            )

        deposit.base_salary = base
        deposit.deposit_percentage = percentage
        deposit.installment_amount = installment
        deposit.total_deposit = total
        deposit.remaining_balance = max(total - deposit.collected_amount, ZERO)
        if deposit.remaining_balance <= 0:
            deposit.status = DepositStatus.COMPLETED.value
        else:
            deposit.status = DepositStatus.ACTIVE.value

        try:
            await self.session.flush()
        except IntegrityError as e:
            raise ValueError(
                f"Teacher {deposit.teacher_id} already has an active security deposit"
            ) from e

        logger.info(
            "Security deposit %s updated: total %s, remaining %s",
            deposit.id,
            deposit.total_deposit,
            deposit.remaining_balance,
        )
        return deposit

    async def create_advance(
        self,
        school_id: UUID,
        teacher_id: UUID,
        amount: Decimal,
        deduction_month: int,
        deduction_year: int,
        approved_by: UUID | None = None,
        remarks: str | None = None,
    ) -> TeacherAdvance:
        """Record an approved advance to be recovered from one payroll month."""
        validate_period(deduction_year, deduction_month)
        if amount <= 0:
            raise ValueError("Advance amount must be positive")

        advance = TeacherAdvance(
            school_id=school_id,
            teacher_id=teacher_id,
            amount=amount,
            deduction_month=deduction_month,
            deduction_year=deduction_year,
            deducted_amount=ZERO,
            remaining_balance=amount,
            status=AdvanceStatus.APPROVED.value,
            approved_by=approved_by,
            remarks=remarks,
        )
        self.session.add(advance)
        await self.session.flush()
        return advance

    async def create_loan(
        self,
        school_id: UUID,
        teacher_id: UUID,
        total_loan_amount: Decimal,
        installment_amount: Decimal,
        start_month: int,
        start_year: int,
        approved_by: UUID | None = None,
        remarks: str | None = None,
    ) -> TeacherLoan:
        validate_period(start_year, start_month)
        if total_loan_amount <= 0:
            raise ValueError("Loan amount must be positive")
        if installment_amount <= 0:
            raise ValueError("Installment amount must be positive")

        loan = TeacherLoan(
            school_id=school_id,
            teacher_id=teacher_id,
            total_loan_amount=total_loan_amount,
            remaining_balance=total_loan_amount,
            installment_amount=installment_amount,
            start_month=start_month,
            start_year=start_year,
            status=LoanStatus.ACTIVE.value,
            approved_by=approved_by,
            remarks=remarks,
        )
        self.session.add(loan)
        await self.session.flush()
        logger.info(
            "Loan %s created for teacher %s (%s installments)",
            loan.id,
            teacher_id,
            estimate_installments(total_loan_amount, installment_amount),
        )
        return loan

    # Listing

    async def list_security_deposits(
        self,
        school_id: UUID,
        teacher_id: UUID | None = None,
        status: str | None = None,
    ) -> list[TeacherSecurityDeposit]:
        query = select(TeacherSecurityDeposit).where(
            TeacherSecurityDeposit.school_id == school_id
        )
        if teacher_id is not None:
            query = query.where(TeacherSecurityDeposit.teacher_id == teacher_id)
        if status is not None:
            query = query.where(TeacherSecurityDeposit.status == status)
        result = await self.session.execute(
            query.order_by(TeacherSecurityDeposit.created_at.desc())
        )
        return list(result.scalars().all())

    async def list_advances(
        self,
        school_id: UUID,
        teacher_id: UUID | None = None,
        status: str | None = None,
    ) -> list[TeacherAdvance]:
        query = select(TeacherAdvance).where(TeacherAdvance.school_id == school_id)
        if teacher_id is not None:
            query = query.where(TeacherAdvance.teacher_id == teacher_id)
        if status is not None:
            query = query.where(TeacherAdvance.status == status)
        result = await self.session.execute(query.order_by(TeacherAdvance.created_at.desc()))
        return list(result.scalars().all())

    async def list_loans(
        self,
        school_id: UUID,
        teacher_id: UUID | None = None,
        status: str | None = None,
    ) -> list[TeacherLoan]:
        query = select(TeacherLoan).where(TeacherLoan.school_id == school_id)
        if teacher_id is not None:
            query = query.where(TeacherLoan.teacher_id == teacher_id)
        if status is not None:
            query = query.where(TeacherLoan.status == status)
        result = await self.session.execute(query.order_by(TeacherLoan.created_at.desc()))
        return list(result.scalars().all())
