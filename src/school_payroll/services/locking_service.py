"""Payroll period locking service."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import exists, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.calculators.periods import month_name, validate_period
from school_payroll.database import acquire_advisory_lock
from school_payroll.models import PayrollPeriodLock, TeacherPayroll

logger = logging.getLogger(__name__)


class PayrollLockedError(Exception):
    """Raised when a payroll month is already generated and locked."""

    def __init__(self, school_id: UUID, year: int, month: int, reason: str | None = None):
        self.school_id = school_id
        self.year = year
        self.month = month
        msg = f"Payroll for {month_name(month)} {year} is locked"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class LockingService:
    """Service guarding payroll months against mutation after generation.

    A month is locked for a school once any of its payroll rows is locked or
    a period lock row exists. Locked months reject:
    1. Regenerating payroll
    2. Recording or deleting attendance dated inside the month
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    @staticmethod
    def lock_key(school_id: UUID, year: int, month: int) -> str:
        return f"teacher_payroll:{school_id}:{year}:{month:02d}"

    async def is_period_locked(self, school_id: UUID, year: int, month: int) -> bool:
        """Check whether payroll for the school's month is locked."""
        validate_period(year, month)
        locked_rows = exists().where(
            TeacherPayroll.school_id == school_id,
            TeacherPayroll.month == month,
            TeacherPayroll.year == year,
            TeacherPayroll.is_locked.is_(True),
        )
        period_lock = exists().where(
            PayrollPeriodLock.school_id == school_id,
            PayrollPeriodLock.month == month,
            PayrollPeriodLock.year == year,
        )
        result = await self.session.execute(select(or_(locked_rows, period_lock)))
        return bool(result.scalar())

    async def ensure_unlocked(self, school_id: UUID, year: int, month: int) -> None:
        """Raise PayrollLockedError if the month is locked."""
        if await self.is_period_locked(school_id, year, month):
            raise PayrollLockedError(school_id, year, month)

    async def ensure_date_unlocked(self, school_id: UUID, day: date) -> None:
        """Raise PayrollLockedError if payroll for the month containing day is locked."""
        if await self.is_period_locked(school_id, day.year, day.month):
            raise PayrollLockedError(
                school_id,
                day.year,
                day.month,
                "attendance cannot be changed after payroll generation",
            )

    async def acquire_period_lock(
        self,
        school_id: UUID,
        year: int,
        month: int,
        locked_by_user_id: UUID | None = None,
    ) -> PayrollPeriodLock:
        """Claim the month for generation within the current transaction.

        Takes the PostgreSQL advisory lock for the period and inserts the
        unique period lock row. A concurrent generator fails here with
        PayrollLockedError. The row becomes visible to others on commit and
        disappears with the transaction on rollback.
        """
        validate_period(year, month)
        key = self.lock_key(school_id, year, month)
        if not await acquire_advisory_lock(self.session, key):
            logger.warning("Payroll generation already running for %s", key)
            raise PayrollLockedError(
                school_id, year, month, "generation already in progress"
            )

        lock = PayrollPeriodLock(
            school_id=school_id,
            month=month,
            year=year,
            locked_by_user_id=locked_by_user_id,
        )
        self.session.add(lock)
        try:
            await self.session.flush()
        except IntegrityError as e:
            logger.warning("Payroll period lock already held for %s", key)
            raise PayrollLockedError(school_id, year, month, "already generated") from e
        return lock

    async def get_period_lock(
        self, school_id: UUID, year: int, month: int
    ) -> PayrollPeriodLock | None:
        result = await self.session.execute(
            select(PayrollPeriodLock).where(
                PayrollPeriodLock.school_id == school_id,
                PayrollPeriodLock.month == month,
                PayrollPeriodLock.year == year,
            )
        )
        return result.scalar_one_or_none()
