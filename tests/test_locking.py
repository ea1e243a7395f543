"""Tests for payroll period locking."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from school_payroll.models import Base, TeacherSalary
from school_payroll.services.locking_service import LockingService, PayrollLockedError
from school_payroll.services.payroll_service import PayrollService

pytestmark = pytest.mark.asyncio


class TestIsPeriodLocked:
    """Test lock detection."""

    async def test_empty_period_is_unlocked(self, session: AsyncSession, school_id):
        assert await LockingService(session).is_period_locked(school_id, 2024, 11) is False

    async def test_locked_payroll_row_locks_period(self, session: AsyncSession, seed):
        await seed.payroll(uuid4(), 11, 2024, "25000.00", is_locked=True)

        service = LockingService(session)
        assert await service.is_period_locked(seed.school_id, 2024, 11) is True
        assert await service.is_period_locked(seed.school_id, 2024, 10) is False

    async def test_unlocked_payroll_row_does_not_lock(self, session: AsyncSession, seed):
        await seed.payroll(uuid4(), 11, 2024, "25000.00", is_locked=False)

        assert await LockingService(session).is_period_locked(seed.school_id, 2024, 11) is False

    async def test_lock_is_per_school(self, session: AsyncSession, seed):
        await seed.payroll(uuid4(), 11, 2024, "25000.00")

        assert await LockingService(session).is_period_locked(uuid4(), 2024, 11) is False

    async def test_period_lock_row_locks_period(self, session: AsyncSession, school_id):
        service = LockingService(session)
        await service.acquire_period_lock(school_id, 2024, 11)

        assert await service.is_period_locked(school_id, 2024, 11) is True
        lock = await service.get_period_lock(school_id, 2024, 11)
        assert lock is not None
        assert lock.locked_at is not None


class TestEnsureUnlocked:
    """Test guard helpers."""

    async def test_ensure_unlocked_raises(self, session: AsyncSession, seed):
        await seed.payroll(uuid4(), 11, 2024, "25000.00")

        with pytest.raises(PayrollLockedError, match="November 2024 is locked"):
            await LockingService(session).ensure_unlocked(seed.school_id, 2024, 11)

    async def test_ensure_date_unlocked_uses_month_of_date(self, session: AsyncSession, seed):
        await seed.payroll(uuid4(), 11, 2024, "25000.00")
        service = LockingService(session)

        with pytest.raises(PayrollLockedError):
            await service.ensure_date_unlocked(seed.school_id, date(2024, 11, 30))

        # December is still open
        await service.ensure_date_unlocked(seed.school_id, date(2024, 12, 1))


class TestAcquirePeriodLock:
    """Test the atomic generation claim."""

    async def test_second_claim_in_same_period_fails(self, session: AsyncSession, school_id):
        service = LockingService(session)
        await service.acquire_period_lock(school_id, 2024, 11)

        with pytest.raises(PayrollLockedError, match="already generated"):
            await service.acquire_period_lock(school_id, 2024, 11)

    async def test_claims_for_different_schools_are_independent(
        self, session: AsyncSession
    ):
        service = LockingService(session)
        await service.acquire_period_lock(uuid4(), 2024, 11)
        await service.acquire_period_lock(uuid4(), 2024, 11)

    async def test_lock_key_is_stable(self):
        school_id = uuid4()
        assert LockingService.lock_key(school_id, 2024, 3) == f"teacher_payroll:{school_id}:2024:03"


class TestConcurrentGeneration:
    """Test two sessions racing to generate the same month."""

    async def test_second_generator_rejected_after_commit(self, tmp_path):
        engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'payroll.db'}")
        try:
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            factory = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
            school_id = uuid4()

            async with factory() as setup:
                setup.add(
                    TeacherSalary(
                        school_id=school_id,
                        teacher_id=uuid4(),
                        monthly_salary=Decimal("30000"),
                        effective_from=date(2024, 1, 1),
                        is_active=True,
                    )
                )
                await setup.commit()

            async with factory() as first, factory() as second:
                assert await LockingService(second).is_period_locked(school_id, 2024, 11) is False

                await PayrollService(first).generate_payroll(school_id, 2024, 11)
                await first.commit()

                with pytest.raises(PayrollLockedError, match="already generated"):
                    await LockingService(second).acquire_period_lock(school_id, 2024, 11)
                await second.rollback()

                assert await LockingService(second).is_period_locked(school_id, 2024, 11) is True
        finally:
            await engine.dispose()
