"""Tests for teacher salary management."""

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.services.salary_service import SalaryService

pytestmark = pytest.mark.asyncio


class TestSetSalary:
    """Test salary creation and supersession."""

    async def test_new_salary_supersedes_active(self, session: AsyncSession, seed):
        teacher = uuid4()
        old = await seed.salary(teacher, "25000")

        new = await SalaryService(session).set_salary(
            seed.school_id, teacher, Decimal("28000"), effective_from=date(2024, 6, 1)
        )

        assert new.is_active is True
        assert old.is_active is False

        active = await SalaryService(session).list_salaries(
            seed.school_id, teacher_id=teacher, active_only=True
        )
        assert [s.monthly_salary for s in active] == [Decimal("28000")]

    async def test_effective_from_defaults_to_today(self, session: AsyncSession, school_id):
        salary = await SalaryService(session).set_salary(school_id, uuid4(), Decimal("20000"))

        assert salary.effective_from == date.today()

    async def test_negative_salary_rejected(self, session: AsyncSession, school_id):
        with pytest.raises(ValueError, match="cannot be negative"):
            await SalaryService(session).set_salary(school_id, uuid4(), Decimal("-1"))


class TestSetActive:
    """Test activation toggles."""

    async def test_activating_deactivates_others(self, session: AsyncSession, seed):
        teacher = uuid4()
        old = await seed.salary(teacher, "25000", is_active=False)
        current = await seed.salary(teacher, "28000", effective_from=date(2024, 6, 1))

        restored = await SalaryService(session).set_active(seed.school_id, old.id, True)

        assert restored.is_active is True
        assert current.is_active is False

    async def test_deactivate(self, session: AsyncSession, seed):
        salary = await seed.salary(uuid4(), "25000")

        result = await SalaryService(session).set_active(seed.school_id, salary.id, False)

        assert result.is_active is False

    async def test_missing_salary(self, session: AsyncSession, school_id):
        with pytest.raises(ValueError, match="not found"):
            await SalaryService(session).set_active(school_id, uuid4(), True)

    async def test_other_school_cannot_toggle(self, session: AsyncSession, seed):
        salary = await seed.salary(uuid4(), "25000")

        with pytest.raises(ValueError, match="not found"):
            await SalaryService(session).set_active(uuid4(), salary.id, False)
