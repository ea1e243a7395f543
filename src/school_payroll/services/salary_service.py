"""Teacher salary management."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.models import TeacherSalary

logger = logging.getLogger(__name__)


class SalaryService:
    """Service for teacher base salaries.

    A new salary supersedes the teacher's active row; superseded rows stay
    in the table as inactive history.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _deactivate_others(self, teacher_id: UUID, keep_id: UUID | None = None) -> None:
        stmt = update(TeacherSalary).where(
            TeacherSalary.teacher_id == teacher_id,
            TeacherSalary.is_active.is_(True),
        )
        if keep_id is not None:
            stmt = stmt.where(TeacherSalary.id != keep_id)
        await self.session.execute(
            stmt.values(is_active=False).execution_options(synchronize_session="fetch")
        )

    async def set_salary(
        self,
        school_id: UUID,
        teacher_id: UUID,
        monthly_salary: Decimal,
        effective_from: date | None = None,
    ) -> TeacherSalary:
        """Make monthly_salary the teacher's active salary."""
        if monthly_salary < 0:
            raise ValueError("Monthly salary cannot be negative")

        await self._deactivate_others(teacher_id)
        salary = TeacherSalary(
            school_id=school_id,
            teacher_id=teacher_id,
            monthly_salary=monthly_salary,
            effective_from=effective_from or date.today(),
            is_active=True,
        )
        self.session.add(salary)
        await self.session.flush()

        logger.info("Teacher %s salary set to %s", teacher_id, monthly_salary)
        return salary

    async def set_active(self, school_id: UUID, salary_id: UUID, is_active: bool) -> TeacherSalary:
        """Activate or deactivate a salary row.

        Activating a row deactivates the teacher's other rows.
        """
        result = await self.session.execute(
            select(TeacherSalary).where(
                TeacherSalary.id == salary_id,
                TeacherSalary.school_id == school_id,
            )
        )
        salary = result.scalar_one_or_none()
        if salary is None:
            raise ValueError(f"Salary {salary_id} not found")

        if is_active:
            await self._deactivate_others(salary.teacher_id, keep_id=salary.id)
        salary.is_active = is_active
        await self.session.flush()
        return salary

    async def list_salaries(
        self,
        school_id: UUID,
        teacher_id: UUID | None = None,
        active_only: bool = False,
    ) -> list[TeacherSalary]:
        query = select(TeacherSalary).where(TeacherSalary.school_id == school_id)
        if teacher_id is not None:
            query = query.where(TeacherSalary.teacher_id == teacher_id)
        if active_only:
            query = query.where(TeacherSalary.is_active.is_(True))
        result = await self.session.execute(
            query.order_by(TeacherSalary.teacher_id, TeacherSalary.effective_from.desc())
        )
        return list(result.scalars().all())
