"""Teacher attendance service and per-school attendance settings."""

from __future__ import annotations

import logging
from datetime import date
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from school_payroll.calculators.periods import month_bounds
from school_payroll.calculators.types import AttendanceStatus, SalaryCalculationType
from school_payroll.config import get_settings
from school_payroll.models import SchoolAttendanceSettings, TeacherAttendanceRecord
from school_payroll.services.locking_service import LockingService
from school_payroll.services.payroll_inputs import PayrollInputReader

logger = logging.getLogger(__name__)


class DuplicateAttendanceError(Exception):
    """Raised when attendance is already recorded for a teacher on a date."""

    def __init__(self, teacher_id: UUID, day: date):
        self.teacher_id = teacher_id
        self.day = day
        super().__init__(f"Attendance already recorded for teacher {teacher_id} on {day}")


class AttendanceService:
    """Service for recording teacher absences.

    An absence becomes salary-deductible once the teacher has already used
    the school's yearly allowance (max_yearly_absences) in the calendar year
    of the absence. Deductibility is decided when the absence is recorded.
    Absences in a month whose payroll is locked cannot be added or removed.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.locking_service = LockingService(session)
        self.input_reader = PayrollInputReader(session)

    async def yearly_absence_count(self, teacher_id: UUID, year: int) -> int:
        """Number of attendance rows of the teacher in the calendar year."""
        result = await self.session.execute(
            select(func.count())
            .select_from(TeacherAttendanceRecord)
            .where(
                TeacherAttendanceRecord.teacher_id == teacher_id,
                TeacherAttendanceRecord.attendance_date >= date(year, 1, 1),
                TeacherAttendanceRecord.attendance_date <= date(year, 12, 31),
            )
        )
        return int(result.scalar() or 0)

    async def record_absence(
        self,
        school_id: UUID,
        teacher_id: UUID,
        day: date,
        status: str = AttendanceStatus.ABSENT.value,
        reason: str | None = None,
        approved_by: UUID | None = None,
    ) -> TeacherAttendanceRecord:
        """Record an absence and decide whether it is salary-deductible.

        Raises:
            PayrollLockedError: payroll for the month of day is locked
            DuplicateAttendanceError: the teacher already has a row for day
        """
        status = AttendanceStatus(status).value
        await self.locking_service.ensure_date_unlocked(school_id, day)

        existing = await self.session.execute(
            select(TeacherAttendanceRecord.id).where(
                TeacherAttendanceRecord.teacher_id == teacher_id,
                TeacherAttendanceRecord.attendance_date == day,
            )
        )
        if existing.first() is not None:
            raise DuplicateAttendanceError(teacher_id, day)

        policy = await self.input_reader.get_policy(school_id)
        used = await self.yearly_absence_count(teacher_id, day.year)
        is_deductible = used >= policy.max_yearly_absences
        if is_deductible:
            logger.info(
                "Teacher %s is over the yearly absence limit (%d/%d); %s is deductible",
                teacher_id,
                used,
                policy.max_yearly_absences,
                day,
            )

        record = TeacherAttendanceRecord(
            school_id=school_id,
            teacher_id=teacher_id,
            attendance_date=day,
            status=status,
            is_deductible=is_deductible,
            reason=reason,
            approved_by=approved_by,
        )
        self.session.add(record)
        try:
            await self.session.flush()
        except IntegrityError as e:
            raise DuplicateAttendanceError(teacher_id, day) from e
        return record

    async def delete_record(self, school_id: UUID, record_id: UUID) -> None:
        """Remove an attendance row unless its month is locked."""
        result = await self.session.execute(
            select(TeacherAttendanceRecord).where(
                TeacherAttendanceRecord.id == record_id,
                TeacherAttendanceRecord.school_id == school_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise ValueError(f"Attendance record {record_id} not found")

        await self.locking_service.ensure_date_unlocked(school_id, record.attendance_date)
        await self.session.delete(record)
        await self.session.flush()

    async def list_records(
        self,
        school_id: UUID,
        year: int,
        month: int,
        teacher_id: UUID | None = None,
    ) -> list[TeacherAttendanceRecord]:
        start, end = month_bounds(year, month)
        query = select(TeacherAttendanceRecord).where(
            TeacherAttendanceRecord.school_id == school_id,
            TeacherAttendanceRecord.attendance_date >= start,
            TeacherAttendanceRecord.attendance_date <= end,
        )
        if teacher_id is not None:
            query = query.where(TeacherAttendanceRecord.teacher_id == teacher_id)
        result = await self.session.execute(
            query.order_by(TeacherAttendanceRecord.attendance_date.desc())
        )
        return list(result.scalars().all())

    # Settings

    async def get_settings(self, school_id: UUID) -> SchoolAttendanceSettings | None:
        result = await self.session.execute(
            select(SchoolAttendanceSettings).where(
                SchoolAttendanceSettings.school_id == school_id
            )
        )
        return result.scalar_one_or_none()

    async def upsert_settings(
        self,
        school_id: UUID,
        max_yearly_absences: int,
        salary_calculation_type: str,
        floor_net_salary: bool | None = None,
    ) -> SchoolAttendanceSettings:
        """Create or update the school's attendance settings."""
        if max_yearly_absences < 0:
            raise ValueError("max_yearly_absences cannot be negative")
        calculation_type = SalaryCalculationType(salary_calculation_type).value

        settings = await self.get_settings(school_id)
        if settings is None:
            settings = SchoolAttendanceSettings(
                school_id=school_id,
                floor_net_salary=get_settings().floor_net_salary,
            )
            self.session.add(settings)

        settings.max_yearly_absences = max_yearly_absences
        settings.salary_calculation_type = calculation_type
        if floor_net_salary is not None:
            settings.floor_net_salary = floor_net_salary

        await self.session.flush()
        return settings
