"""Per-school attendance and salary policy."""

from __future__ import annotations

from uuid import UUID

from sqlalchemy import Boolean, CheckConstraint, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from school_payroll.models.base import Base, TimestampMixin, uuid_pk


class SchoolAttendanceSettings(Base, TimestampMixin):
    """Attendance policy for a school (one row per school)."""

    __tablename__ = "school_attendance_settings"

    id: Mapped[UUID] = uuid_pk()
    school_id: Mapped[UUID] = mapped_column(nullable=False)
    max_yearly_absences: Mapped[int] = mapped_column(Integer, nullable=False, default=7)
    salary_calculation_type: Mapped[str] = mapped_column(
        String, nullable=False, default="calendar_days"
    )
    floor_net_salary: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        UniqueConstraint("school_id", name="school_attendance_settings_school_unique"),
        CheckConstraint(
            "salary_calculation_type IN ('calendar_days', 'working_days')",
            name="school_attendance_settings_calc_type_check",
        ),
        CheckConstraint(
            "max_yearly_absences >= 0",
            name="school_attendance_settings_max_absences_check",
        ),
    )
