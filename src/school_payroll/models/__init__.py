"""ORM models for the school payroll engine."""

from school_payroll.models.base import Base, TimestampMixin
from school_payroll.models.ledgers import TeacherAdvance, TeacherLoan, TeacherSecurityDeposit
from school_payroll.models.payroll import PayrollPeriodLock, TeacherPayroll
from school_payroll.models.school import SchoolAttendanceSettings
from school_payroll.models.teacher import TeacherAttendanceRecord, TeacherSalary

__all__ = [
    "Base",
    "TimestampMixin",
    "SchoolAttendanceSettings",
    "TeacherSalary",
    "TeacherAttendanceRecord",
    "TeacherSecurityDeposit",
    "TeacherAdvance",
    "TeacherLoan",
    "TeacherPayroll",
    "PayrollPeriodLock",
]
