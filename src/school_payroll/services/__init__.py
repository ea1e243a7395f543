"""School payroll services."""

from school_payroll.services.attendance_service import AttendanceService, DuplicateAttendanceError
from school_payroll.services.ledger_service import LedgerService
from school_payroll.services.locking_service import LockingService, PayrollLockedError
from school_payroll.services.payroll_inputs import PayrollInputReader
from school_payroll.services.payroll_service import NoActiveSalariesError, PayrollService
from school_payroll.services.salary_service import SalaryService
from school_payroll.services.state_machine import (
    InvalidTransitionError,
    PayrollStateMachine,
    PayrollStatus,
)

__all__ = [
    "AttendanceService",
    "DuplicateAttendanceError",
    "LedgerService",
    "LockingService",
    "PayrollLockedError",
    "PayrollInputReader",
    "PayrollService",
    "NoActiveSalariesError",
    "SalaryService",
    "PayrollStateMachine",
    "PayrollStatus",
    "InvalidTransitionError",
]
