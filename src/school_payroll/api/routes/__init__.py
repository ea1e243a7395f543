"""API routes."""

from school_payroll.api.routes.attendance import router as attendance_router
from school_payroll.api.routes.health import router as health_router
from school_payroll.api.routes.ledgers import router as ledgers_router
from school_payroll.api.routes.payroll import router as payroll_router
from school_payroll.api.routes.salaries import router as salaries_router

__all__ = [
    "attendance_router",
    "health_router",
    "ledgers_router",
    "payroll_router",
    "salaries_router",
]
