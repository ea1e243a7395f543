"""Teacher salary API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, status

from school_payroll.api.dependencies import DbSession, SchoolId, not_found_or_bad_request
from school_payroll.api.schemas import (
    ErrorResponse,
    SalaryActiveUpdate,
    SalaryCreate,
    SalaryResponse,
)
from school_payroll.services.salary_service import SalaryService

router = APIRouter(prefix="/salaries", tags=["salaries"])


@router.get("", response_model=list[SalaryResponse])
async def list_salaries(
    db: DbSession,
    school_id: SchoolId,
    teacher_id: UUID | None = None,
    active_only: bool = False,
) -> list[SalaryResponse]:
    salaries = await SalaryService(db).list_salaries(school_id, teacher_id, active_only)
    return [SalaryResponse.model_validate(s) for s in salaries]


@router.post(
    "",
    response_model=SalaryResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def set_salary(
    db: DbSession,
    school_id: SchoolId,
    payload: SalaryCreate,
) -> SalaryResponse:
    """Set a teacher's salary, superseding the active one."""
    try:
        salary = await SalaryService(db).set_salary(
            school_id,
            payload.teacher_id,
            payload.monthly_salary,
            payload.effective_from,
        )
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return SalaryResponse.model_validate(salary)


@router.post(
    "/{salary_id}/active",
    response_model=SalaryResponse,
    responses={404: {"model": ErrorResponse}},
)
async def set_salary_active(
    db: DbSession,
    school_id: SchoolId,
    salary_id: Annotated[UUID, Path()],
    payload: SalaryActiveUpdate,
) -> SalaryResponse:
    """Activate or deactivate a salary row."""
    try:
        salary = await SalaryService(db).set_active(school_id, salary_id, payload.is_active)
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return SalaryResponse.model_validate(salary)
