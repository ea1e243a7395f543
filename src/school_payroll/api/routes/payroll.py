"""Teacher payroll API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, status

from school_payroll.api.dependencies import DbSession, SchoolId, not_found_or_bad_request
from school_payroll.api.schemas import (
    ErrorResponse,
    GeneratePayrollRequest,
    MarkPaidRequest,
    PayrollMonthResponse,
    PayrollRecordResponse,
    PayrollSummaryResponse,
    TeacherPayrollHistoryResponse,
)
from school_payroll.services.locking_service import LockingService, PayrollLockedError
from school_payroll.services.payroll_service import (
    NoActiveSalariesError,
    PayrollService,
    PayrollSummary,
)
from school_payroll.services.state_machine import InvalidTransitionError

router = APIRouter(prefix="/payroll", tags=["payroll"])

Year = Annotated[int, Path(ge=2000, le=2100)]
Month = Annotated[int, Path(ge=1, le=12)]


# ============================================================================
# Teacher history and payment
# ============================================================================


@router.get(
    "/teachers/{teacher_id}",
    response_model=TeacherPayrollHistoryResponse,
)
async def get_teacher_payroll_history(
    db: DbSession,
    school_id: SchoolId,
    teacher_id: Annotated[UUID, Path()],
) -> TeacherPayrollHistoryResponse:
    """List one teacher's payroll rows, newest month first."""
    service = PayrollService(db)
    records = await service.get_teacher_history(school_id, teacher_id)
    return TeacherPayrollHistoryResponse(
        teacher_id=teacher_id,
        items=[PayrollRecordResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.post(
    "/records/{payroll_id}/mark-paid",
    response_model=PayrollRecordResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def mark_payroll_paid(
    db: DbSession,
    school_id: SchoolId,
    payroll_id: Annotated[UUID, Path()],
    payload: MarkPaidRequest | None = None,
) -> PayrollRecordResponse:
    """Mark a pending payroll row as paid."""
    service = PayrollService(db)
    try:
        record = await service.mark_paid(
            school_id, payroll_id, payload.paid_date if payload else None
        )
    except InvalidTransitionError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return PayrollRecordResponse.model_validate(record)


# ============================================================================
# Monthly payroll
# ============================================================================


@router.post(
    "/{year}/{month}/generate",
    response_model=PayrollMonthResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
    },
)
async def generate_payroll(
    db: DbSession,
    school_id: SchoolId,
    year: Year,
    month: Month,
    payload: GeneratePayrollRequest | None = None,
) -> PayrollMonthResponse:
    """Generate, persist and lock payroll for every salaried teacher."""
    service = PayrollService(db)
    try:
        result = await service.generate_payroll(
            school_id,
            year,
            month,
            generated_by=payload.generated_by if payload else None,
        )
    except PayrollLockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except NoActiveSalariesError as e:
        raise HTTPException(status_code=422, detail=str(e))
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return PayrollMonthResponse(
        year=year,
        month=month,
        is_locked=True,
        records=[PayrollRecordResponse.model_validate(r) for r in result.records],
        summary=PayrollSummaryResponse.model_validate(result.summary),
    )


@router.get(
    "/{year}/{month}",
    response_model=PayrollMonthResponse,
)
async def get_payroll_month(
    db: DbSession,
    school_id: SchoolId,
    year: Year,
    month: Month,
) -> PayrollMonthResponse:
    """List a month's payroll rows with totals and lock state."""
    service = PayrollService(db)
    records = await service.list_payroll(school_id, year, month)
    is_locked = await LockingService(db).is_period_locked(school_id, year, month)
    return PayrollMonthResponse(
        year=year,
        month=month,
        is_locked=is_locked,
        records=[PayrollRecordResponse.model_validate(r) for r in records],
        summary=PayrollSummaryResponse.model_validate(
            PayrollSummary.from_records(year, month, records)
        ),
    )
