"""Teacher attendance API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, HTTPException, Path, Query, status

from school_payroll.api.dependencies import DbSession, SchoolId, not_found_or_bad_request
from school_payroll.api.schemas import (
    AttendanceCreate,
    AttendanceListResponse,
    AttendanceResponse,
    AttendanceSettingsResponse,
    AttendanceSettingsUpdate,
    ErrorResponse,
)
from school_payroll.config import get_settings
from school_payroll.services.attendance_service import (
    AttendanceService,
    DuplicateAttendanceError,
)
from school_payroll.services.locking_service import PayrollLockedError

router = APIRouter(prefix="/attendance", tags=["attendance"])


# ============================================================================
# Settings
# ============================================================================


@router.get("/settings", response_model=AttendanceSettingsResponse)
async def get_attendance_settings(
    db: DbSession,
    school_id: SchoolId,
) -> AttendanceSettingsResponse:
    """Get the school's attendance settings, falling back to the defaults."""
    settings = await AttendanceService(db).get_settings(school_id)
    if settings is None:
        defaults = get_settings()
        return AttendanceSettingsResponse(
            school_id=school_id,
            max_yearly_absences=defaults.default_max_yearly_absences,
            salary_calculation_type=defaults.default_salary_calculation_type,
            floor_net_salary=defaults.floor_net_salary,
        )
    return AttendanceSettingsResponse.model_validate(settings)


@router.put(
    "/settings",
    response_model=AttendanceSettingsResponse,
    responses={400: {"model": ErrorResponse}},
)
async def update_attendance_settings(
    db: DbSession,
    school_id: SchoolId,
    payload: AttendanceSettingsUpdate,
) -> AttendanceSettingsResponse:
    """Create or update the school's attendance settings."""
    try:
        settings = await AttendanceService(db).upsert_settings(
            school_id,
            max_yearly_absences=payload.max_yearly_absences,
            salary_calculation_type=payload.salary_calculation_type.value,
            floor_net_salary=payload.floor_net_salary,
        )
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return AttendanceSettingsResponse.model_validate(settings)


# ============================================================================
# Attendance records
# ============================================================================


@router.get("", response_model=AttendanceListResponse)
async def list_attendance(
    db: DbSession,
    school_id: SchoolId,
    year: Annotated[int, Query(ge=2000, le=2100)],
    month: Annotated[int, Query(ge=1, le=12)],
    teacher_id: UUID | None = None,
) -> AttendanceListResponse:
    """List attendance rows of a month, newest first."""
    records = await AttendanceService(db).list_records(school_id, year, month, teacher_id)
    return AttendanceListResponse(
        items=[AttendanceResponse.model_validate(r) for r in records],
        total=len(records),
    )


@router.post(
    "",
    response_model=AttendanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": ErrorResponse}},
)
async def record_attendance(
    db: DbSession,
    school_id: SchoolId,
    payload: AttendanceCreate,
) -> AttendanceResponse:
    """Record an absence; it is deductible once the yearly allowance is used up."""
    try:
        record = await AttendanceService(db).record_absence(
            school_id,
            payload.teacher_id,
            payload.attendance_date,
            status=payload.status.value,
            reason=payload.reason,
            approved_by=payload.approved_by,
        )
    except (PayrollLockedError, DuplicateAttendanceError) as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    await db.commit()
    return AttendanceResponse.model_validate(record)


@router.delete(
    "/{record_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}},
)
async def delete_attendance(
    db: DbSession,
    school_id: SchoolId,
    record_id: Annotated[UUID, Path()],
) -> None:
    """Delete an attendance row unless its payroll month is locked."""
    try:
        await AttendanceService(db).delete_record(school_id, record_id)
    except PayrollLockedError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
