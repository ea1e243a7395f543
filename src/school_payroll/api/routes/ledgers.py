"""Security deposit, advance and loan API endpoints."""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from school_payroll.api.dependencies import DbSession, SchoolId, not_found_or_bad_request
from school_payroll.api.schemas import (
    AdvanceCreate,
    AdvanceResponse,
    ErrorResponse,
    LoanCreate,
    LoanResponse,
    SecurityDepositCreate,
    SecurityDepositResponse,
    SecurityDepositUpdate,
)
from school_payroll.models import TeacherLoan
from school_payroll.services.ledger_service import LedgerService, estimate_installments

router = APIRouter(tags=["ledgers"])


def _loan_response(loan: TeacherLoan) -> LoanResponse:
    resp = LoanResponse.model_validate(loan)
    resp.estimated_installments = estimate_installments(
        loan.remaining_balance, loan.installment_amount
    )
    return resp


# ============================================================================
# Security deposits
# ============================================================================


@router.get("/deposits", response_model=list[SecurityDepositResponse])
async def list_security_deposits(
    db: DbSession,
    school_id: SchoolId,
    teacher_id: UUID | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> list[SecurityDepositResponse]:
    deposits = await LedgerService(db).list_security_deposits(school_id, teacher_id, status_filter)
    return [SecurityDepositResponse.model_validate(d) for d in deposits]


@router.post(
    "/deposits",
    response_model=SecurityDepositResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_security_deposit(
    db: DbSession,
    school_id: SchoolId,
    payload: SecurityDepositCreate,
) -> SecurityDepositResponse:
    """Open a security deposit (20% of base salary unless specified)."""
    try:
        deposit = await LedgerService(db).create_security_deposit(
            school_id,
            payload.teacher_id,
            base_salary=payload.base_salary,
            installment_amount=payload.installment_amount,
            deposit_percentage=payload.deposit_percentage,
        )
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return SecurityDepositResponse.model_validate(deposit)


@router.put(
    "/deposits/{deposit_id}",
    response_model=SecurityDepositResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_security_deposit(
    db: DbSession,
    school_id: SchoolId,
    deposit_id: Annotated[UUID, Path()],
    payload: SecurityDepositUpdate,
) -> SecurityDepositResponse:
    """Change a deposit's terms; the total and remaining balance are recomputed."""
    try:
        deposit = await LedgerService(db).update_security_deposit(
            school_id,
            deposit_id,
            base_salary=payload.base_salary,
            deposit_percentage=payload.deposit_percentage,
            installment_amount=payload.installment_amount,
        )
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return SecurityDepositResponse.model_validate(deposit)


# ============================================================================
# Advances
# ============================================================================


@router.get("/advances", response_model=list[AdvanceResponse])
async def list_advances(
    db: DbSession,
    school_id: SchoolId,
    teacher_id: UUID | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> list[AdvanceResponse]:
    advances = await LedgerService(db).list_advances(school_id, teacher_id, status_filter)
    return [AdvanceResponse.model_validate(a) for a in advances]


@router.post(
    "/advances",
    response_model=AdvanceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_advance(
    db: DbSession,
    school_id: SchoolId,
    payload: AdvanceCreate,
) -> AdvanceResponse:
    """Record an approved advance, recovered in full from one payroll month."""
    try:
        advance = await LedgerService(db).create_advance(
            school_id,
            payload.teacher_id,
            amount=payload.amount,
            deduction_month=payload.deduction_month,
            deduction_year=payload.deduction_year,
            approved_by=payload.approved_by,
            remarks=payload.remarks,
        )
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return AdvanceResponse.model_validate(advance)


# ============================================================================
# Loans
# ============================================================================


@router.get("/loans", response_model=list[LoanResponse])
async def list_loans(
    db: DbSession,
    school_id: SchoolId,
    teacher_id: UUID | None = None,
    status_filter: Annotated[str | None, Query(alias="status")] = None,
) -> list[LoanResponse]:
    loans = await LedgerService(db).list_loans(school_id, teacher_id, status_filter)
    return [_loan_response(loan) for loan in loans]


@router.post(
    "/loans",
    response_model=LoanResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
async def create_loan(
    db: DbSession,
    school_id: SchoolId,
    payload: LoanCreate,
) -> LoanResponse:
    """Create a loan repaid in monthly installments."""
    try:
        loan = await LedgerService(db).create_loan(
            school_id,
            payload.teacher_id,
            total_loan_amount=payload.total_loan_amount,
            installment_amount=payload.installment_amount,
            start_month=payload.start_month,
            start_year=payload.start_year,
            approved_by=payload.approved_by,
            remarks=payload.remarks,
        )
    except ValueError as e:
        raise not_found_or_bad_request(e)

    await db.commit()
    return _loan_response(loan)
