"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from school_payroll.calculators.types import AttendanceStatus, SalaryCalculationType


# ============================================================================
# Payroll schemas
# ============================================================================


class PayrollRecordResponse(BaseModel):
    """Schema for a teacher payroll row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_id: UUID
    teacher_id: UUID
    month: int
    year: int
    monthly_salary: Decimal
    carry_forward: Decimal
    gross_salary: Decimal
    total_days_in_month: int
    deductible_absences: int
    per_day_salary: Decimal
    total_deduction: Decimal
    security_deposit_deduction: Decimal
    advance_deduction: Decimal
    loan_deduction: Decimal
    final_salary: Decimal
    net_salary: Decimal
    status: str
    paid_date: date | None = None
    is_locked: bool
    remarks: str | None = None


class PayrollSummaryResponse(BaseModel):
    """Schema for the totals of a payroll month."""

    model_config = ConfigDict(from_attributes=True)

    year: int
    month: int
    teacher_count: int
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal
    total_paid: Decimal
    total_pending: Decimal


class PayrollMonthResponse(BaseModel):
    """Schema for one school's payroll month."""

    year: int
    month: int
    is_locked: bool
    records: list[PayrollRecordResponse]
    summary: PayrollSummaryResponse


class GeneratePayrollRequest(BaseModel):
    """Schema for a payroll generation request."""

    generated_by: UUID | None = None


class MarkPaidRequest(BaseModel):
    """Schema for marking a payroll row paid."""

    paid_date: date | None = None


class TeacherPayrollHistoryResponse(BaseModel):
    """Schema for a teacher's payroll history."""

    teacher_id: UUID
    items: list[PayrollRecordResponse]
    total: int


# ============================================================================
# Attendance schemas
# ============================================================================


class AttendanceCreate(BaseModel):
    """Schema for recording an absence."""

    teacher_id: UUID
    attendance_date: date = Field(alias="date")
    status: AttendanceStatus = AttendanceStatus.ABSENT
    reason: str | None = None
    approved_by: UUID | None = None


class AttendanceResponse(BaseModel):
    """Schema for an attendance row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_id: UUID
    teacher_id: UUID
    attendance_date: date = Field(serialization_alias="date")
    status: str
    is_deductible: bool
    reason: str | None = None
    approved_by: UUID | None = None


class AttendanceListResponse(BaseModel):
    items: list[AttendanceResponse]
    total: int


class AttendanceSettingsUpdate(BaseModel):
    """Schema for updating a school's attendance settings."""

    max_yearly_absences: int = Field(ge=0)
    salary_calculation_type: SalaryCalculationType = SalaryCalculationType.CALENDAR_DAYS
    floor_net_salary: bool | None = None


class AttendanceSettingsResponse(BaseModel):
    """Schema for a school's attendance settings."""

    model_config = ConfigDict(from_attributes=True)

    school_id: UUID
    max_yearly_absences: int
    salary_calculation_type: str
    floor_net_salary: bool


# ============================================================================
# Salary schemas
# ============================================================================


class SalaryCreate(BaseModel):
    """Schema for setting a teacher's salary."""

    teacher_id: UUID
    monthly_salary: Decimal = Field(ge=0)
    effective_from: date | None = None


class SalaryActiveUpdate(BaseModel):
    is_active: bool


class SalaryResponse(BaseModel):
    """Schema for a teacher salary row."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_id: UUID
    teacher_id: UUID
    monthly_salary: Decimal
    effective_from: date
    is_active: bool


# ============================================================================
# Ledger schemas
# ============================================================================


class SecurityDepositCreate(BaseModel):
    """Schema for opening a security deposit."""

    teacher_id: UUID
    base_salary: Decimal = Field(gt=0)
    deposit_percentage: Decimal | None = Field(default=None, gt=0, le=100)
    installment_amount: Decimal = Field(default=Decimal("0"), ge=0)


class SecurityDepositUpdate(BaseModel):
    """Schema for changing a security deposit's terms."""

    base_salary: Decimal | None = Field(default=None, gt=0)
    deposit_percentage: Decimal | None = Field(default=None, gt=0, le=100)
    installment_amount: Decimal | None = Field(default=None, ge=0)


class SecurityDepositResponse(BaseModel):
    """Schema for a security deposit."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_id: UUID
    teacher_id: UUID
    base_salary: Decimal
    deposit_percentage: Decimal
    total_deposit: Decimal
    collected_amount: Decimal
    remaining_balance: Decimal
    installment_amount: Decimal
    status: str
    created_at: datetime


class AdvanceCreate(BaseModel):
    """Schema for recording an approved advance."""

    teacher_id: UUID
    amount: Decimal = Field(gt=0)
    deduction_month: int = Field(ge=1, le=12)
    deduction_year: int = Field(ge=1)
    approved_by: UUID | None = None
    remarks: str | None = None


class AdvanceResponse(BaseModel):
    """Schema for a salary advance."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_id: UUID
    teacher_id: UUID
    amount: Decimal
    deduction_month: int
    deduction_year: int
    deducted_amount: Decimal
    remaining_balance: Decimal
    status: str
    approved_by: UUID | None = None
    remarks: str | None = None
    created_at: datetime


class LoanCreate(BaseModel):
    """Schema for creating a loan."""

    teacher_id: UUID
    total_loan_amount: Decimal = Field(gt=0)
    installment_amount: Decimal = Field(gt=0)
    start_month: int = Field(ge=1, le=12)
    start_year: int = Field(ge=1)
    approved_by: UUID | None = None
    remarks: str | None = None


class LoanResponse(BaseModel):
    """Schema for a loan."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    school_id: UUID
    teacher_id: UUID
    total_loan_amount: Decimal
    remaining_balance: Decimal
    installment_amount: Decimal
    start_month: int
    start_year: int
    status: str
    approved_by: UUID | None = None
    remarks: str | None = None
    estimated_installments: int | None = None
    created_at: datetime


# ============================================================================
# Error schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Schema for error response."""

    detail: str
    code: str | None = None
    context: dict[str, Any] | None = None
