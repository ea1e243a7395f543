"""Pytest fixtures for school payroll tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from dataclasses import replace
from datetime import date
from decimal import Decimal
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from school_payroll.api.app import create_app
from school_payroll.api.dependencies import get_db_session
from school_payroll.config import Settings, get_settings
from school_payroll.models import (
    Base,
    SchoolAttendanceSettings,
    TeacherAdvance,
    TeacherAttendanceRecord,
    TeacherLoan,
    TeacherPayroll,
    TeacherSalary,
    TeacherSecurityDeposit,
)
from school_payroll.services import attendance_service, payroll_inputs

# In-memory SQLite shared by every session of a test through StaticPool
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def engine():
    """Create a fresh test database per test."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Create async HTTP client bound to the test database."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def school_id() -> UUID:
    return uuid4()


@pytest.fixture
def floor_net_salary_by_default(monkeypatch) -> Settings:
    """Settings with PAYROLL_FLOOR_NET_SALARY turned on process-wide."""
    settings = replace(get_settings(), floor_net_salary=True)
    monkeypatch.setattr(payroll_inputs, "get_settings", lambda: settings)
    monkeypatch.setattr(attendance_service, "get_settings", lambda: settings)
    return settings


class PayrollSeeder:
    """Inserts payroll inputs for a school."""

    def __init__(self, session: AsyncSession, school_id: UUID):
        self.session = session
        self.school_id = school_id

    async def settings(
        self,
        max_yearly_absences: int = 7,
        salary_calculation_type: str = "calendar_days",
        floor_net_salary: bool = False,
    ) -> SchoolAttendanceSettings:
        row = SchoolAttendanceSettings(
            school_id=self.school_id,
            max_yearly_absences=max_yearly_absences,
            salary_calculation_type=salary_calculation_type,
            floor_net_salary=floor_net_salary,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def salary(
        self,
        teacher_id: UUID,
        monthly_salary: str,
        effective_from: date = date(2024, 1, 1),
        is_active: bool = True,
    ) -> TeacherSalary:
        row = TeacherSalary(
            school_id=self.school_id,
            teacher_id=teacher_id,
            monthly_salary=Decimal(monthly_salary),
            effective_from=effective_from,
            is_active=is_active,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def absences(
        self, teacher_id: UUID, days: list[date], is_deductible: bool = True
    ) -> list[TeacherAttendanceRecord]:
        rows = [
            TeacherAttendanceRecord(
                school_id=self.school_id,
                teacher_id=teacher_id,
                attendance_date=day,
                status="absent",
                is_deductible=is_deductible,
            )
            for day in days
        ]
        self.session.add_all(rows)
        await self.session.flush()
        return rows

    async def deposit(
        self,
        teacher_id: UUID,
        total: str,
        installment: str,
        collected: str = "0",
    ) -> TeacherSecurityDeposit:
        total_deposit = Decimal(total)
        collected_amount = Decimal(collected)
        row = TeacherSecurityDeposit(
            school_id=self.school_id,
            teacher_id=teacher_id,
            base_salary=total_deposit * 5,
            deposit_percentage=Decimal("20"),
            total_deposit=total_deposit,
            collected_amount=collected_amount,
            remaining_balance=total_deposit - collected_amount,
            installment_amount=Decimal(installment),
            status="active",
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def advance(
        self,
        teacher_id: UUID,
        amount: str,
        month: int,
        year: int,
        status: str = "approved",
    ) -> TeacherAdvance:
        row = TeacherAdvance(
            school_id=self.school_id,
            teacher_id=teacher_id,
            amount=Decimal(amount),
            deduction_month=month,
            deduction_year=year,
            deducted_amount=Decimal("0"),
            remaining_balance=Decimal(amount),
            status=status,
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def loan(
        self,
        teacher_id: UUID,
        total: str,
        installment: str,
        remaining: str | None = None,
        start_month: int = 1,
        start_year: int = 2024,
    ) -> TeacherLoan:
        row = TeacherLoan(
            school_id=self.school_id,
            teacher_id=teacher_id,
            total_loan_amount=Decimal(total),
            remaining_balance=Decimal(remaining if remaining is not None else total),
            installment_amount=Decimal(installment),
            start_month=start_month,
            start_year=start_year,
            status="active",
        )
        self.session.add(row)
        await self.session.flush()
        return row

    async def payroll(
        self,
        teacher_id: UUID,
        month: int,
        year: int,
        net_salary: str,
        status: str = "pending",
        is_locked: bool = True,
    ) -> TeacherPayroll:
        net = Decimal(net_salary)
        row = TeacherPayroll(
            school_id=self.school_id,
            teacher_id=teacher_id,
            month=month,
            year=year,
            monthly_salary=net,
            gross_salary=net,
            total_days_in_month=30,
            per_day_salary=(net / 30).quantize(Decimal("0.01")),
            net_salary=net,
            status=status,
            paid_date=date(year, month, 28) if status == "paid" else None,
            is_locked=is_locked,
        )
        self.session.add(row)
        await self.session.flush()
        return row


@pytest.fixture
def seed(session: AsyncSession, school_id: UUID) -> PayrollSeeder:
    """Seeder bound to the test session and school."""
    return PayrollSeeder(session, school_id)
