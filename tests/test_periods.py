"""Tests for payroll period calendar helpers."""

from datetime import date

import pytest

from school_payroll.calculators.periods import (
    days_in_month,
    month_bounds,
    month_name,
    previous_month,
    validate_period,
    working_days_in_month,
)


class TestDaysInMonth:
    """Test calendar and working day counts."""

    def test_calendar_days(self):
        assert days_in_month(2024, 1) == 31
        assert days_in_month(2024, 4) == 30
        assert days_in_month(2024, 2) == 29  # Leap year
        assert days_in_month(2023, 2) == 28

    def test_working_days_excludes_sundays(self):
        """A 30-day month with 4 Sundays has 26 working days."""
        # November 2024: Sundays on 3, 10, 17, 24
        assert working_days_in_month(2024, 11) == 26
        # April 2024: Sundays on 7, 14, 21, 28
        assert working_days_in_month(2024, 4) == 26

    def test_working_days_month_with_five_sundays(self):
        # September 2024 starts on a Sunday
        assert working_days_in_month(2024, 9) == 25

    def test_saturdays_are_working_days(self):
        # June 2024: 30 days, 5 Saturdays, 5 Sundays
        assert working_days_in_month(2024, 6) == 25


class TestPeriodNavigation:
    """Test month boundaries and previous-month rollover."""

    def test_month_bounds(self):
        assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 2, 29))
        assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2024, 12, 31))

    def test_previous_month_within_year(self):
        assert previous_month(2024, 6) == (2024, 5)

    def test_previous_month_rolls_back_year(self):
        """January rolls back to December of the prior year."""
        assert previous_month(2025, 1) == (2024, 12)

    def test_month_name(self):
        assert month_name(1) == "January"
        assert month_name(12) == "December"

    @pytest.mark.parametrize("month", [0, 13, -1])
    def test_validate_period_rejects_bad_month(self, month):
        with pytest.raises(ValueError, match="Month must be between 1 and 12"):
            validate_period(2024, month)
