"""Tests for teacher payroll state machine."""

import pytest

from school_payroll.services.state_machine import (
    InvalidTransitionError,
    PayrollStateMachine,
    PayrollStatus,
)


class TestPayrollStateMachine:
    """Test state machine transitions."""

    def test_pending_to_paid_allowed(self):
        assert PayrollStateMachine.can_transition("pending", "paid") is True

    def test_invalid_transitions(self):
        """Paid is terminal and pending cannot be re-entered."""
        assert PayrollStateMachine.can_transition("paid", "pending") is False
        assert PayrollStateMachine.can_transition("paid", "paid") is False
        assert PayrollStateMachine.can_transition("pending", "pending") is False
        assert PayrollStateMachine.can_transition("unknown", "paid") is False

    def test_validate_transition_raises(self):
        with pytest.raises(InvalidTransitionError) as exc_info:
            PayrollStateMachine.validate_transition("paid", "paid")

        assert exc_info.value.from_status == "paid"
        assert exc_info.value.to_status == "paid"
        assert "already paid" in str(exc_info.value)

    def test_carry_forward_eligibility(self):
        assert PayrollStateMachine.is_carry_forward_eligible(PayrollStatus.PENDING) is True
        assert PayrollStateMachine.is_carry_forward_eligible("paid") is False
