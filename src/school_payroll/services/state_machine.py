"""Teacher payroll status state machine with transition validation."""

from __future__ import annotations

from enum import Enum


class PayrollStatus(str, Enum):
    """Teacher payroll status values."""

    PENDING = "pending"
    PAID = "paid"


class InvalidTransitionError(Exception):
    """Raised when an invalid state transition is attempted."""

    def __init__(self, from_status: str, to_status: str, reason: str | None = None):
        self.from_status = from_status
        self.to_status = to_status
        self.reason = reason
        msg = f"Invalid transition from '{from_status}' to '{to_status}'"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class PayrollStateMachine:
    """State machine for teacher payroll status transitions.

    Allowed transitions:
    - pending → paid

    paid is terminal. The is_locked flag is independent of status and is
    never cleared.
    """

    VALID_TRANSITIONS: dict[str, list[str]] = {
        PayrollStatus.PENDING: [PayrollStatus.PAID],
        PayrollStatus.PAID: [],  # Terminal state
    }

    # Statuses whose net salary is still owed and rolls into the next month
    CARRY_FORWARD_ELIGIBLE = {PayrollStatus.PENDING}

    @classmethod
    def can_transition(cls, from_status: str, to_status: str) -> bool:
        """Check if a transition is valid."""
        allowed = cls.VALID_TRANSITIONS.get(from_status, [])
        return to_status in allowed

    @classmethod
    def validate_transition(cls, from_status: str, to_status: str) -> None:
        """Validate a transition, raising InvalidTransitionError if invalid."""
        if not cls.can_transition(from_status, to_status):
            reason = "payroll is already paid" if from_status == PayrollStatus.PAID else None
            raise InvalidTransitionError(from_status, to_status, reason)

    @classmethod
    def is_carry_forward_eligible(cls, status: str) -> bool:
        return status in cls.CARRY_FORWARD_ELIGIBLE
