# secretaria/services/status_machine.py
"""Enrollment status transitions.

    pending       -> active, cancelled
    active        -> cancelled, reenrollment, completed, pending (global reenrollment)
    reenrollment  -> active, cancelled
    cancelled, completed are terminal

Admin activation is the one exception: it may move any state to ``active``
(see ``EnrollmentService.activate_enrollment``).
"""
from typing import Dict, FrozenSet, Union

from ..core.exceptions import StateConflictError, ValidationError
from ..models.enrollment import EnrollmentStatus

S = EnrollmentStatus

TRANSITIONS: Dict[EnrollmentStatus, FrozenSet[EnrollmentStatus]] = {
    S.PENDING: frozenset({S.ACTIVE, S.CANCELLED}),
    S.ACTIVE: frozenset({S.CANCELLED, S.REENROLLMENT, S.COMPLETED, S.PENDING}),
    S.REENROLLMENT: frozenset({S.ACTIVE, S.CANCELLED}),
    S.CANCELLED: frozenset(),
    S.COMPLETED: frozenset(),
}

INITIAL_STATUS = S.PENDING
TERMINAL_STATUSES = frozenset(status for status, targets in TRANSITIONS.items() if not targets)


def parse_status(value: Union[str, EnrollmentStatus]) -> EnrollmentStatus:
    if isinstance(value, EnrollmentStatus):
        return value
    try:
        return EnrollmentStatus(str(value).strip().lower())
    except ValueError:
        accepted = ", ".join(s.value for s in EnrollmentStatus)
        raise ValidationError(
            "Invalid status",
            details=[{"field": "status", "message": f"Accepted values: {accepted}"}],
        )


def can_transition(current: EnrollmentStatus, target: EnrollmentStatus) -> bool:
    return target in TRANSITIONS.get(current, frozenset())


def ensure_transition(current: EnrollmentStatus, target: EnrollmentStatus) -> None:
    if not can_transition(current, target):
        raise StateConflictError(
            f"Cannot change enrollment status from '{current.value}' to '{target.value}'"
        )
