"""
Appointment status state machine

Appointment statuses: SCHEDULED → CONFIRMED/RESCHEDULED → IN_PROGRESS → COMPLETED
CANCELLED is reachable from every non-terminal state.

Every operation that touches `Appointment.status` asks LifecyclePolicy whether
the move is legal instead of comparing status strings itself.
"""

import enum

from ...config import ALLOW_CANCEL_COMPLETED
from ...errors import IllegalState


class AppointmentStatus(str, enum.Enum):
    SCHEDULED = "SCHEDULED"
    CONFIRMED = "CONFIRMED"
    RESCHEDULED = "RESCHEDULED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


# Define valid transitions for appointments
TRANSITIONS: dict[AppointmentStatus, frozenset[AppointmentStatus]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.CONFIRMED, AppointmentStatus.RESCHEDULED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.CONFIRMED: frozenset(
        {AppointmentStatus.IN_PROGRESS, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.RESCHEDULED: frozenset(
        {AppointmentStatus.IN_PROGRESS, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.IN_PROGRESS: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),  # Terminal state
    AppointmentStatus.CANCELLED: frozenset(),  # Terminal state
}

INITIAL_STATUS = AppointmentStatus.SCHEDULED

# Only appointments that have not started can be removed
DELETABLE_STATUSES = (
    AppointmentStatus.SCHEDULED,
    AppointmentStatus.CONFIRMED,
    AppointmentStatus.RESCHEDULED,
)


def _format_statuses(statuses) -> str:
    names = [s.value for s in statuses]
    if len(names) == 1:
        return names[0]
    return f"{', '.join(names[:-1])}, or {names[-1]}"


class LifecyclePolicy:
    """Single authority for status transitions and status-based guards"""

    def __init__(self, allow_cancel_completed: bool = ALLOW_CANCEL_COMPLETED):
        self.allow_cancel_completed = allow_cancel_completed
        self.transitions = dict(TRANSITIONS)
        if allow_cancel_completed:
            self.transitions[AppointmentStatus.COMPLETED] = frozenset({AppointmentStatus.CANCELLED})

    def can_transition(self, current, target) -> bool:
        """Check if moving from `current` to `target` is allowed"""
        current = AppointmentStatus(current)
        target = AppointmentStatus(target)
        return target in self.transitions[current]

    def ensure_transition(self, current, target) -> AppointmentStatus:
        """Raise IllegalState unless the transition is allowed; returns the target status"""
        if not self.can_transition(current, target):
            raise IllegalState(
                f"Cannot move appointment from {AppointmentStatus(current).value} "
                f"to {AppointmentStatus(target).value}"
            )
        return AppointmentStatus(target)

    def ensure_cancellable(self, current) -> AppointmentStatus:
        current = AppointmentStatus(current)
        if current == AppointmentStatus.CANCELLED:
            raise IllegalState("Appointment is already cancelled")
        if current == AppointmentStatus.COMPLETED and not self.allow_cancel_completed:
            raise IllegalState("Completed appointments cannot be cancelled")
        return self.ensure_transition(current, AppointmentStatus.CANCELLED)

    @staticmethod
    def ensure_editable(current) -> None:
        """Notes and schedule can be edited unless work has started"""
        if AppointmentStatus(current) == AppointmentStatus.IN_PROGRESS:
            raise IllegalState("Cannot update appointment that is currently in progress")

    @staticmethod
    def ensure_deletable(current) -> None:
        if AppointmentStatus(current) not in DELETABLE_STATUSES:
            raise IllegalState(
                f"Only appointments with status {_format_statuses(DELETABLE_STATUSES)} can be deleted"
            )

    @staticmethod
    def ensure_in_progress(current) -> None:
        if AppointmentStatus(current) != AppointmentStatus.IN_PROGRESS:
            raise IllegalState("Progress can only be updated while the appointment is in progress")
