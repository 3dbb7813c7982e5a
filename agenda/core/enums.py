"""Core enums used across modules."""

from enum import StrEnum


class AppointmentStatusEnum(StrEnum):
    """Appointment lifecycle status."""

    SCHEDULED = "scheduled"
    RESCHEDULED = "rescheduled"
    CANCELLED = "cancelled"


class AppointmentTransitionEnum(StrEnum):
    """Lifecycle transitions tracked in metrics."""

    CREATE = "create"
    RESCHEDULE = "reschedule"
    CANCEL = "cancel"
