"""Enumerations shared by the scheduling domain."""

from enum import StrEnum


class Periodicity(StrEnum):
    """How often a compliance falls due."""

    DAILY = "DAILY"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    HALF_YEARLY = "HALF_YEARLY"
    YEARLY = "YEARLY"
    ONE_TIME = "ONE_TIME"
    EVENT_BASED = "EVENT_BASED"

    @classmethod
    def _missing_(cls, value: object) -> "Periodicity | None":
        if not isinstance(value, str):
            return None
        normalized = value.strip().upper()
        # Older catalog rows use ANNUALLY for yearly obligations
        if normalized == "ANNUALLY":
            return cls.YEARLY
        for member in cls:
            if member.value == normalized:
                return member
        return None

    @classmethod
    def parse(cls, value: object) -> "Periodicity | None":
        """Return the matching periodicity, or None for an unknown tag."""
        try:
            return cls(value)
        except ValueError:
            return None


class TaskStatus(StrEnum):
    """Lifecycle states of a task."""

    PLANNED = "PLANNED"
    IN_PROGRESS = "IN_PROGRESS"
    WAITING_CLIENT = "WAITING_CLIENT"
    REVIEW = "REVIEW"
    FILED = "FILED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    OVERDUE = "OVERDUE"


class TaskPriority(StrEnum):
    """Task priority levels."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class TaskType(StrEnum):
    """Kinds of task. Generated tasks are always COMPLIANCE."""

    COMPLIANCE = "COMPLIANCE"
    FILING = "FILING"
    PAYMENT = "PAYMENT"
    RENEWAL = "RENEWAL"
    REGISTRATION = "REGISTRATION"
    AUDIT = "AUDIT"
    CONSULTATION = "CONSULTATION"
    FOLLOW_UP = "FOLLOW_UP"
    OTHER = "OTHER"
