"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"

    @property
    def rank(self) -> int:
        """Higher rank means more urgent work."""
        return _PRIORITY_RANK[self]


class TaskStatus(str, Enum):
    UNASSIGNED = "UNASSIGNED"
    ASSIGNED = "ASSIGNED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"

    @property
    def rank(self) -> int:
        """Position in the task lifecycle."""
        return _STATUS_RANK[self]


class AssignmentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    REASSIGNED = "REASSIGNED"
    CANCELLED = "CANCELLED"


class HistoryAction(str, Enum):
    CREATED = "CREATED"
    REASSIGNED = "REASSIGNED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"
    STATUS_CHANGED = "STATUS_CHANGED"


_PRIORITY_RANK: dict[Priority, int] = {
    Priority.LOW: 1,
    Priority.MEDIUM: 2,
    Priority.HIGH: 3,
    Priority.URGENT: 4,
}

_STATUS_RANK: dict[TaskStatus, int] = {
    TaskStatus.UNASSIGNED: 1,
    TaskStatus.ASSIGNED: 2,
    TaskStatus.IN_PROGRESS: 3,
    TaskStatus.COMPLETED: 4,
}
