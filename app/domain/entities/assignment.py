"""Assignment entity — the current technician-task relationship."""

from dataclasses import dataclass
from datetime import datetime

from app.domain.value_objects.enums import AssignmentStatus


@dataclass
class Assignment:
    id: int | None
    task_id: int
    technician_id: int
    assigned_at: datetime
    assigned_by: str
    status: AssignmentStatus = AssignmentStatus.ACTIVE
    reason: str | None = None

    def is_active(self) -> bool:
        return self.status == AssignmentStatus.ACTIVE

    def mark_reassigned(self, reason: str) -> None:
        if self.is_active():
            self.status = AssignmentStatus.REASSIGNED
            self.reason = reason

    def complete(self) -> None:
        if self.is_active():
            self.status = AssignmentStatus.COMPLETED

    def cancel(self, reason: str) -> None:
        if self.is_active():
            self.status = AssignmentStatus.CANCELLED
            self.reason = reason
