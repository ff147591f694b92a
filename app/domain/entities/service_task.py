"""ServiceTask entity — a unit of field work."""

from dataclasses import dataclass
from datetime import date, datetime

from app.domain.value_objects.enums import Priority, TaskStatus


@dataclass
class ServiceTask:
    id: int | None
    title: str
    client_address: str
    priority: Priority
    created_by: str
    created_at: datetime
    description: str | None = None
    estimated_duration: int | None = None
    status: TaskStatus = TaskStatus.UNASSIGNED
    assigned_technician_id: int | None = None
    started_at: datetime | None = None
    completed_at: datetime | None = None
    work_summary: str | None = None

    def can_be_assigned(self) -> bool:
        return self.status in (TaskStatus.UNASSIGNED, TaskStatus.ASSIGNED)

    def can_be_reassigned(self) -> bool:
        return self.status in (TaskStatus.ASSIGNED, TaskStatus.IN_PROGRESS)

    def is_in_progress(self) -> bool:
        return self.status == TaskStatus.IN_PROGRESS

    def is_completed(self) -> bool:
        return self.status == TaskStatus.COMPLETED

    def assign_to(self, technician_id: int) -> None:
        """Hand the task to a technician who has not started it yet.

        Reassigning work that was already underway puts it back to ASSIGNED,
        so the start timestamp belongs to the previous technician and is dropped.
        """
        self.assigned_technician_id = technician_id
        self.status = TaskStatus.ASSIGNED
        self.started_at = None

    def start(self, now: datetime) -> None:
        self.status = TaskStatus.IN_PROGRESS
        self.started_at = now

    def complete(self, now: datetime, work_summary: str) -> None:
        self.status = TaskStatus.COMPLETED
        self.completed_at = now
        self.work_summary = work_summary

    def completed_before(self, day: date) -> bool:
        """True when the task was completed on a calendar day earlier than *day*."""
        return (
            self.is_completed()
            and self.completed_at is not None
            and self.completed_at.date() < day
        )
