"""TechnicianVisibilityPolicy — which tasks a technician sees, and in what order."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime

from app.domain.entities.service_task import ServiceTask
from app.domain.value_objects.enums import TaskStatus

STATUS_FILTERS: dict[str, TaskStatus] = {
    "assigned": TaskStatus.ASSIGNED,
    "in_progress": TaskStatus.IN_PROGRESS,
    "completed": TaskStatus.COMPLETED,
}


@dataclass
class TechnicianTask:
    """A task as listed for its technician, with the time it reached them."""

    task: ServiceTask
    assigned_at: datetime


def parse_status_filter(raw: str | None) -> TaskStatus | None:
    """Map a technician-facing filter string to a status.

    ``None``, empty, ``"all"`` and anything unrecognized mean "no filter".
    """
    if not raw:
        return None
    return STATUS_FILTERS.get(raw.strip().lower())


def is_visible(task: ServiceTask, today: date, status: TaskStatus | None = None) -> bool:
    """Completed work from earlier days is hidden; everything else is shown.

    Same-day completions stay visible so the technician can see what they
    finished today. Unfinished tasks from earlier days are never hidden.
    """
    if status is not None and task.status != status:
        return False
    return not task.completed_before(today)


def order_for_technician(entries: list[TechnicianTask]) -> list[TechnicianTask]:
    """Most urgent first; within a priority, the oldest assignment first."""
    return sorted(
        entries,
        key=lambda e: (-e.task.priority.rank, e.assigned_at, e.task.id or 0),
    )
