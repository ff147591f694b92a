"""AssignmentHistory entity — one append-only audit row per dispatch action."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from app.domain.entities.assignment import Assignment
from app.domain.value_objects.enums import HistoryAction


@dataclass(frozen=True)
class AssignmentHistory:
    id: int | None
    assignment_id: int
    task_id: int
    technician_id: int
    action: HistoryAction
    action_by: str
    action_at: datetime
    previous_technician_id: int | None = None
    reason: str | None = None

    @classmethod
    def for_creation(
        cls, assignment: Assignment, action_by: str, at: datetime
    ) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            action=HistoryAction.CREATED,
            action_by=action_by,
            action_at=at,
        )

    @classmethod
    def for_reassignment(
        cls,
        assignment: Assignment,
        previous_technician_id: int | None,
        action_by: str,
        at: datetime,
        reason: str,
    ) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            previous_technician_id=previous_technician_id,
            action=HistoryAction.REASSIGNED,
            action_by=action_by,
            action_at=at,
            reason=reason,
        )

    @classmethod
    def for_status_change(
        cls, assignment: Assignment, action_by: str, at: datetime, reason: str
    ) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            action=HistoryAction.STATUS_CHANGED,
            action_by=action_by,
            action_at=at,
            reason=reason,
        )

    @classmethod
    def for_completion(
        cls, assignment: Assignment, action_by: str, at: datetime
    ) -> AssignmentHistory:
        return cls(
            id=None,
            assignment_id=assignment.id,
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            action=HistoryAction.COMPLETED,
            action_by=action_by,
            action_at=at,
        )
