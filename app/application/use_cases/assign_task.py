"""AssignTaskUseCase / ReassignTaskUseCase — dispatching tasks to technicians."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime

from app.application.ports.assignment_history_repo import AssignmentHistoryRepository
from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.clock import Clock
from app.application.ports.task_repo import TaskRepository
from app.application.ports.technician_directory import TechnicianDirectory
from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.manage_tasks import require_task
from app.domain.entities.assignment import Assignment
from app.domain.entities.assignment_history import AssignmentHistory
from app.domain.errors import InvalidAssignmentError, ValidationError
from app.domain.policies.dispatch_rules import DispatchRules
from app.domain.value_objects.enums import TaskStatus

logger = logging.getLogger(__name__)


@dataclass
class AssignmentResult:
    assignment_id: int
    task_id: int
    technician_id: int
    assigned_at: datetime
    assigned_by: str
    task_status: TaskStatus
    workload: int
    workload_warning: str | None = None


@dataclass
class ReassignmentResult:
    assignment_id: int
    task_id: int
    previous_technician_id: int | None
    previous_assignment_id: int | None
    new_technician_id: int
    reassigned_at: datetime
    reassigned_by: str
    reason: str | None
    task_status: TaskStatus
    workload: int
    workload_warning: str | None = None
    history: list[AssignmentHistory] = field(default_factory=list)


class _DispatchBase:
    """Shared wiring and write steps of assignment and reassignment."""

    def __init__(
        self,
        task_repo: TaskRepository,
        assignment_repo: AssignmentRepository,
        history_repo: AssignmentHistoryRepository,
        directory: TechnicianDirectory,
        uow: UnitOfWork,
        clock: Clock,
        rules: DispatchRules | None = None,
    ):
        self._tasks = task_repo
        self._assignments = assignment_repo
        self._history = history_repo
        self._directory = directory
        self._uow = uow
        self._clock = clock
        self._rules = rules or DispatchRules()

    async def _supersede(self, task_id: int, reason: str) -> Assignment | None:
        """Mark the task's ACTIVE assignment as REASSIGNED, if there is one."""
        previous = await self._assignments.get_active_for_task(task_id)
        if previous is None:
            return None
        previous.mark_reassigned(reason)
        await self._assignments.update(previous)
        logger.info("Marked previous assignment %s as REASSIGNED", previous.id)
        return previous

    async def _create_assignment(
        self, task_id: int, technician_id: int, assigned_by: str, now: datetime
    ) -> Assignment:
        assignment = Assignment(
            id=None,
            task_id=task_id,
            technician_id=technician_id,
            assigned_at=now,
            assigned_by=assigned_by,
        )
        await self._assignments.save(assignment)
        logger.info("Created assignment %s (task %s → technician %s)",
                    assignment.id, task_id, technician_id)
        return assignment


class AssignTaskUseCase(_DispatchBase):
    """Assign an UNASSIGNED or ASSIGNED task to a technician."""

    async def execute(
        self, task_id: int, technician_id: int, assigned_by: str
    ) -> AssignmentResult:
        logger.info("Assigning task %s to technician %s by %s",
                    task_id, technician_id, assigned_by)

        async with self._uow.transaction():
            task = await require_task(self._tasks, task_id)
            if not task.can_be_assigned():
                raise InvalidAssignmentError(
                    f"Task {task_id} cannot be assigned. Current status: {task.status.value}. "
                    "Only UNASSIGNED or ASSIGNED tasks can be assigned."
                )

            # Directory lookup happens before the first write.
            await self._directory.validate(technician_id)

            now = self._clock.now()
            previous = await self._supersede(
                task_id, f"Reassigned to technician {technician_id}"
            )
            assignment = await self._create_assignment(task_id, technician_id, assigned_by, now)

            if previous is None:
                entry = AssignmentHistory.for_creation(assignment, assigned_by, now)
            else:
                entry = AssignmentHistory.for_reassignment(
                    assignment,
                    previous.technician_id,
                    assigned_by,
                    now,
                    f"Reassigned from technician {previous.technician_id} to {technician_id}",
                )
            await self._history.append(entry)

            task.assign_to(technician_id)
            await self._tasks.update(task)

            workload = await self._assignments.count_active_for_technician(technician_id)

        logger.info("Technician %s workload: %d active assignments", technician_id, workload)
        warning = self._rules.workload_warning(workload)
        if warning:
            logger.warning("Task %s: %s", task_id, warning)

        return AssignmentResult(
            assignment_id=assignment.id,
            task_id=task.id,
            technician_id=technician_id,
            assigned_at=assignment.assigned_at,
            assigned_by=assigned_by,
            task_status=task.status,
            workload=workload,
            workload_warning=warning,
        )


class ReassignTaskUseCase(_DispatchBase):
    """Move an ASSIGNED or IN_PROGRESS task to a different technician.

    Redirecting work that is already underway needs a reason, which lands
    on both the superseded assignment and the audit row.
    """

    async def execute(
        self,
        task_id: int,
        new_technician_id: int,
        reason: str | None,
        reassigned_by: str,
    ) -> ReassignmentResult:
        logger.info("Reassigning task %s to technician %s by %s",
                    task_id, new_technician_id, reassigned_by)
        reason = reason.strip() if reason and reason.strip() else None

        async with self._uow.transaction():
            task = await require_task(self._tasks, task_id)
            if task.is_completed():
                raise InvalidAssignmentError(
                    f"Task {task_id} cannot be reassigned. Current status: {task.status.value}. "
                    "Only ASSIGNED or IN_PROGRESS tasks can be reassigned."
                )
            if not task.can_be_reassigned() or task.assigned_technician_id is None:
                raise InvalidAssignmentError(
                    f"Task {task_id} has no assigned technician. Use assign instead."
                )
            if task.is_in_progress() and reason is None and self._rules.reason_required_in_progress:
                raise ValidationError(
                    f"Task {task_id} is IN_PROGRESS. A reason is required for "
                    "reassigning IN_PROGRESS tasks."
                )

            await self._directory.validate(new_technician_id)

            now = self._clock.now()
            previous_technician_id = task.assigned_technician_id
            previous = await self._supersede(
                task_id, reason or f"Reassigned to technician {new_technician_id}"
            )
            assignment = await self._create_assignment(
                task_id, new_technician_id, reassigned_by, now
            )
            await self._history.append(
                AssignmentHistory.for_reassignment(
                    assignment,
                    previous_technician_id,
                    reassigned_by,
                    now,
                    reason
                    or f"Reassigned from technician {previous_technician_id} to {new_technician_id}",
                )
            )

            task.assign_to(new_technician_id)
            await self._tasks.update(task)

            workload = await self._assignments.count_active_for_technician(new_technician_id)
            history = await self._history.get_by_task(task_id)

        logger.info("Technician %s workload: %d active assignments", new_technician_id, workload)
        warning = self._rules.workload_warning(workload, subject="New technician")
        if warning:
            logger.warning("Task %s: %s", task_id, warning)

        return ReassignmentResult(
            assignment_id=assignment.id,
            task_id=task.id,
            previous_technician_id=previous_technician_id,
            previous_assignment_id=previous.id if previous else None,
            new_technician_id=new_technician_id,
            reassigned_at=assignment.assigned_at,
            reassigned_by=reassigned_by,
            reason=reason,
            task_status=task.status,
            workload=workload,
            workload_warning=warning,
            history=history,
        )
