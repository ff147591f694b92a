"""Technician-side operations: start work, complete work, list own tasks."""

from __future__ import annotations

import logging
from datetime import datetime

from app.application.ports.assignment_history_repo import AssignmentHistoryRepository
from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.clock import Clock
from app.application.ports.task_repo import TaskRepository
from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.manage_tasks import require_task
from app.domain.entities.assignment import Assignment
from app.domain.entities.assignment_history import AssignmentHistory
from app.domain.entities.service_task import ServiceTask
from app.domain.errors import InvalidStatusTransitionError, ValidationError
from app.domain.policies.technician_visibility import (
    TechnicianTask,
    is_visible,
    order_for_technician,
    parse_status_filter,
)
from app.domain.value_objects.enums import TaskStatus

logger = logging.getLogger(__name__)


def _technician_actor(technician_id: int) -> str:
    return f"technician:{technician_id}"


class _TechnicianActionBase:
    def __init__(
        self,
        task_repo: TaskRepository,
        assignment_repo: AssignmentRepository,
        history_repo: AssignmentHistoryRepository,
        uow: UnitOfWork,
        clock: Clock,
    ):
        self._tasks = task_repo
        self._assignments = assignment_repo
        self._history = history_repo
        self._uow = uow
        self._clock = clock

    async def _require_holder(self, task: ServiceTask, technician_id: int) -> Assignment:
        """Only the technician holding the ACTIVE assignment may act on a task."""
        active = await self._assignments.get_active_for_task(task.id)
        if active is None or active.technician_id != technician_id:
            logger.warning("Technician %s is not assigned to task %s", technician_id, task.id)
            raise InvalidStatusTransitionError(
                f"Technician {technician_id} is not assigned to task {task.id}"
            )
        return active


def _parse_status(raw: TaskStatus | str) -> TaskStatus | None:
    if isinstance(raw, TaskStatus):
        return raw
    try:
        return TaskStatus(str(raw).strip().upper())
    except ValueError:
        return None


class UpdateTaskStatusUseCase(_TechnicianActionBase):
    """ASSIGNED → IN_PROGRESS by the assigned technician. Nothing else."""

    async def execute(
        self, task_id: int, new_status: TaskStatus | str, technician_id: int
    ) -> ServiceTask:
        logger.info("Technician %s requests task %s → %s", technician_id, task_id, new_status)

        async with self._uow.transaction():
            task = await require_task(self._tasks, task_id)
            active = await self._require_holder(task, technician_id)

            target = _parse_status(new_status)
            if task.status != TaskStatus.ASSIGNED or target != TaskStatus.IN_PROGRESS:
                raise InvalidStatusTransitionError(
                    f"Invalid status transition from {task.status.value} to {new_status}. "
                    "Only ASSIGNED → IN_PROGRESS is allowed."
                )

            now = self._clock.now()
            task.start(now)
            await self._tasks.update(task)
            await self._history.append(
                AssignmentHistory.for_status_change(
                    active,
                    _technician_actor(technician_id),
                    now,
                    f"{TaskStatus.ASSIGNED.value} -> {TaskStatus.IN_PROGRESS.value}",
                )
            )

        logger.info("Task %s started by technician %s", task_id, technician_id)
        return task


class CompleteTaskUseCase(_TechnicianActionBase):
    """IN_PROGRESS → COMPLETED with a work summary; closes the active assignment."""

    async def execute(self, task_id: int, technician_id: int, work_summary: str) -> ServiceTask:
        logger.info("Technician %s completing task %s", technician_id, task_id)

        async with self._uow.transaction():
            task = await require_task(self._tasks, task_id)
            active = await self._require_holder(task, technician_id)
            if not task.is_in_progress():
                raise InvalidStatusTransitionError(
                    f"Task {task_id} must be IN_PROGRESS to be completed. "
                    f"Current status: {task.status.value}"
                )
            summary = (work_summary or "").strip()
            if not summary:
                raise ValidationError("Work summary is required to complete a task")

            now = self._clock.now()
            task.complete(now, summary)
            await self._tasks.update(task)

            active.complete()
            await self._assignments.update(active)
            await self._history.append(
                AssignmentHistory.for_completion(active, _technician_actor(technician_id), now)
            )

        logger.info("Task %s completed by technician %s", task_id, technician_id)
        return task


class GetTechnicianTasksUseCase:
    """Tasks a technician holds or has held, minus completions from earlier days."""

    def __init__(self, task_repo: TaskRepository, assignment_repo: AssignmentRepository, clock: Clock):
        self._tasks = task_repo
        self._assignments = assignment_repo
        self._clock = clock

    async def execute(self, technician_id: int, status_filter: str | None = None) -> list[TechnicianTask]:
        status = parse_status_filter(status_filter)
        today = self._clock.now().date()

        # Every task this technician ever held, whatever became of the assignment,
        # and when it last reached them.
        assigned_at: dict[int, datetime] = {}
        for a in await self._assignments.get_by_technician(technician_id):
            if a.task_id not in assigned_at or a.assigned_at > assigned_at[a.task_id]:
                assigned_at[a.task_id] = a.assigned_at

        tasks = {t.id: t for t in await self._tasks.get_by_ids(list(assigned_at))}
        # Tasks pointing at the technician without an assignment row (seeded data).
        for t in await self._tasks.get_by_technician(technician_id):
            tasks.setdefault(t.id, t)

        visible = [t for t in tasks.values() if is_visible(t, today, status)]

        entries = [
            TechnicianTask(task=t, assigned_at=assigned_at.get(t.id, t.created_at))
            for t in visible
        ]
        logger.info(
            "Technician %s: %d of %d tasks visible (filter=%s)",
            technician_id, len(entries), len(tasks), status_filter or "all",
        )
        return order_for_technician(entries)
