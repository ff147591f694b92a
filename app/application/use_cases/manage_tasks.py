"""Task creation, dispatcher listing and read-only task views."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field

from app.application.ports.assignment_history_repo import AssignmentHistoryRepository
from app.application.ports.clock import Clock
from app.application.ports.task_repo import TaskRepository
from app.application.ports.unit_of_work import UnitOfWork
from app.domain.entities.assignment_history import AssignmentHistory
from app.domain.entities.service_task import ServiceTask
from app.domain.errors import TaskNotFoundError, ValidationError
from app.domain.value_objects.enums import Priority, TaskStatus
from app.domain.value_objects.task_query import MAX_PAGE_SIZE, TaskQuery

logger = logging.getLogger(__name__)

TITLE_MIN_LENGTH = 3
TITLE_MAX_LENGTH = 200


async def require_task(tasks: TaskRepository, task_id: int) -> ServiceTask:
    task = await tasks.get_by_id(task_id)
    if task is None:
        raise TaskNotFoundError(task_id)
    return task


@dataclass
class TaskInput:
    """Dispatcher-supplied fields of a new task."""

    title: str
    client_address: str
    priority: Priority | str
    description: str | None = None
    estimated_duration: int | None = None


@dataclass
class TaskListResult:
    tasks: list[ServiceTask]
    page: int
    page_size: int
    total_elements: int
    total_pages: int
    status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def first(self) -> bool:
        return self.page == 0

    @property
    def last(self) -> bool:
        return self.page + 1 >= self.total_pages


def _parse_priority(raw: Priority | str | None) -> Priority:
    if isinstance(raw, Priority):
        return raw
    if raw is None or not str(raw).strip():
        raise ValidationError("Priority is required")
    try:
        return Priority(str(raw).strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown priority: {raw}") from None


class CreateTaskUseCase:
    """Create an UNASSIGNED task on behalf of a dispatcher or admin."""

    def __init__(self, task_repo: TaskRepository, uow: UnitOfWork, clock: Clock):
        self._tasks = task_repo
        self._uow = uow
        self._clock = clock

    async def execute(self, data: TaskInput, created_by: str) -> ServiceTask:
        title = (data.title or "").strip()
        if not TITLE_MIN_LENGTH <= len(title) <= TITLE_MAX_LENGTH:
            raise ValidationError(
                f"Title must be between {TITLE_MIN_LENGTH} and {TITLE_MAX_LENGTH} characters"
            )
        address = (data.client_address or "").strip()
        if not address:
            raise ValidationError("Client address is required")
        priority = _parse_priority(data.priority)
        if data.estimated_duration is not None and data.estimated_duration <= 0:
            raise ValidationError("Estimated duration must be positive")

        logger.info("Creating task '%s' by %s", title, created_by)
        task = ServiceTask(
            id=None,
            title=title,
            description=data.description,
            client_address=address,
            priority=priority,
            estimated_duration=data.estimated_duration,
            created_by=created_by,
            created_at=self._clock.now(),
        )
        async with self._uow.transaction():
            await self._tasks.save(task)

        logger.info("Task created with id=%s", task.id)
        return task


class ListTasksUseCase:
    """Filtered, sorted, paginated task list plus global status counters."""

    def __init__(self, task_repo: TaskRepository):
        self._tasks = task_repo

    async def execute(self, query: TaskQuery) -> TaskListResult:
        if query.page < 0:
            raise ValidationError("Page number must be 0 or greater")
        if not 1 <= query.page_size <= MAX_PAGE_SIZE:
            raise ValidationError(f"Page size must be between 1 and {MAX_PAGE_SIZE}")

        logger.info(
            "Listing tasks: status=%s priority=%s search=%r sort=%s desc=%s page=%d size=%d",
            query.status, query.priority, query.search, query.sort_by.value,
            query.descending, query.page, query.page_size,
        )
        tasks, total = await self._tasks.find_by_filter(query)

        # Dashboard counters ignore the active filter.
        counts = {s.value: await self._tasks.count_by_status(s) for s in TaskStatus}

        return TaskListResult(
            tasks=tasks,
            page=query.page,
            page_size=query.page_size,
            total_elements=total,
            total_pages=math.ceil(total / query.page_size),
            status_counts=counts,
        )


class GetTaskUseCase:
    def __init__(self, task_repo: TaskRepository):
        self._tasks = task_repo

    async def execute(self, task_id: int) -> ServiceTask:
        return await require_task(self._tasks, task_id)


class GetTaskHistoryUseCase:
    """Audit trail of one task, newest first."""

    def __init__(self, task_repo: TaskRepository, history_repo: AssignmentHistoryRepository):
        self._tasks = task_repo
        self._history = history_repo

    async def execute(self, task_id: int) -> list[AssignmentHistory]:
        await require_task(self._tasks, task_id)
        return await self._history.get_by_task(task_id)
