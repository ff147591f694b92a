"""SQLAlchemy repository implementations."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import case, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.persistence.models import (
    AssignmentHistoryModel,
    AssignmentModel,
    ServiceTaskModel,
)
from app.application.ports.assignment_history_repo import AssignmentHistoryRepository
from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.task_repo import TaskRepository
from app.application.ports.unit_of_work import UnitOfWork
from app.domain.entities.assignment import Assignment
from app.domain.entities.assignment_history import AssignmentHistory
from app.domain.entities.service_task import ServiceTask
from app.domain.value_objects.enums import (
    AssignmentStatus,
    HistoryAction,
    Priority,
    TaskStatus,
)
from app.domain.value_objects.task_query import SortField, TaskQuery

# ─── Mappers ─────────────────────────────────────────────────────────


def _task_to_domain(m: ServiceTaskModel) -> ServiceTask:
    return ServiceTask(
        id=m.id,
        title=m.title,
        description=m.description,
        client_address=m.client_address,
        priority=Priority(m.priority),
        estimated_duration=m.estimated_duration,
        status=TaskStatus(m.status),
        assigned_technician_id=m.assigned_technician_id,
        created_by=m.created_by,
        created_at=m.created_at,
        started_at=m.started_at,
        completed_at=m.completed_at,
        work_summary=m.work_summary,
    )


def _assignment_to_domain(m: AssignmentModel) -> Assignment:
    return Assignment(
        id=m.id,
        task_id=m.task_id,
        technician_id=m.technician_id,
        assigned_at=m.assigned_at,
        assigned_by=m.assigned_by,
        status=AssignmentStatus(m.status),
        reason=m.reason,
    )


def _history_to_domain(m: AssignmentHistoryModel) -> AssignmentHistory:
    return AssignmentHistory(
        id=m.id,
        assignment_id=m.assignment_id,
        task_id=m.task_id,
        technician_id=m.technician_id,
        previous_technician_id=m.previous_technician_id,
        action=HistoryAction(m.action),
        action_by=m.action_by,
        action_at=m.action_at,
        reason=m.reason,
    )


# ─── Sorting ─────────────────────────────────────────────────────────

_priority_rank = case(
    {p.value: p.rank for p in Priority}, value=ServiceTaskModel.priority
)
_status_rank = case(
    {s.value: s.rank for s in TaskStatus}, value=ServiceTaskModel.status
)


def _order_by(query: TaskQuery) -> list:
    """Total ordering so pages are stable; id is always the last tie-breaker."""
    def direction(col):
        return col.desc() if query.descending else col.asc()

    if query.sort_by == SortField.CREATED_AT:
        return [direction(ServiceTaskModel.created_at), direction(ServiceTaskModel.id)]
    primary = _status_rank if query.sort_by == SortField.STATUS else _priority_rank
    return [
        direction(primary),
        ServiceTaskModel.created_at.desc(),
        ServiceTaskModel.id.desc(),
    ]


def _like_pattern(term: str) -> str:
    """Case-insensitive substring pattern; LIKE wildcards in *term* match literally."""
    escaped = term.lower().replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _filters(query: TaskQuery) -> list:
    conditions = []
    if query.status is not None:
        conditions.append(ServiceTaskModel.status == query.status.value)
    if query.priority is not None:
        conditions.append(ServiceTaskModel.priority == query.priority.value)
    term = query.search_term
    if term is not None:
        pattern = _like_pattern(term)
        matches = [
            func.lower(ServiceTaskModel.title).like(pattern, escape="\\"),
            func.lower(ServiceTaskModel.client_address).like(pattern, escape="\\"),
        ]
        if query.search_id is not None:
            matches.append(ServiceTaskModel.id == query.search_id)
        conditions.append(or_(*matches))
    return conditions


# ─── Repositories ────────────────────────────────────────────────────


class SqlTaskRepository(TaskRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, task: ServiceTask) -> ServiceTask:
        m = ServiceTaskModel(
            title=task.title,
            description=task.description,
            client_address=task.client_address,
            priority=task.priority.value,
            estimated_duration=task.estimated_duration,
            status=task.status.value,
            assigned_technician_id=task.assigned_technician_id,
            created_by=task.created_by,
            created_at=task.created_at,
            started_at=task.started_at,
            completed_at=task.completed_at,
            work_summary=task.work_summary,
        )
        self._s.add(m)
        await self._s.flush()
        task.id = m.id
        return task

    async def update(self, task: ServiceTask) -> ServiceTask:
        await self._s.execute(
            update(ServiceTaskModel)
            .where(ServiceTaskModel.id == task.id)
            .values(
                status=task.status.value,
                assigned_technician_id=task.assigned_technician_id,
                started_at=task.started_at,
                completed_at=task.completed_at,
                work_summary=task.work_summary,
            )
        )
        await self._s.flush()
        return task

    async def get_by_id(self, task_id: int) -> ServiceTask | None:
        m = await self._s.get(ServiceTaskModel, task_id, populate_existing=True)
        return _task_to_domain(m) if m else None

    async def get_by_ids(self, task_ids: list[int]) -> list[ServiceTask]:
        if not task_ids:
            return []
        result = await self._s.execute(
            select(ServiceTaskModel)
            .where(ServiceTaskModel.id.in_(task_ids))
            .order_by(ServiceTaskModel.id)
        )
        return [_task_to_domain(m) for m in result.scalars()]

    async def get_by_technician(self, technician_id: int) -> list[ServiceTask]:
        result = await self._s.execute(
            select(ServiceTaskModel)
            .where(ServiceTaskModel.assigned_technician_id == technician_id)
            .order_by(ServiceTaskModel.id)
        )
        return [_task_to_domain(m) for m in result.scalars()]

    async def find_by_filter(self, query: TaskQuery) -> tuple[list[ServiceTask], int]:
        conditions = _filters(query)
        total = await self._s.scalar(
            select(func.count()).select_from(ServiceTaskModel).where(*conditions)
        )
        result = await self._s.execute(
            select(ServiceTaskModel)
            .where(*conditions)
            .order_by(*_order_by(query))
            .offset(query.offset)
            .limit(query.page_size)
        )
        return [_task_to_domain(m) for m in result.scalars()], total or 0

    async def count_by_status(self, status: TaskStatus) -> int:
        count = await self._s.scalar(
            select(func.count())
            .select_from(ServiceTaskModel)
            .where(ServiceTaskModel.status == status.value)
        )
        return count or 0


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, assignment: Assignment) -> Assignment:
        m = AssignmentModel(
            task_id=assignment.task_id,
            technician_id=assignment.technician_id,
            assigned_at=assignment.assigned_at,
            assigned_by=assignment.assigned_by,
            status=assignment.status.value,
            reason=assignment.reason,
        )
        self._s.add(m)
        await self._s.flush()
        assignment.id = m.id
        return assignment

    async def update(self, assignment: Assignment) -> Assignment:
        await self._s.execute(
            update(AssignmentModel)
            .where(AssignmentModel.id == assignment.id)
            .values(status=assignment.status.value, reason=assignment.reason)
        )
        await self._s.flush()
        return assignment

    async def get_by_task(self, task_id: int) -> list[Assignment]:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(AssignmentModel.task_id == task_id)
            .order_by(AssignmentModel.assigned_at, AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def get_by_technician(self, technician_id: int) -> list[Assignment]:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(AssignmentModel.technician_id == technician_id)
            .order_by(AssignmentModel.assigned_at, AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def get_by_status(self, status: AssignmentStatus) -> list[Assignment]:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(AssignmentModel.status == status.value)
            .order_by(AssignmentModel.id)
        )
        return [_assignment_to_domain(m) for m in result.scalars()]

    async def get_active_for_task(self, task_id: int) -> Assignment | None:
        result = await self._s.execute(
            select(AssignmentModel)
            .where(
                AssignmentModel.task_id == task_id,
                AssignmentModel.status == AssignmentStatus.ACTIVE.value,
            )
            .with_for_update()
        )
        m = result.scalar_one_or_none()
        return _assignment_to_domain(m) if m else None

    async def count_active_for_technician(self, technician_id: int) -> int:
        count = await self._s.scalar(
            select(func.count())
            .select_from(AssignmentModel)
            .where(
                AssignmentModel.technician_id == technician_id,
                AssignmentModel.status == AssignmentStatus.ACTIVE.value,
            )
        )
        return count or 0


class SqlAssignmentHistoryRepository(AssignmentHistoryRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def append(self, entry: AssignmentHistory) -> AssignmentHistory:
        m = AssignmentHistoryModel(
            assignment_id=entry.assignment_id,
            task_id=entry.task_id,
            technician_id=entry.technician_id,
            previous_technician_id=entry.previous_technician_id,
            action=entry.action.value,
            action_by=entry.action_by,
            action_at=entry.action_at,
            reason=entry.reason,
        )
        self._s.add(m)
        await self._s.flush()
        return _history_to_domain(m)

    async def get_by_task(self, task_id: int) -> list[AssignmentHistory]:
        result = await self._s.execute(
            select(AssignmentHistoryModel)
            .where(AssignmentHistoryModel.task_id == task_id)
            .order_by(AssignmentHistoryModel.action_at.desc(), AssignmentHistoryModel.id.desc())
        )
        return [_history_to_domain(m) for m in result.scalars()]

    async def get_by_technician(self, technician_id: int) -> list[AssignmentHistory]:
        result = await self._s.execute(
            select(AssignmentHistoryModel)
            .where(AssignmentHistoryModel.technician_id == technician_id)
            .order_by(AssignmentHistoryModel.action_at.desc(), AssignmentHistoryModel.id.desc())
        )
        return [_history_to_domain(m) for m in result.scalars()]


class SqlUnitOfWork(UnitOfWork):
    """Commits or rolls back the request session as one unit."""

    def __init__(self, session: AsyncSession):
        self._s = session

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        try:
            yield
        except BaseException:
            await self._s.rollback()
            raise
        else:
            await self._s.commit()
