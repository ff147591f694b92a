"""Pytest configuration and shared fixtures: in-memory fakes of every port."""

from __future__ import annotations

import copy
from contextlib import asynccontextmanager
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

import pytest

from app.application.ports.assignment_history_repo import AssignmentHistoryRepository
from app.application.ports.assignment_repo import AssignmentRepository
from app.application.ports.clock import Clock
from app.application.ports.task_repo import TaskRepository
from app.application.ports.technician_directory import TechnicianDirectory
from app.application.ports.unit_of_work import UnitOfWork
from app.application.use_cases.assign_task import AssignTaskUseCase, ReassignTaskUseCase
from app.application.use_cases.manage_tasks import (
    CreateTaskUseCase,
    GetTaskHistoryUseCase,
    ListTasksUseCase,
    TaskInput,
)
from app.application.use_cases.technician_tasks import (
    CompleteTaskUseCase,
    GetTechnicianTasksUseCase,
    UpdateTaskStatusUseCase,
)
from app.domain.entities.assignment import Assignment
from app.domain.entities.assignment_history import AssignmentHistory
from app.domain.entities.service_task import ServiceTask
from app.domain.entities.technician import TechnicianInfo
from app.domain.errors import TechnicianNotFoundError
from app.domain.policies.dispatch_rules import DispatchRules
from app.domain.value_objects.enums import AssignmentStatus, TaskStatus
from app.domain.value_objects.task_query import SortField, TaskQuery

START = datetime(2026, 3, 10, 9, 0)

# ─── In-memory fakes ────────────────────────────────────────────────


class FakeStore:
    """Rows shared by the fake repositories; copied in and out like a database."""

    def __init__(self):
        self.tasks: dict[int, ServiceTask] = {}
        self.assignments: dict[int, Assignment] = {}
        self.history: list[AssignmentHistory] = []

    def snapshot(self):
        return copy.deepcopy((self.tasks, self.assignments, self.history))

    def restore(self, snap) -> None:
        self.tasks, self.assignments, self.history = snap


class FakeTaskRepo(TaskRepository):
    def __init__(self, store: FakeStore):
        self._store = store

    async def save(self, task):
        task.id = len(self._store.tasks) + 1
        self._store.tasks[task.id] = replace(task)
        return task

    async def update(self, task):
        self._store.tasks[task.id] = replace(task)
        return task

    async def get_by_id(self, task_id):
        t = self._store.tasks.get(task_id)
        return replace(t) if t else None

    async def get_by_ids(self, task_ids):
        return [replace(self._store.tasks[i]) for i in sorted(task_ids) if i in self._store.tasks]

    async def get_by_technician(self, technician_id):
        return [
            replace(t) for t in self._store.tasks.values()
            if t.assigned_technician_id == technician_id
        ]

    async def find_by_filter(self, query: TaskQuery):
        rows = list(self._store.tasks.values())
        if query.status is not None:
            rows = [t for t in rows if t.status == query.status]
        if query.priority is not None:
            rows = [t for t in rows if t.priority == query.priority]
        term = query.search_term
        if term is not None:
            needle = term.lower()
            rows = [
                t for t in rows
                if needle in t.title.lower()
                or needle in t.client_address.lower()
                or t.id == query.search_id
            ]

        sign = -1 if query.descending else 1
        if query.sort_by == SortField.CREATED_AT:
            rows.sort(key=lambda t: (sign * t.created_at.timestamp(), sign * t.id))
        else:
            if query.sort_by == SortField.STATUS:
                primary = lambda t: t.status.rank  # noqa: E731
            else:
                primary = lambda t: t.priority.rank  # noqa: E731
            rows.sort(key=lambda t: (sign * primary(t), -t.created_at.timestamp(), -t.id))

        page = rows[query.offset:query.offset + query.page_size]
        return [replace(t) for t in page], len(rows)

    async def count_by_status(self, status):
        return sum(1 for t in self._store.tasks.values() if t.status == status)


class FakeAssignmentRepo(AssignmentRepository):
    def __init__(self, store: FakeStore):
        self._store = store

    async def save(self, assignment):
        assignment.id = len(self._store.assignments) + 1
        self._store.assignments[assignment.id] = replace(assignment)
        return assignment

    async def update(self, assignment):
        self._store.assignments[assignment.id] = replace(assignment)
        return assignment

    async def get_by_task(self, task_id):
        return [replace(a) for a in self._store.assignments.values() if a.task_id == task_id]

    async def get_by_technician(self, technician_id):
        return [
            replace(a) for a in self._store.assignments.values()
            if a.technician_id == technician_id
        ]

    async def get_by_status(self, status):
        return [replace(a) for a in self._store.assignments.values() if a.status == status]

    async def get_active_for_task(self, task_id):
        return next(
            (replace(a) for a in self._store.assignments.values()
             if a.task_id == task_id and a.status == AssignmentStatus.ACTIVE),
            None,
        )

    async def count_active_for_technician(self, technician_id):
        return sum(
            1 for a in self._store.assignments.values()
            if a.technician_id == technician_id and a.status == AssignmentStatus.ACTIVE
        )


class FakeHistoryRepo(AssignmentHistoryRepository):
    def __init__(self, store: FakeStore):
        self._store = store

    async def append(self, entry):
        saved = replace(entry, id=len(self._store.history) + 1)
        self._store.history.append(saved)
        return saved

    async def get_by_task(self, task_id):
        rows = [h for h in self._store.history if h.task_id == task_id]
        return sorted(rows, key=lambda h: (h.action_at, h.id), reverse=True)

    async def get_by_technician(self, technician_id):
        rows = [h for h in self._store.history if h.technician_id == technician_id]
        return sorted(rows, key=lambda h: (h.action_at, h.id), reverse=True)


class FakeUnitOfWork(UnitOfWork):
    """Restores the store to its state at the start of a failed block."""

    def __init__(self, store: FakeStore):
        self._store = store
        self.commits = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def transaction(self):
        snap = self._store.snapshot()
        try:
            yield
        except BaseException:
            self._store.restore(snap)
            self.rollbacks += 1
            raise
        else:
            self.commits += 1


class FakeDirectory(TechnicianDirectory):
    def __init__(self, technicians: dict[int, TechnicianInfo] | None = None):
        self.technicians = technicians if technicians is not None else {
            101: TechnicianInfo(101, "Alice Tech", "ACTIVE", "TECHNICIAN"),
            102: TechnicianInfo(102, "Bob Tech", "ACTIVE", "TECHNICIAN"),
            103: TechnicianInfo(103, "Carol Tech", "ACTIVE", "TECHNICIAN"),
            104: TechnicianInfo(104, "Dan Tech", "ACTIVE", "TECHNICIAN"),
            105: TechnicianInfo(105, "Eve Former", "INACTIVE", "TECHNICIAN"),
        }
        self.unavailable = False
        self.fail_open = True
        self.validated: list[int] = []

    async def validate(self, technician_id):
        self.validated.append(technician_id)
        if self.unavailable:
            if self.fail_open:
                return
            raise TechnicianNotFoundError(technician_id, TechnicianNotFoundError.UNAVAILABLE)
        info = self.technicians.get(technician_id)
        if info is None:
            raise TechnicianNotFoundError(technician_id)
        if not info.is_active():
            raise TechnicianNotFoundError(technician_id, TechnicianNotFoundError.NOT_ACTIVE)

    async def get_info(self, technician_id):
        if self.unavailable:
            return None
        return self.technicians.get(technician_id)


class FixedClock(Clock):
    def __init__(self, start: datetime = START):
        self.current = start

    def now(self):
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


@dataclass
class Dispatch:
    """Fakes wired together, with shortcuts for building use cases."""

    store: FakeStore
    tasks: FakeTaskRepo
    assignments: FakeAssignmentRepo
    history: FakeHistoryRepo
    uow: FakeUnitOfWork
    directory: FakeDirectory
    clock: FixedClock

    def create_uc(self) -> CreateTaskUseCase:
        return CreateTaskUseCase(self.tasks, self.uow, self.clock)

    def list_uc(self) -> ListTasksUseCase:
        return ListTasksUseCase(self.tasks)

    def history_uc(self) -> GetTaskHistoryUseCase:
        return GetTaskHistoryUseCase(self.tasks, self.history)

    def assign_uc(self, rules: DispatchRules | None = None) -> AssignTaskUseCase:
        return AssignTaskUseCase(
            self.tasks, self.assignments, self.history,
            self.directory, self.uow, self.clock, rules,
        )

    def reassign_uc(self, rules: DispatchRules | None = None) -> ReassignTaskUseCase:
        return ReassignTaskUseCase(
            self.tasks, self.assignments, self.history,
            self.directory, self.uow, self.clock, rules,
        )

    def status_uc(self) -> UpdateTaskStatusUseCase:
        return UpdateTaskStatusUseCase(
            self.tasks, self.assignments, self.history, self.uow, self.clock
        )

    def complete_uc(self) -> CompleteTaskUseCase:
        return CompleteTaskUseCase(
            self.tasks, self.assignments, self.history, self.uow, self.clock
        )

    def technician_tasks_uc(self) -> GetTechnicianTasksUseCase:
        return GetTechnicianTasksUseCase(self.tasks, self.assignments, self.clock)

    async def new_task(self, title="Repair HVAC System", priority="HIGH",
                       address="12 Elm St, Springfield") -> ServiceTask:
        return await self.create_uc().execute(
            TaskInput(title=title, client_address=address, priority=priority),
            created_by="dispatcher@fsm.com",
        )

    def active_assignments(self, task_id: int) -> list[Assignment]:
        return [
            a for a in self.store.assignments.values()
            if a.task_id == task_id and a.status == AssignmentStatus.ACTIVE
        ]

    def stored_task(self, task_id: int) -> ServiceTask:
        return self.store.tasks[task_id]

    def task_status(self, task_id: int) -> TaskStatus:
        return self.store.tasks[task_id].status


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def dispatch(clock):
    store = FakeStore()
    return Dispatch(
        store=store,
        tasks=FakeTaskRepo(store),
        assignments=FakeAssignmentRepo(store),
        history=FakeHistoryRepo(store),
        uow=FakeUnitOfWork(store),
        directory=FakeDirectory(),
        clock=clock,
    )
