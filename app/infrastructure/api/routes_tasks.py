"""Task endpoints — creation, dispatcher list, assignment and technician actions."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from app.application.use_cases.assign_task import AssignTaskUseCase, ReassignTaskUseCase
from app.application.use_cases.manage_tasks import (
    CreateTaskUseCase,
    GetTaskHistoryUseCase,
    GetTaskUseCase,
    ListTasksUseCase,
    TaskInput,
)
from app.application.use_cases.technician_tasks import (
    CompleteTaskUseCase,
    UpdateTaskStatusUseCase,
)
from app.domain.errors import ValidationError
from app.domain.value_objects.enums import Priority, TaskStatus
from app.domain.value_objects.task_query import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    SortField,
    TaskQuery,
)
from app.infrastructure.api.caller import Caller, dispatcher_only, get_caller, technician_only
from app.infrastructure.api.dependencies import (
    get_assign_task_uc,
    get_complete_task_uc,
    get_create_task_uc,
    get_list_tasks_uc,
    get_reassign_task_uc,
    get_task_history_uc,
    get_task_uc,
    get_update_status_uc,
)
from app.infrastructure.api.schemas import (
    AssignmentResponse,
    AssignRequest,
    CompleteRequest,
    HistoryEntryResponse,
    ReassignmentResponse,
    ReassignRequest,
    StatusUpdateRequest,
    TaskCreateRequest,
    TaskListResponse,
    TaskResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tasks", tags=["tasks"])


def _enum_param(enum_cls, raw: str | None, name: str):
    if raw is None or not raw.strip():
        return None
    try:
        return enum_cls(raw.strip().upper())
    except ValueError:
        raise ValidationError(f"Unknown {name}: {raw}") from None


@router.post("", status_code=201, response_model=TaskResponse)
async def create_task(
    body: TaskCreateRequest,
    caller: Caller = Depends(dispatcher_only),
    uc: CreateTaskUseCase = Depends(get_create_task_uc),
):
    task = await uc.execute(
        TaskInput(
            title=body.title,
            client_address=body.client_address,
            priority=body.priority,
            description=body.description,
            estimated_duration=body.estimated_duration,
        ),
        created_by=caller.username,
    )
    return TaskResponse.from_domain(task)


@router.get("", response_model=TaskListResponse)
async def list_tasks(
    status: str | None = None,
    priority: str | None = None,
    search: str | None = None,
    sort_by: str | None = Query(default=None, alias="sortBy"),
    sort_order: str = Query(default="desc", alias="sortOrder"),
    page: int = 0,
    page_size: int = Query(default=DEFAULT_PAGE_SIZE, alias="size"),
    caller: Caller = Depends(dispatcher_only),
    uc: ListTasksUseCase = Depends(get_list_tasks_uc),
):
    """Filtered, paginated task list with global status counters."""
    query = TaskQuery(
        status=_enum_param(TaskStatus, status, "status"),
        priority=_enum_param(Priority, priority, "priority"),
        search=search,
        sort_by=SortField.parse(sort_by),
        descending=sort_order.strip().lower() != "asc",
        page=max(page, 0),
        page_size=min(max(page_size, 1), MAX_PAGE_SIZE),
    )
    return TaskListResponse.from_domain(await uc.execute(query))


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: int,
    caller: Caller = Depends(get_caller),
    uc: GetTaskUseCase = Depends(get_task_uc),
):
    return TaskResponse.from_domain(await uc.execute(task_id))


@router.get("/{task_id}/history", response_model=list[HistoryEntryResponse])
async def get_task_history(
    task_id: int,
    caller: Caller = Depends(dispatcher_only),
    uc: GetTaskHistoryUseCase = Depends(get_task_history_uc),
):
    return [HistoryEntryResponse.from_domain(h) for h in await uc.execute(task_id)]


@router.post("/{task_id}/assign", response_model=AssignmentResponse)
async def assign_task(
    task_id: int,
    body: AssignRequest,
    caller: Caller = Depends(dispatcher_only),
    uc: AssignTaskUseCase = Depends(get_assign_task_uc),
):
    result = await uc.execute(task_id, body.technician_id, assigned_by=caller.username)
    return AssignmentResponse.from_domain(result)


@router.post("/{task_id}/reassign", response_model=ReassignmentResponse)
async def reassign_task(
    task_id: int,
    body: ReassignRequest,
    caller: Caller = Depends(dispatcher_only),
    uc: ReassignTaskUseCase = Depends(get_reassign_task_uc),
):
    result = await uc.execute(
        task_id, body.new_technician_id, body.reason, reassigned_by=caller.username
    )
    return ReassignmentResponse.from_domain(result)


@router.patch("/{task_id}/status", response_model=TaskResponse)
async def update_task_status(
    task_id: int,
    body: StatusUpdateRequest,
    caller: Caller = Depends(technician_only),
    uc: UpdateTaskStatusUseCase = Depends(get_update_status_uc),
):
    task = await uc.execute(task_id, body.status, technician_id=caller.technician_id)
    return TaskResponse.from_domain(task)


@router.post("/{task_id}/complete", response_model=TaskResponse)
async def complete_task(
    task_id: int,
    body: CompleteRequest,
    caller: Caller = Depends(technician_only),
    uc: CompleteTaskUseCase = Depends(get_complete_task_uc),
):
    task = await uc.execute(task_id, caller.technician_id, body.work_summary)
    return TaskResponse.from_domain(task)
