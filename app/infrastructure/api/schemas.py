"""Request / response schemas for the task and technician endpoints."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from app.application.use_cases.assign_task import AssignmentResult, ReassignmentResult
from app.application.use_cases.manage_tasks import TaskListResult
from app.domain.entities.assignment_history import AssignmentHistory
from app.domain.entities.service_task import ServiceTask
from app.domain.entities.technician import TechnicianInfo
from app.domain.policies.technician_visibility import TechnicianTask

# ── Requests ────────────────────────────────────────────────────────


class TaskCreateRequest(BaseModel):
    title: str
    client_address: str
    priority: str
    description: str | None = None
    estimated_duration: int | None = Field(default=None, description="Minutes")


class AssignRequest(BaseModel):
    technician_id: int


class ReassignRequest(BaseModel):
    new_technician_id: int
    reason: str | None = None


class StatusUpdateRequest(BaseModel):
    status: str


class CompleteRequest(BaseModel):
    work_summary: str


# ── Responses ───────────────────────────────────────────────────────


class TaskResponse(BaseModel):
    id: int
    title: str
    description: str | None
    client_address: str
    priority: str
    estimated_duration: int | None
    status: str
    assigned_technician_id: int | None
    created_by: str | None
    created_at: datetime
    started_at: datetime | None
    completed_at: datetime | None
    work_summary: str | None

    @classmethod
    def from_domain(cls, t: ServiceTask) -> TaskResponse:
        return cls(
            id=t.id,
            title=t.title,
            description=t.description,
            client_address=t.client_address,
            priority=t.priority.value,
            estimated_duration=t.estimated_duration,
            status=t.status.value,
            assigned_technician_id=t.assigned_technician_id,
            created_by=t.created_by,
            created_at=t.created_at,
            started_at=t.started_at,
            completed_at=t.completed_at,
            work_summary=t.work_summary,
        )


class TaskListResponse(BaseModel):
    tasks: list[TaskResponse]
    page: int
    page_size: int
    total_elements: int
    total_pages: int
    first: bool
    last: bool
    status_counts: dict[str, int]

    @classmethod
    def from_domain(cls, r: TaskListResult) -> TaskListResponse:
        return cls(
            tasks=[TaskResponse.from_domain(t) for t in r.tasks],
            page=r.page,
            page_size=r.page_size,
            total_elements=r.total_elements,
            total_pages=r.total_pages,
            first=r.first,
            last=r.last,
            status_counts=r.status_counts,
        )


class HistoryEntryResponse(BaseModel):
    id: int | None
    assignment_id: int
    task_id: int
    technician_id: int
    previous_technician_id: int | None
    action: str
    action_by: str
    action_at: datetime
    reason: str | None

    @classmethod
    def from_domain(cls, h: AssignmentHistory) -> HistoryEntryResponse:
        return cls(
            id=h.id,
            assignment_id=h.assignment_id,
            task_id=h.task_id,
            technician_id=h.technician_id,
            previous_technician_id=h.previous_technician_id,
            action=h.action.value,
            action_by=h.action_by,
            action_at=h.action_at,
            reason=h.reason,
        )


class AssignmentResponse(BaseModel):
    assignment_id: int
    task_id: int
    technician_id: int
    assigned_at: datetime
    assigned_by: str
    task_status: str
    workload: int
    workload_warning: str | None

    @classmethod
    def from_domain(cls, r: AssignmentResult) -> AssignmentResponse:
        return cls(
            assignment_id=r.assignment_id,
            task_id=r.task_id,
            technician_id=r.technician_id,
            assigned_at=r.assigned_at,
            assigned_by=r.assigned_by,
            task_status=r.task_status.value,
            workload=r.workload,
            workload_warning=r.workload_warning,
        )


class ReassignmentResponse(BaseModel):
    assignment_id: int
    task_id: int
    previous_technician_id: int | None
    previous_assignment_id: int | None
    new_technician_id: int
    reassigned_at: datetime
    reassigned_by: str
    reason: str | None
    task_status: str
    workload: int
    workload_warning: str | None
    history: list[HistoryEntryResponse]

    @classmethod
    def from_domain(cls, r: ReassignmentResult) -> ReassignmentResponse:
        return cls(
            assignment_id=r.assignment_id,
            task_id=r.task_id,
            previous_technician_id=r.previous_technician_id,
            previous_assignment_id=r.previous_assignment_id,
            new_technician_id=r.new_technician_id,
            reassigned_at=r.reassigned_at,
            reassigned_by=r.reassigned_by,
            reason=r.reason,
            task_status=r.task_status.value,
            workload=r.workload,
            workload_warning=r.workload_warning,
            history=[HistoryEntryResponse.from_domain(h) for h in r.history],
        )


class TechnicianTaskResponse(TaskResponse):
    assigned_at: datetime

    @classmethod
    def from_entry(cls, e: TechnicianTask) -> TechnicianTaskResponse:
        base = TaskResponse.from_domain(e.task)
        return cls(**base.model_dump(), assigned_at=e.assigned_at)


class TechnicianInfoResponse(BaseModel):
    id: int
    name: str
    status: str
    role: str | None

    @classmethod
    def from_domain(cls, t: TechnicianInfo) -> TechnicianInfoResponse:
        return cls(id=t.id, name=t.name, status=t.status, role=t.role)
