"""FastAPI dependency injection — wires adapters into use cases."""

from __future__ import annotations

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.adapters.clock.system_clock import SystemClock
from app.adapters.identity.identity_client import IdentityServiceClient
from app.adapters.persistence.database import get_session
from app.adapters.persistence.repositories import (
    SqlAssignmentHistoryRepository,
    SqlAssignmentRepository,
    SqlTaskRepository,
    SqlUnitOfWork,
)
from app.application.ports.technician_directory import TechnicianDirectory
from app.application.use_cases.assign_task import AssignTaskUseCase, ReassignTaskUseCase
from app.application.use_cases.manage_tasks import (
    CreateTaskUseCase,
    GetTaskHistoryUseCase,
    GetTaskUseCase,
    ListTasksUseCase,
)
from app.application.use_cases.technician_tasks import (
    CompleteTaskUseCase,
    GetTechnicianTasksUseCase,
    UpdateTaskStatusUseCase,
)
from app.config import settings
from app.domain.policies.dispatch_rules import DispatchRules

# Singleton adapters (stateless)
_directory = IdentityServiceClient()
_clock = SystemClock()
_rules = DispatchRules(
    workload_threshold=settings.workload_warning_threshold,
    reason_required_in_progress=settings.reassign_reason_required_in_progress,
)


def get_directory() -> TechnicianDirectory:
    return _directory


def get_create_task_uc(session: AsyncSession = Depends(get_session)) -> CreateTaskUseCase:
    return CreateTaskUseCase(
        task_repo=SqlTaskRepository(session),
        uow=SqlUnitOfWork(session),
        clock=_clock,
    )


def get_list_tasks_uc(session: AsyncSession = Depends(get_session)) -> ListTasksUseCase:
    return ListTasksUseCase(task_repo=SqlTaskRepository(session))


def get_task_uc(session: AsyncSession = Depends(get_session)) -> GetTaskUseCase:
    return GetTaskUseCase(task_repo=SqlTaskRepository(session))


def get_task_history_uc(session: AsyncSession = Depends(get_session)) -> GetTaskHistoryUseCase:
    return GetTaskHistoryUseCase(
        task_repo=SqlTaskRepository(session),
        history_repo=SqlAssignmentHistoryRepository(session),
    )


def get_assign_task_uc(
    session: AsyncSession = Depends(get_session),
    directory: TechnicianDirectory = Depends(get_directory),
) -> AssignTaskUseCase:
    return AssignTaskUseCase(
        task_repo=SqlTaskRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        history_repo=SqlAssignmentHistoryRepository(session),
        directory=directory,
        uow=SqlUnitOfWork(session),
        clock=_clock,
        rules=_rules,
    )


def get_reassign_task_uc(
    session: AsyncSession = Depends(get_session),
    directory: TechnicianDirectory = Depends(get_directory),
) -> ReassignTaskUseCase:
    return ReassignTaskUseCase(
        task_repo=SqlTaskRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        history_repo=SqlAssignmentHistoryRepository(session),
        directory=directory,
        uow=SqlUnitOfWork(session),
        clock=_clock,
        rules=_rules,
    )


def get_update_status_uc(session: AsyncSession = Depends(get_session)) -> UpdateTaskStatusUseCase:
    return UpdateTaskStatusUseCase(
        task_repo=SqlTaskRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        history_repo=SqlAssignmentHistoryRepository(session),
        uow=SqlUnitOfWork(session),
        clock=_clock,
    )


def get_complete_task_uc(session: AsyncSession = Depends(get_session)) -> CompleteTaskUseCase:
    return CompleteTaskUseCase(
        task_repo=SqlTaskRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        history_repo=SqlAssignmentHistoryRepository(session),
        uow=SqlUnitOfWork(session),
        clock=_clock,
    )


def get_technician_tasks_uc(
    session: AsyncSession = Depends(get_session),
) -> GetTechnicianTasksUseCase:
    return GetTechnicianTasksUseCase(
        task_repo=SqlTaskRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        clock=_clock,
    )
