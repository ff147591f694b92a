"""Technician endpoints — own task list and directory lookup."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from app.application.ports.technician_directory import TechnicianDirectory
from app.application.use_cases.technician_tasks import GetTechnicianTasksUseCase
from app.infrastructure.api.caller import Caller, dispatcher_only, technician_only
from app.infrastructure.api.dependencies import get_directory, get_technician_tasks_uc
from app.infrastructure.api.schemas import TechnicianInfoResponse, TechnicianTaskResponse

router = APIRouter(prefix="/technicians", tags=["technicians"])


@router.get("/me/tasks", response_model=list[TechnicianTaskResponse])
async def my_tasks(
    status: str | None = None,
    caller: Caller = Depends(technician_only),
    uc: GetTechnicianTasksUseCase = Depends(get_technician_tasks_uc),
):
    """Current work plus tasks completed today. ``status``: all, assigned, in_progress, completed."""
    entries = await uc.execute(caller.technician_id, status)
    return [TechnicianTaskResponse.from_entry(e) for e in entries]


@router.get("/{technician_id}", response_model=TechnicianInfoResponse)
async def get_technician(
    technician_id: int,
    caller: Caller = Depends(dispatcher_only),
    directory: TechnicianDirectory = Depends(get_directory),
):
    info = await directory.get_info(technician_id)
    if info is None:
        raise HTTPException(status_code=404, detail="Technician not found or directory unavailable")
    return TechnicianInfoResponse.from_domain(info)
