"""Maps dispatch errors to HTTP responses."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.domain.errors import (
    DispatchError,
    InvalidAssignmentError,
    InvalidStatusTransitionError,
    TaskNotFoundError,
    TechnicianNotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

_STATUS_CODES: list[tuple[type[DispatchError], int, str]] = [
    (TaskNotFoundError, 404, "Task not found"),
    (TechnicianNotFoundError, 404, "Technician not found"),
    (InvalidAssignmentError, 400, "Invalid assignment"),
    (InvalidStatusTransitionError, 400, "Invalid status transition"),
    (ValidationError, 400, "Validation failed"),
]


async def _handle_dispatch_error(request: Request, exc: DispatchError) -> JSONResponse:
    for error_type, status_code, label in _STATUS_CODES:
        if isinstance(exc, error_type):
            break
    else:
        status_code, label = 400, "Dispatch error"
    logger.info("%s %s → %d: %s", request.method, request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"error": label, "detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DispatchError, _handle_dispatch_error)
