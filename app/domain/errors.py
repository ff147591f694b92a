"""Dispatch error taxonomy.

Every error below is raised before the first persistent write of an
operation, so the surrounding unit of work rolls back with nothing to undo.
"""

from __future__ import annotations


class DispatchError(Exception):
    """Base class for client-facing dispatch failures."""


class TaskNotFoundError(DispatchError):
    def __init__(self, task_id: int):
        self.task_id = task_id
        super().__init__(f"Task with ID {task_id} not found")


class TechnicianNotFoundError(DispatchError):
    NOT_FOUND = "not found"
    NOT_ACTIVE = "is not active"
    UNAVAILABLE = "could not be validated - identity service unavailable"

    def __init__(self, technician_id: int, reason: str = NOT_FOUND):
        self.technician_id = technician_id
        self.reason = reason
        super().__init__(f"Technician with ID {technician_id} {reason}")


class InvalidAssignmentError(DispatchError):
    """Task status forbids (re)assignment."""


class InvalidStatusTransitionError(DispatchError):
    """Caller is not the assigned technician, or the transition is not allowed."""


class ValidationError(DispatchError):
    """Malformed input: blank required fields, bad pagination, missing reason."""
