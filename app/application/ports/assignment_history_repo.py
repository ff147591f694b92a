"""Port interface for the assignment audit trail.

Append-only: there is deliberately no update or delete.
"""

from abc import ABC, abstractmethod

from app.domain.entities.assignment_history import AssignmentHistory


class AssignmentHistoryRepository(ABC):
    @abstractmethod
    async def append(self, entry: AssignmentHistory) -> AssignmentHistory:
        """Persist a new row and return it with its id."""
        ...

    @abstractmethod
    async def get_by_task(self, task_id: int) -> list[AssignmentHistory]:
        """History of a task, newest first."""
        ...

    @abstractmethod
    async def get_by_technician(self, technician_id: int) -> list[AssignmentHistory]:
        ...
