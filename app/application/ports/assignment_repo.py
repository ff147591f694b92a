"""Port interface for assignment persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.assignment import Assignment
from app.domain.value_objects.enums import AssignmentStatus


class AssignmentRepository(ABC):
    @abstractmethod
    async def save(self, assignment: Assignment) -> Assignment:
        """Insert a new assignment and set its id."""
        ...

    @abstractmethod
    async def update(self, assignment: Assignment) -> Assignment:
        ...

    @abstractmethod
    async def get_by_task(self, task_id: int) -> list[Assignment]:
        ...

    @abstractmethod
    async def get_by_technician(self, technician_id: int) -> list[Assignment]:
        ...

    @abstractmethod
    async def get_by_status(self, status: AssignmentStatus) -> list[Assignment]:
        ...

    @abstractmethod
    async def get_active_for_task(self, task_id: int) -> Assignment | None:
        ...

    @abstractmethod
    async def count_active_for_technician(self, technician_id: int) -> int:
        """Technician workload: number of ACTIVE assignments across all tasks."""
        ...
