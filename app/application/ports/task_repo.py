"""Port interface for service task persistence."""

from abc import ABC, abstractmethod

from app.domain.entities.service_task import ServiceTask
from app.domain.value_objects.enums import TaskStatus
from app.domain.value_objects.task_query import TaskQuery


class TaskRepository(ABC):
    @abstractmethod
    async def save(self, task: ServiceTask) -> ServiceTask:
        """Insert a new task and set its id."""
        ...

    @abstractmethod
    async def update(self, task: ServiceTask) -> ServiceTask:
        ...

    @abstractmethod
    async def get_by_id(self, task_id: int) -> ServiceTask | None:
        ...

    @abstractmethod
    async def get_by_ids(self, task_ids: list[int]) -> list[ServiceTask]:
        ...

    @abstractmethod
    async def get_by_technician(self, technician_id: int) -> list[ServiceTask]:
        """Tasks whose most recent technician is *technician_id*."""
        ...

    @abstractmethod
    async def find_by_filter(self, query: TaskQuery) -> tuple[list[ServiceTask], int]:
        """Return one sorted page of matching tasks and the total match count.

        Ordering must be total (ties broken by id) so pages never overlap.
        """
        ...

    @abstractmethod
    async def count_by_status(self, status: TaskStatus) -> int:
        ...
