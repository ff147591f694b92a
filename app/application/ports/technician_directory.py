"""Port interface for the external technician directory."""

from abc import ABC, abstractmethod

from app.domain.entities.technician import TechnicianInfo


class TechnicianDirectory(ABC):
    @abstractmethod
    async def validate(self, technician_id: int) -> None:
        """Return normally when the technician exists and is active.

        Raises:
            TechnicianNotFoundError: technician missing, inactive, or (when
                configured fail-closed) the directory is unreachable.
        """
        ...

    @abstractmethod
    async def get_info(self, technician_id: int) -> TechnicianInfo | None:
        """Read-only lookup. Returns None on any failure instead of raising."""
        ...
