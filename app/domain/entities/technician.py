"""Technician record as reported by the identity service."""

from dataclasses import dataclass


@dataclass(frozen=True)
class TechnicianInfo:
    id: int
    name: str
    status: str
    role: str | None = None

    def is_active(self) -> bool:
        return self.status == "ACTIVE"

    def is_technician(self) -> bool:
        return self.role == "TECHNICIAN"
