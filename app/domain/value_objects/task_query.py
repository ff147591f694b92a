"""TaskQuery value object — filter, sort and page for dispatcher task lists."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from app.domain.value_objects.enums import Priority, TaskStatus

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


class SortField(str, Enum):
    PRIORITY = "priority"
    CREATED_AT = "createdAt"
    STATUS = "status"

    @classmethod
    def parse(cls, raw: str | None) -> SortField:
        """Unknown or missing values fall back to priority."""
        key = (raw or "").strip().lower().replace("_", "")
        for field in cls:
            if field.value.lower() == key:
                return field
        return cls.PRIORITY


@dataclass(frozen=True)
class TaskQuery:
    status: TaskStatus | None = None
    priority: Priority | None = None
    search: str | None = None
    sort_by: SortField = SortField.PRIORITY
    descending: bool = True
    page: int = 0
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return self.page * self.page_size

    @property
    def search_term(self) -> str | None:
        """Trimmed search text, or None when blank."""
        if self.search is None or not self.search.strip():
            return None
        return self.search.strip()

    @property
    def search_id(self) -> int | None:
        """The search term as a task id, when it is an integer."""
        term = self.search_term
        if term is None:
            return None
        try:
            return int(term)
        except ValueError:
            return None
