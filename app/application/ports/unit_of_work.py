"""Port interface for transaction boundaries."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class UnitOfWork(ABC):
    @abstractmethod
    def transaction(self) -> AbstractAsyncContextManager[None]:
        """Commit everything written inside the block, or nothing.

        Any exception escaping the block rolls the whole unit back and is
        re-raised unchanged.
        """
        ...
