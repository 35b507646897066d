"""Port interface for transaction boundaries within one request."""

from abc import ABC, abstractmethod
from contextlib import AbstractAsyncContextManager


class UnitOfWork(ABC):
    @abstractmethod
    def savepoint(self) -> AbstractAsyncContextManager[None]:
        """Nested scope: its writes are undone if the block raises, earlier work is kept."""
        ...
