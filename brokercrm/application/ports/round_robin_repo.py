"""Port interface for the persistent round-robin sequence."""

from abc import ABC, abstractmethod

ASSIGNMENT_SEQUENCE_KEY = "client-assignment"


class RoundRobinRepository(ABC):
    @abstractmethod
    async def take_next(self, rr_key: str) -> int:
        """Atomically advance the sequence and return the value taken.

        Values start at 0 and are strictly increasing per key. Must lock the
        row (SELECT ... FOR UPDATE) so concurrent requests never share a value.
        """
        ...
