"""Port interface for client assignment history."""

from abc import ABC, abstractmethod

from brokercrm.domain.entities.assignment import ClientAssignment


class AssignmentRepository(ABC):
    @abstractmethod
    async def save(self, assignment: ClientAssignment) -> ClientAssignment:
        ...
