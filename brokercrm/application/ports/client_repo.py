"""Port interface for client persistence."""

from abc import ABC, abstractmethod

from brokercrm.domain.entities.client import Client


class ClientRepository(ABC):
    @abstractmethod
    async def save(self, client: Client) -> Client:
        ...

    @abstractmethod
    async def get_by_id(self, client_id: int) -> Client | None:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> Client | None:
        ...

    @abstractmethod
    async def get_unassigned(self) -> list[Client]:
        """Return active clients without an assigned agent."""
        ...

    @abstractmethod
    async def count_active_for_agent(self, agent_id: int) -> int:
        ...

    @abstractmethod
    async def update_assignment(
        self, client_id: int, agent_id: int | None, team_id: int | None
    ) -> None:
        ...
