"""Port interface for agent persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from brokercrm.domain.entities.agent import Agent


class AgentRepository(ABC):
    @abstractmethod
    async def get_by_id(self, agent_id: int) -> Agent | None:
        ...

    @abstractmethod
    async def get_by_team(self, team_id: int) -> list[Agent]:
        ...

    @abstractmethod
    async def get_all(self) -> list[Agent]:
        ...

    @abstractmethod
    async def update(self, agent: Agent) -> Agent:
        """Persist availability, capacity and workload fields."""
        ...

    @abstractmethod
    async def increment_workload(self, agent_id: int, delta: int = 1) -> None:
        """Add *delta* to the open-client count, never going below zero."""
        ...

    @abstractmethod
    async def mark_assigned(self, agent_id: int, seq: int, at: datetime) -> None:
        """Stamp the round-robin sequence of the agent's latest client."""
        ...
