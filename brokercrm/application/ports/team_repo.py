"""Port interface for team persistence."""

from abc import ABC, abstractmethod

from brokercrm.domain.entities.team import Team


class TeamRepository(ABC):
    @abstractmethod
    async def get_by_id(self, team_id: int) -> Team | None:
        ...
