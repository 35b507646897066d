"""Port interface for smart assignment settings persistence."""

from abc import ABC, abstractmethod

from brokercrm.domain.entities.smart_assignment_setting import SmartAssignmentSetting


class SmartAssignmentSettingsRepository(ABC):
    @abstractmethod
    async def get_global(self) -> SmartAssignmentSetting | None:
        ...

    @abstractmethod
    async def get_by_team(self, team_id: int) -> SmartAssignmentSetting | None:
        ...

    @abstractmethod
    async def get_by_id(self, setting_id: int) -> SmartAssignmentSetting | None:
        ...

    @abstractmethod
    async def list_team_overrides(self) -> list[SmartAssignmentSetting]:
        ...

    @abstractmethod
    async def save(self, setting: SmartAssignmentSetting) -> SmartAssignmentSetting:
        """Insert when id is None, otherwise update the existing row."""
        ...

    @abstractmethod
    async def delete(self, setting_id: int) -> None:
        ...
