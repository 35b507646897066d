"""Port interface for role lookup."""

from abc import ABC, abstractmethod

from brokercrm.domain.entities.role import Role


class RoleRepository(ABC):
    @abstractmethod
    async def get_by_id(self, role_id: int) -> Role | None:
        ...
