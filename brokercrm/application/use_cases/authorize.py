"""AuthorizeStaffUseCase — resolve the acting user and check a permission."""

from __future__ import annotations

from brokercrm.application.ports.agent_repo import AgentRepository
from brokercrm.application.ports.role_repo import RoleRepository
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.errors import PermissionDeniedError
from brokercrm.domain.policies.permissions import ensure_permission
from brokercrm.domain.value_objects.enums import Permission


class AuthorizeStaffUseCase:
    def __init__(self, agent_repo: AgentRepository, role_repo: RoleRepository):
        self._agents = agent_repo
        self._roles = role_repo

    async def execute(self, user_id: int, permission: Permission) -> Agent:
        user = await self._agents.get_by_id(user_id)
        if user is None or not user.is_active:
            raise PermissionDeniedError("Unauthorized: Staff only")
        role = await self._roles.get_by_id(user.role_id) if user.role_id else None
        ensure_permission(role, permission)
        return user
