"""AgentWorkloadService — view, adjust and recalculate agent capacity."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from brokercrm.application.ports.agent_repo import AgentRepository
from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.client_repo import ClientRepository
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.errors import NotFoundError, ValidationError
from brokercrm.domain.value_objects.enums import AuditAction

logger = logging.getLogger(__name__)

MIN_MAX_WORKLOAD = 1
MAX_MAX_WORKLOAD = 1000


@dataclass
class WorkloadView:
    agent_id: int
    agent_name: str
    current_workload: int
    max_workload: int
    actual_active_clients: int
    is_available: bool
    utilization_rate: float


class AgentWorkloadService:
    def __init__(
        self,
        agent_repo: AgentRepository,
        client_repo: ClientRepository,
        audit_repo: AuditLogRepository,
    ):
        self._agents = agent_repo
        self._clients = client_repo
        self._audit = audit_repo

    async def _get_agent(self, agent_id: int) -> Agent:
        agent = await self._agents.get_by_id(agent_id)
        if agent is None:
            raise NotFoundError("Agent", agent_id)
        return agent

    async def get(self, agent_id: int) -> WorkloadView:
        agent = await self._get_agent(agent_id)
        active = await self._clients.count_active_for_agent(agent_id)
        return WorkloadView(
            agent_id=agent.id,
            agent_name=agent.name,
            current_workload=agent.current_workload,
            max_workload=agent.max_workload,
            actual_active_clients=active,
            is_available=agent.is_available,
            utilization_rate=agent.utilization_pct(),
        )

    async def adjust(
        self,
        agent_id: int,
        max_workload: int | None = None,
        is_available: bool | None = None,
        actor_id: int | None = None,
    ) -> Agent:
        agent = await self._get_agent(agent_id)
        changes: dict = {}

        if max_workload is not None:
            if not MIN_MAX_WORKLOAD <= max_workload <= MAX_MAX_WORKLOAD:
                raise ValidationError(
                    f"Max workload must be between {MIN_MAX_WORKLOAD} and {MAX_MAX_WORKLOAD}"
                )
            changes["max_workload"] = max_workload
        if is_available is not None:
            changes["is_available"] = is_available

        previous = {"max_workload": agent.max_workload, "is_available": agent.is_available}
        for name, value in changes.items():
            setattr(agent, name, value)
        agent = await self._agents.update(agent)

        await self._audit.save(
            AuditLog(
                id=None,
                action=AuditAction.WORKLOAD_ADJUSTED,
                user_id=actor_id,
                target_type="user",
                target_id=str(agent.id),
                details={
                    "agent_name": agent.name,
                    "changes": changes,
                    "previous_max_workload": previous["max_workload"],
                    "previous_availability": previous["is_available"],
                },
            )
        )
        logger.info("Agent %s workload adjusted: %s", agent.name, changes)
        return agent

    async def recalculate(self, agent_id: int) -> Agent:
        """Reset the open-client counter from the clients table."""
        agent = await self._get_agent(agent_id)
        active = await self._clients.count_active_for_agent(agent_id)
        if active != agent.current_workload:
            logger.info(
                "Agent %s workload drift: stored=%d actual=%d",
                agent.name, agent.current_workload, active,
            )
        agent.current_workload = active
        return await self._agents.update(agent)
