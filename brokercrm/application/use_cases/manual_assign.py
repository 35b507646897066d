"""ManualAssignUseCase — staff override of a client's agent and/or team."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from brokercrm.application.ports.agent_repo import AgentRepository
from brokercrm.application.ports.assignment_repo import AssignmentRepository
from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.client_repo import ClientRepository
from brokercrm.application.ports.team_repo import TeamRepository
from brokercrm.domain.entities.assignment import ClientAssignment
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.entities.client import Client
from brokercrm.domain.errors import NotFoundError
from brokercrm.domain.value_objects.enums import AssignmentMethod, AuditAction

logger = logging.getLogger(__name__)

UNSET = object()


class ManualAssignUseCase:
    """Only the fields that are passed are changed; None clears a field."""

    def __init__(
        self,
        client_repo: ClientRepository,
        agent_repo: AgentRepository,
        team_repo: TeamRepository,
        assignment_repo: AssignmentRepository,
        audit_repo: AuditLogRepository,
    ):
        self._clients = client_repo
        self._agents = agent_repo
        self._teams = team_repo
        self._assignments = assignment_repo
        self._audit = audit_repo

    async def execute(
        self,
        client_id: int,
        agent_id=UNSET,
        team_id=UNSET,
        actor_id: int | None = None,
    ) -> Client:
        client = await self._clients.get_by_id(client_id)
        if client is None:
            raise NotFoundError("Client", client_id)

        new_agent_id = client.assigned_agent_id if agent_id is UNSET else agent_id
        new_team_id = client.team_id if team_id is UNSET else team_id

        if new_agent_id is not None and new_agent_id != client.assigned_agent_id:
            if await self._agents.get_by_id(new_agent_id) is None:
                raise NotFoundError("Agent", new_agent_id)
        if new_team_id is not None and new_team_id != client.team_id:
            if await self._teams.get_by_id(new_team_id) is None:
                raise NotFoundError("Team", new_team_id)

        previous_agent_id = client.assigned_agent_id
        await self._clients.update_assignment(client.id, new_agent_id, new_team_id)

        if previous_agent_id != new_agent_id:
            if previous_agent_id is not None:
                await self._agents.increment_workload(previous_agent_id, -1)
            if new_agent_id is not None:
                await self._agents.increment_workload(new_agent_id)
                await self._assignments.save(
                    ClientAssignment(
                        id=None,
                        client_id=client.id,
                        agent_id=new_agent_id,
                        team_id=new_team_id,
                        method=AssignmentMethod.MANUAL,
                        reason=f"Manual assignment by user {actor_id}",
                        assigned_at=datetime.now(timezone.utc),
                    )
                )

        await self._audit.save(
            AuditLog(
                id=None,
                action=AuditAction.CLIENT_ASSIGN,
                user_id=actor_id,
                target_type="client",
                target_id=str(client.id),
                details={
                    "method": AssignmentMethod.MANUAL.value,
                    "agent_id": new_agent_id,
                    "previous_agent_id": previous_agent_id,
                    "team_id": new_team_id,
                },
            )
        )

        client.assigned_agent_id = new_agent_id
        client.team_id = new_team_id
        logger.info(
            "Client %s manually assigned: agent %s → %s, team=%s",
            client.id, previous_agent_id, new_agent_id, new_team_id,
        )
        return client
