"""CreateClientUseCase — register a client and route it right away."""

from __future__ import annotations

import logging

from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.client_repo import ClientRepository
from brokercrm.application.ports.team_repo import TeamRepository
from brokercrm.application.use_cases.assign_client import (
    AssignClientUseCase,
    AssignmentResult,
)
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.entities.client import Client
from brokercrm.domain.errors import NotFoundError, ValidationError
from brokercrm.domain.value_objects.enums import AuditAction

logger = logging.getLogger(__name__)


class CreateClientUseCase:
    def __init__(
        self,
        client_repo: ClientRepository,
        team_repo: TeamRepository,
        audit_repo: AuditLogRepository,
        assign_client: AssignClientUseCase,
    ):
        self._clients = client_repo
        self._teams = team_repo
        self._audit = audit_repo
        self._assign = assign_client

    async def execute(
        self, client: Client, actor_id: int | None = None
    ) -> tuple[Client, AssignmentResult]:
        """Persist the client, audit it, then run one smart assignment pass.

        A client that cannot be routed is still created; the assignment
        result tells the caller it stayed unassigned.
        """
        client.email = client.email.strip().lower()
        if await self._clients.get_by_email(client.email) is not None:
            raise ValidationError(f"Client with email {client.email} already exists")
        if client.team_id is not None and await self._teams.get_by_id(client.team_id) is None:
            raise NotFoundError("Team", client.team_id)

        client.assigned_agent_id = None
        client = await self._clients.save(client)
        await self._audit.save(
            AuditLog(
                id=None,
                action=AuditAction.CLIENT_CREATE,
                user_id=actor_id,
                target_type="client",
                target_id=str(client.id),
                details={"email": client.email, "team_id": client.team_id},
            )
        )
        logger.info("Client %s created (%s, %s)", client.id, client.full_name, client.email)

        result = await self._assign.execute(client, actor_id=actor_id)
        return client, result
