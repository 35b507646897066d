"""AssignClientUseCase — smart assignment pipeline: settings → filter → score → pick."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from brokercrm.application.ports.agent_repo import AgentRepository
from brokercrm.application.ports.assignment_repo import AssignmentRepository
from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.client_repo import ClientRepository
from brokercrm.application.ports.round_robin_repo import (
    ASSIGNMENT_SEQUENCE_KEY,
    RoundRobinRepository,
)
from brokercrm.application.ports.settings_repo import SmartAssignmentSettingsRepository
from brokercrm.application.ports.unit_of_work import UnitOfWork
from brokercrm.domain.entities.assignment import ClientAssignment
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.entities.client import Client
from brokercrm.domain.policies.candidate_filter import filter_candidates
from brokercrm.domain.policies.scoring import score_candidates
from brokercrm.domain.policies.settings_resolver import resolve_rule_set
from brokercrm.domain.policies.tie_break import select_agent
from brokercrm.domain.value_objects.enums import (
    AssignmentMethod,
    AssignmentOutcome,
    AuditAction,
)

logger = logging.getLogger(__name__)


@dataclass
class AssignmentResult:
    """Summary of one client's assignment decision."""

    client_id: int
    outcome: AssignmentOutcome
    agent_id: int | None = None
    agent_name: str | None = None
    score: float | None = None
    reason: str | None = None
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "client_id": self.client_id,
            "outcome": self.outcome.value,
            "agent_id": self.agent_id,
            "agent_name": self.agent_name,
            "score": self.score,
            "reason": self.reason,
            "error": self.error,
        }


class AssignClientUseCase:
    """Orchestrates one stateless smart assignment pass for a client."""

    def __init__(
        self,
        settings_repo: SmartAssignmentSettingsRepository,
        agent_repo: AgentRepository,
        client_repo: ClientRepository,
        assignment_repo: AssignmentRepository,
        audit_repo: AuditLogRepository,
        rr_repo: RoundRobinRepository,
        unit_of_work: UnitOfWork,
        tie_tolerance: float = 0.0,
    ):
        self._settings = settings_repo
        self._agents = agent_repo
        self._clients = client_repo
        self._assignments = assignment_repo
        self._audit = audit_repo
        self._rr = rr_repo
        self._uow = unit_of_work
        self._tolerance = tie_tolerance

    async def execute(self, client: Client, actor_id: int | None = None) -> AssignmentResult:
        """Assign a client end-to-end.

        Pipeline:
        1. Resolve effective settings (team override, else global)
        2. Load roster and filter eligible candidates
        3. Score candidates with the enabled terms
        4. Tie-break (round-robin or lowest id)
        5. Persist client, agent workload, history and audit entry

        Each pass runs in its own savepoint: on error only this client's
        writes are rolled back and the session stays usable for the next one.
        """
        try:
            async with self._uow.savepoint():
                return await self._assign(client, actor_id)
        except Exception as e:
            logger.exception("Error assigning client %s", client.id)
            return AssignmentResult(
                client_id=client.id,
                outcome=AssignmentOutcome.FAILED,
                error=str(e),
            )

    async def _assign(self, client: Client, actor_id: int | None) -> AssignmentResult:
        # Step 1: effective settings
        team_setting = None
        if client.team_id is not None:
            team_setting = await self._settings.get_by_team(client.team_id)
        global_setting = await self._settings.get_global()
        rules = resolve_rule_set(team_setting, global_setting)

        if rules is None:
            logger.warning(
                "Client %s: smart assignment disabled, manual assignment required",
                client.id,
            )
            return AssignmentResult(
                client_id=client.id,
                outcome=AssignmentOutcome.DISABLED,
                reason="Smart assignment is disabled",
            )

        # Step 2: candidates
        if client.team_id is not None:
            roster = await self._agents.get_by_team(client.team_id)
        else:
            roster = await self._agents.get_all()
        candidates = filter_candidates(roster, client, rules)

        if not candidates:
            logger.warning(
                "Client %s: no eligible agents (roster=%d, team=%s) → unassigned",
                client.id, len(roster), client.team_id,
            )
            return AssignmentResult(
                client_id=client.id,
                outcome=AssignmentOutcome.UNASSIGNED,
                reason="No eligible agents",
            )

        # Step 3/4: score and pick
        scores = score_candidates(candidates, client, rules)
        winner = select_agent(scores, rules.use_round_robin, self._tolerance)
        agent = winner.agent

        # Step 5: persist
        seq = await self._rr.take_next(ASSIGNMENT_SEQUENCE_KEY)
        now = datetime.now(timezone.utc)
        team_id = client.team_id if client.team_id is not None else agent.team_id
        previous_agent_id = client.assigned_agent_id

        await self._clients.update_assignment(client.id, agent.id, team_id)
        if previous_agent_id != agent.id:
            if previous_agent_id is not None:
                await self._agents.increment_workload(previous_agent_id, -1)
            await self._agents.increment_workload(agent.id)
        await self._agents.mark_assigned(agent.id, seq, now)

        reason = (
            f"Smart assignment ({rules.source.value} settings): "
            f"score {winner.total:.2f} over {len(candidates)} candidate(s)"
        )
        await self._assignments.save(
            ClientAssignment(
                id=None,
                client_id=client.id,
                agent_id=agent.id,
                team_id=team_id,
                score=round(winner.total, 4),
                method=AssignmentMethod.SMART,
                reason=reason,
                rule_trace={
                    "source": rules.source.value,
                    "setting_id": rules.setting_id,
                    "terms": rules.enabled_terms(),
                    "round_robin": rules.use_round_robin,
                    "sequence": seq,
                    "candidates": [s.as_trace() for s in scores],
                },
                assigned_at=now,
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
                    "method": AssignmentMethod.SMART.value,
                    "agent_id": agent.id,
                    "previous_agent_id": previous_agent_id,
                    "team_id": team_id,
                },
            )
        )

        client.assigned_agent_id = agent.id
        client.team_id = team_id

        logger.info(
            "Client %s → Agent %s (score=%.2f, source=%s, seq=%d)",
            client.id, agent.name, winner.total, rules.source.value, seq,
        )

        return AssignmentResult(
            client_id=client.id,
            outcome=AssignmentOutcome.ASSIGNED,
            agent_id=agent.id,
            agent_name=agent.name,
            score=round(winner.total, 4),
            reason=reason,
        )


class BatchAssignUseCase:
    """Run smart assignment over every active unassigned client."""

    def __init__(
        self,
        assign_client: AssignClientUseCase,
        client_repo: ClientRepository,
    ):
        self._assign = assign_client
        self._clients = client_repo

    async def execute(self, actor_id: int | None = None) -> list[AssignmentResult]:
        clients = await self._clients.get_unassigned()
        logger.info("Batch assigning %d unassigned clients", len(clients))

        results = []
        for client in clients:
            result = await self._assign.execute(client, actor_id=actor_id)
            results.append(result)

        assigned = sum(1 for r in results if r.outcome == AssignmentOutcome.ASSIGNED)
        logger.info("Batch complete: %d/%d assigned", assigned, len(results))
        return results
