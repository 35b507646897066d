"""SQLAlchemy repository implementations."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from brokercrm.adapters.persistence.models import (
    AgentModel,
    AuditLogModel,
    ClientAssignmentModel,
    ClientModel,
    RoleModel,
    RoundRobinStateModel,
    SmartAssignmentSettingModel,
    TeamModel,
)
from brokercrm.application.ports.agent_repo import AgentRepository
from brokercrm.application.ports.assignment_repo import AssignmentRepository
from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.client_repo import ClientRepository
from brokercrm.application.ports.role_repo import RoleRepository
from brokercrm.application.ports.round_robin_repo import RoundRobinRepository
from brokercrm.application.ports.settings_repo import SmartAssignmentSettingsRepository
from brokercrm.application.ports.team_repo import TeamRepository
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.assignment import ClientAssignment
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.entities.client import Client
from brokercrm.domain.entities.role import Role
from brokercrm.domain.entities.smart_assignment_setting import (
    HEURISTIC_FLAGS,
    SmartAssignmentSetting,
)
from brokercrm.domain.entities.team import Team
from brokercrm.domain.value_objects.enums import (
    ClientStatus,
    Department,
)

# ─── Mappers ─────────────────────────────────────────────────────────


def _team_to_domain(m: TeamModel) -> Team:
    return Team(
        id=m.id,
        name=m.name,
        department=Department(m.department),
        language_code=m.language_code,
        leader_id=m.leader_id,
    )


def _agent_to_domain(m: AgentModel) -> Agent:
    languages = {lang.lower() for lang in (m.languages or [])}
    # the desk language counts as spoken by every member
    if m.team is not None and m.team.language_code:
        languages.add(m.team.language_code.lower())
    return Agent(
        id=m.id,
        name=m.name,
        email=m.email,
        team_id=m.team_id,
        role_id=m.role_id,
        languages=languages,
        is_active=m.is_active,
        is_available=m.is_available,
        current_workload=m.current_workload,
        max_workload=m.max_workload,
        performance_score=m.performance_score,
        last_assignment_seq=m.last_assignment_seq,
        last_assigned_at=m.last_assigned_at,
    )


def _client_to_domain(m: ClientModel) -> Client:
    return Client(
        id=m.id,
        first_name=m.first_name,
        last_name=m.last_name,
        email=m.email,
        phone=m.phone,
        country=m.country,
        language=m.language,
        team_id=m.team_id,
        assigned_agent_id=m.assigned_agent_id,
        status=ClientStatus(m.status),
        is_active=m.is_active,
        has_ftd=m.has_ftd,
        created_at=m.created_at,
    )


def _setting_to_domain(m: SmartAssignmentSettingModel) -> SmartAssignmentSetting:
    return SmartAssignmentSetting(
        id=m.id,
        team_id=m.team_id,
        is_enabled=m.is_enabled,
        use_workload_balance=m.use_workload_balance,
        use_language_match=m.use_language_match,
        use_performance_history=m.use_performance_history,
        use_availability=m.use_availability,
        use_round_robin=m.use_round_robin,
        created_at=m.created_at,
        updated_at=m.updated_at,
    )


# ─── Repositories ────────────────────────────────────────────────────


class SqlTeamRepository(TeamRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, team_id: int) -> Team | None:
        m = await self._s.get(TeamModel, team_id)
        return _team_to_domain(m) if m else None


class SqlRoleRepository(RoleRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_by_id(self, role_id: int) -> Role | None:
        m = await self._s.get(RoleModel, role_id)
        if m is None:
            return None
        return Role(id=m.id, name=m.name, permissions=list(m.permissions or []))


class SqlAgentRepository(AgentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    def _select(self):
        return select(AgentModel).options(selectinload(AgentModel.team))

    async def get_by_id(self, agent_id: int) -> Agent | None:
        result = await self._s.execute(self._select().where(AgentModel.id == agent_id))
        m = result.scalar_one_or_none()
        return _agent_to_domain(m) if m else None

    async def get_by_team(self, team_id: int) -> list[Agent]:
        result = await self._s.execute(
            self._select().where(AgentModel.team_id == team_id).order_by(AgentModel.id)
        )
        return [_agent_to_domain(m) for m in result.scalars()]

    async def get_all(self) -> list[Agent]:
        result = await self._s.execute(self._select().order_by(AgentModel.id))
        return [_agent_to_domain(m) for m in result.scalars()]

    async def update(self, agent: Agent) -> Agent:
        await self._s.execute(
            update(AgentModel)
            .where(AgentModel.id == agent.id)
            .values(
                is_active=agent.is_active,
                is_available=agent.is_available,
                current_workload=agent.current_workload,
                max_workload=agent.max_workload,
                performance_score=agent.performance_score,
            )
        )
        await self._s.flush()
        return agent

    async def increment_workload(self, agent_id: int, delta: int = 1) -> None:
        await self._s.execute(
            update(AgentModel)
            .where(AgentModel.id == agent_id)
            .values(current_workload=func.greatest(AgentModel.current_workload + delta, 0))
        )
        await self._s.flush()

    async def mark_assigned(self, agent_id: int, seq: int, at: datetime) -> None:
        await self._s.execute(
            update(AgentModel)
            .where(AgentModel.id == agent_id)
            .values(last_assignment_seq=seq, last_assigned_at=at)
        )
        await self._s.flush()


class SqlClientRepository(ClientRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, client: Client) -> Client:
        m = ClientModel(
            first_name=client.first_name,
            last_name=client.last_name,
            email=client.email,
            phone=client.phone,
            country=client.country,
            language=client.language,
            team_id=client.team_id,
            assigned_agent_id=client.assigned_agent_id,
            status=client.status.value,
            is_active=client.is_active,
            has_ftd=client.has_ftd,
        )
        self._s.add(m)
        await self._s.flush()
        client.id = m.id
        return client

    async def get_by_id(self, client_id: int) -> Client | None:
        m = await self._s.get(ClientModel, client_id)
        return _client_to_domain(m) if m else None

    async def get_by_email(self, email: str) -> Client | None:
        result = await self._s.execute(
            select(ClientModel).where(func.lower(ClientModel.email) == email.lower())
        )
        m = result.scalar_one_or_none()
        return _client_to_domain(m) if m else None

    async def get_unassigned(self) -> list[Client]:
        result = await self._s.execute(
            select(ClientModel)
            .where(
                ClientModel.assigned_agent_id.is_(None),
                ClientModel.is_active.is_(True),
            )
            .order_by(ClientModel.id)
        )
        return [_client_to_domain(m) for m in result.scalars()]

    async def count_active_for_agent(self, agent_id: int) -> int:
        result = await self._s.execute(
            select(func.count(ClientModel.id)).where(
                ClientModel.assigned_agent_id == agent_id,
                ClientModel.is_active.is_(True),
            )
        )
        return result.scalar() or 0

    async def update_assignment(
        self, client_id: int, agent_id: int | None, team_id: int | None
    ) -> None:
        await self._s.execute(
            update(ClientModel)
            .where(ClientModel.id == client_id)
            .values(assigned_agent_id=agent_id, team_id=team_id)
        )
        await self._s.flush()


class SqlSmartAssignmentSettingsRepository(SmartAssignmentSettingsRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def get_global(self) -> SmartAssignmentSetting | None:
        result = await self._s.execute(
            select(SmartAssignmentSettingModel)
            .where(SmartAssignmentSettingModel.team_id.is_(None))
            .limit(1)
        )
        m = result.scalar_one_or_none()
        return _setting_to_domain(m) if m else None

    async def get_by_team(self, team_id: int) -> SmartAssignmentSetting | None:
        result = await self._s.execute(
            select(SmartAssignmentSettingModel).where(
                SmartAssignmentSettingModel.team_id == team_id
            )
        )
        m = result.scalar_one_or_none()
        return _setting_to_domain(m) if m else None

    async def get_by_id(self, setting_id: int) -> SmartAssignmentSetting | None:
        m = await self._s.get(SmartAssignmentSettingModel, setting_id)
        return _setting_to_domain(m) if m else None

    async def list_team_overrides(self) -> list[SmartAssignmentSetting]:
        result = await self._s.execute(
            select(SmartAssignmentSettingModel)
            .where(SmartAssignmentSettingModel.team_id.is_not(None))
            .order_by(SmartAssignmentSettingModel.team_id)
        )
        return [_setting_to_domain(m) for m in result.scalars()]

    async def save(self, setting: SmartAssignmentSetting) -> SmartAssignmentSetting:
        values = {name: getattr(setting, name) for name in HEURISTIC_FLAGS}
        values["is_enabled"] = setting.is_enabled

        if setting.id is None:
            m = SmartAssignmentSettingModel(team_id=setting.team_id, **values)
            self._s.add(m)
            await self._s.flush()
            setting.id = m.id
        else:
            await self._s.execute(
                update(SmartAssignmentSettingModel)
                .where(SmartAssignmentSettingModel.id == setting.id)
                .values(updated_at=func.now(), **values)
            )
            await self._s.flush()
        return setting

    async def delete(self, setting_id: int) -> None:
        await self._s.execute(
            delete(SmartAssignmentSettingModel).where(
                SmartAssignmentSettingModel.id == setting_id
            )
        )
        await self._s.flush()


class SqlAssignmentRepository(AssignmentRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, assignment: ClientAssignment) -> ClientAssignment:
        m = ClientAssignmentModel(
            client_id=assignment.client_id,
            agent_id=assignment.agent_id,
            team_id=assignment.team_id,
            score=assignment.score,
            method=assignment.method.value,
            reason=assignment.reason,
            rule_trace=assignment.rule_trace,
        )
        if assignment.assigned_at is not None:
            m.assigned_at = assignment.assigned_at
        self._s.add(m)
        await self._s.flush()
        assignment.id = m.id
        return assignment


class SqlAuditLogRepository(AuditLogRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def save(self, entry: AuditLog) -> AuditLog:
        m = AuditLogModel(
            user_id=entry.user_id,
            action=entry.action.value,
            target_type=entry.target_type,
            target_id=entry.target_id,
            details=entry.details,
        )
        self._s.add(m)
        await self._s.flush()
        entry.id = m.id
        return entry


class SqlRoundRobinRepository(RoundRobinRepository):
    def __init__(self, session: AsyncSession):
        self._s = session

    async def take_next(self, rr_key: str) -> int:
        result = await self._s.execute(
            select(RoundRobinStateModel)
            .where(RoundRobinStateModel.rr_key == rr_key)
            .with_for_update()
        )
        m = result.scalar_one_or_none()
        if m is None:
            m = RoundRobinStateModel(rr_key=rr_key, counter=1)
            self._s.add(m)
            await self._s.flush()
            return 0
        taken = m.counter
        m.counter += 1
        await self._s.flush()
        return taken
