"""In-memory fakes for the application ports."""

from __future__ import annotations

from contextlib import asynccontextmanager

import pytest

from brokercrm.application.ports.agent_repo import AgentRepository
from brokercrm.application.ports.assignment_repo import AssignmentRepository
from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.client_repo import ClientRepository
from brokercrm.application.ports.role_repo import RoleRepository
from brokercrm.application.ports.round_robin_repo import RoundRobinRepository
from brokercrm.application.ports.settings_repo import SmartAssignmentSettingsRepository
from brokercrm.application.ports.team_repo import TeamRepository
from brokercrm.application.ports.unit_of_work import UnitOfWork
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.assignment import ClientAssignment
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.entities.client import Client
from brokercrm.domain.entities.role import Role
from brokercrm.domain.entities.smart_assignment_setting import SmartAssignmentSetting
from brokercrm.domain.entities.team import Team

# ─── In-memory fakes ────────────────────────────────────────────────


class FakeAgentRepo(AgentRepository):
    def __init__(self, agents: list[Agent] | None = None):
        self.agents: dict[int, Agent] = {a.id: a for a in agents or []}

    def add(self, *agents):
        for a in agents:
            self.agents[a.id] = a

    async def get_by_id(self, agent_id):
        return self.agents.get(agent_id)

    async def get_by_team(self, team_id):
        return [a for a in self.agents.values() if a.team_id == team_id]

    async def get_all(self):
        return list(self.agents.values())

    async def update(self, agent):
        self.agents[agent.id] = agent
        return agent

    async def increment_workload(self, agent_id, delta=1):
        if agent_id in self.agents:
            agent = self.agents[agent_id]
            agent.current_workload = max(agent.current_workload + delta, 0)

    async def mark_assigned(self, agent_id, seq, at):
        if agent_id in self.agents:
            self.agents[agent_id].last_assignment_seq = seq
            self.agents[agent_id].last_assigned_at = at


class FakeClientRepo(ClientRepository):
    def __init__(self, clients: list[Client] | None = None):
        self.clients: dict[int, Client] = {c.id: c for c in clients or []}

    def add(self, *clients):
        for c in clients:
            self.clients[c.id] = c

    async def save(self, client):
        client.id = max(self.clients, default=0) + 1
        self.clients[client.id] = client
        return client

    async def get_by_id(self, client_id):
        return self.clients.get(client_id)

    async def get_by_email(self, email):
        return next((c for c in self.clients.values() if c.email == email.lower()), None)

    async def get_unassigned(self):
        return [
            c for c in self.clients.values()
            if c.assigned_agent_id is None and c.is_active
        ]

    async def count_active_for_agent(self, agent_id):
        return sum(
            1 for c in self.clients.values()
            if c.assigned_agent_id == agent_id and c.is_active
        )

    async def update_assignment(self, client_id, agent_id, team_id):
        client = self.clients.get(client_id)
        if client is not None:
            client.assigned_agent_id = agent_id
            client.team_id = team_id


class FakeTeamRepo(TeamRepository):
    def __init__(self, teams: list[Team] | None = None):
        self.teams: dict[int, Team] = {t.id: t for t in teams or []}

    def add(self, *teams):
        for t in teams:
            self.teams[t.id] = t

    async def get_by_id(self, team_id):
        return self.teams.get(team_id)


class FakeRoleRepo(RoleRepository):
    def __init__(self, roles: list[Role] | None = None):
        self.roles: dict[int, Role] = {r.id: r for r in roles or []}

    def add(self, *roles):
        for r in roles:
            self.roles[r.id] = r

    async def get_by_id(self, role_id):
        return self.roles.get(role_id)


class FakeSettingsRepo(SmartAssignmentSettingsRepository):
    def __init__(self, settings: list[SmartAssignmentSetting] | None = None):
        self.settings: dict[int, SmartAssignmentSetting] = {}
        self.add(*(settings or []))

    def add(self, *settings):
        for s in settings:
            if s.id is None:
                s.id = max(self.settings, default=0) + 1
            self.settings[s.id] = s

    async def get_global(self):
        return next((s for s in self.settings.values() if s.team_id is None), None)

    async def get_by_team(self, team_id):
        return next((s for s in self.settings.values() if s.team_id == team_id), None)

    async def get_by_id(self, setting_id):
        return self.settings.get(setting_id)

    async def list_team_overrides(self):
        return [s for s in self.settings.values() if s.team_id is not None]

    async def save(self, setting):
        if setting.id is None:
            setting.id = max(self.settings, default=0) + 1
        self.settings[setting.id] = setting
        return setting

    async def delete(self, setting_id):
        self.settings.pop(setting_id, None)


class FakeAssignmentRepo(AssignmentRepository):
    def __init__(self):
        self.assignments: list[ClientAssignment] = []

    async def save(self, assignment):
        assignment.id = len(self.assignments) + 1
        self.assignments.append(assignment)
        return assignment


class FakeAuditRepo(AuditLogRepository):
    def __init__(self):
        self.entries: list[AuditLog] = []

    async def save(self, entry):
        entry.id = len(self.entries) + 1
        self.entries.append(entry)
        return entry


class FakeRRRepo(RoundRobinRepository):
    def __init__(self):
        self._counters: dict[str, int] = {}

    async def take_next(self, rr_key):
        old = self._counters.get(rr_key, 0)
        self._counters[rr_key] = old + 1
        return old


class FakeUnitOfWork(UnitOfWork):
    def __init__(self):
        self.savepoints = 0
        self.rollbacks = 0

    @asynccontextmanager
    async def savepoint(self):
        self.savepoints += 1
        try:
            yield
        except Exception:
            self.rollbacks += 1
            raise


# ─── Fixtures ────────────────────────────────────────────────────────


@pytest.fixture
def unit_of_work():
    return FakeUnitOfWork()


@pytest.fixture
def assignment_repo():
    return FakeAssignmentRepo()


@pytest.fixture
def audit_repo():
    return FakeAuditRepo()


@pytest.fixture
def rr_repo():
    return FakeRRRepo()


@pytest.fixture
def agent_repo():
    return FakeAgentRepo()


@pytest.fixture
def client_repo():
    return FakeClientRepo()


@pytest.fixture
def team_repo():
    return FakeTeamRepo()


@pytest.fixture
def role_repo():
    return FakeRoleRepo()


@pytest.fixture
def settings_repo():
    return FakeSettingsRepo()
