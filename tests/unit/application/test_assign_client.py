"""Tests for AssignClientUseCase and BatchAssignUseCase with in-memory fakes."""

from __future__ import annotations

import pytest

from brokercrm.application.use_cases.assign_client import (
    AssignClientUseCase,
    BatchAssignUseCase,
)
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.client import Client
from brokercrm.domain.entities.smart_assignment_setting import SmartAssignmentSetting
from brokercrm.domain.value_objects.enums import (
    AssignmentMethod,
    AssignmentOutcome,
    AuditAction,
)


def _agent(aid: int, team_id: int | None = 1, **kwargs) -> Agent:
    return Agent(id=aid, name=f"A{aid}", email=f"a{aid}@desk.test", team_id=team_id, **kwargs)


def _client(cid: int = 1, team_id: int | None = 1, **kwargs) -> Client:
    return Client(
        id=cid, first_name="Test", last_name=f"Client{cid}",
        email=f"c{cid}@mail.test", team_id=team_id, **kwargs,
    )


def _global(is_enabled=True, **flags) -> SmartAssignmentSetting:
    return SmartAssignmentSetting(id=None, team_id=None, is_enabled=is_enabled, **flags)


ONLY_ROUND_ROBIN = dict(
    use_workload_balance=False,
    use_language_match=False,
    use_performance_history=False,
    use_availability=False,
    use_round_robin=True,
)


@pytest.fixture
def uc(
    settings_repo, agent_repo, client_repo, assignment_repo, audit_repo, rr_repo, unit_of_work,
):
    return AssignClientUseCase(
        settings_repo=settings_repo,
        agent_repo=agent_repo,
        client_repo=client_repo,
        assignment_repo=assignment_repo,
        audit_repo=audit_repo,
        rr_repo=rr_repo,
        unit_of_work=unit_of_work,
    )


async def _assign_new(uc, client_repo, cid, **kwargs):
    client = _client(cid, **kwargs)
    client_repo.add(client)
    return await uc.execute(client)


# ─── Settings resolution ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_disabled_when_no_settings(uc, agent_repo, client_repo, assignment_repo):
    agent_repo.add(_agent(1))
    result = await _assign_new(uc, client_repo, 1)
    assert result.outcome == AssignmentOutcome.DISABLED
    assert client_repo.clients[1].assigned_agent_id is None
    assert assignment_repo.assignments == []
    assert agent_repo.agents[1].current_workload == 0


@pytest.mark.asyncio
async def test_disabled_when_global_switched_off(uc, settings_repo, agent_repo, client_repo):
    settings_repo.add(_global(is_enabled=False))
    agent_repo.add(_agent(1))
    result = await _assign_new(uc, client_repo, 1)
    assert result.outcome == AssignmentOutcome.DISABLED
    assert result.reason == "Smart assignment is disabled"


@pytest.mark.asyncio
async def test_enabled_team_override_beats_disabled_global(
    uc, settings_repo, agent_repo, client_repo, assignment_repo,
):
    settings_repo.add(
        _global(is_enabled=False),
        SmartAssignmentSetting(id=None, team_id=1, is_enabled=True),
    )
    agent_repo.add(_agent(1))
    result = await _assign_new(uc, client_repo, 1)
    assert result.outcome == AssignmentOutcome.ASSIGNED
    assert assignment_repo.assignments[0].rule_trace["source"] == "team"


@pytest.mark.asyncio
async def test_disabled_team_override_falls_back_to_global(
    uc, settings_repo, agent_repo, client_repo, assignment_repo,
):
    settings_repo.add(
        _global(),
        SmartAssignmentSetting(id=None, team_id=1, is_enabled=False),
    )
    agent_repo.add(_agent(1))
    result = await _assign_new(uc, client_repo, 1)
    assert result.outcome == AssignmentOutcome.ASSIGNED
    assert assignment_repo.assignments[0].rule_trace["source"] == "global"


@pytest.mark.asyncio
async def test_team_override_flags_are_used(uc, settings_repo, agent_repo, client_repo):
    """Global balances workload, the team override only looks at language."""
    settings_repo.add(
        _global(),
        SmartAssignmentSetting(
            id=None, team_id=1, is_enabled=True,
            use_workload_balance=False, use_performance_history=False,
            use_availability=False, use_round_robin=False,
        ),
    )
    agent_repo.add(
        _agent(1, current_workload=0, languages={"en"}),
        _agent(2, current_workload=40, languages={"de"}),
    )
    result = await _assign_new(uc, client_repo, 1, language="de")
    assert result.agent_id == 2


# ─── Candidate filtering ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_no_eligible_agents_leaves_client_unassigned(
    uc, settings_repo, agent_repo, client_repo, assignment_repo, audit_repo,
):
    settings_repo.add(_global())
    agent_repo.add(
        _agent(1, is_active=False),
        _agent(2, is_available=False),
        _agent(3, team_id=2),
    )
    result = await _assign_new(uc, client_repo, 1)
    assert result.outcome == AssignmentOutcome.UNASSIGNED
    assert result.reason == "No eligible agents"
    assert client_repo.clients[1].assigned_agent_id is None
    assert assignment_repo.assignments == []
    assert audit_repo.entries == []
    assert all(a.current_workload == 0 for a in agent_repo.agents.values())


@pytest.mark.asyncio
async def test_unavailable_agent_eligible_when_availability_off(
    uc, settings_repo, agent_repo, client_repo,
):
    settings_repo.add(_global(use_availability=False))
    agent_repo.add(_agent(1, is_available=False))
    result = await _assign_new(uc, client_repo, 1)
    assert result.outcome == AssignmentOutcome.ASSIGNED
    assert result.agent_id == 1


@pytest.mark.asyncio
async def test_client_stays_within_its_team(uc, settings_repo, agent_repo, client_repo):
    settings_repo.add(_global())
    agent_repo.add(_agent(1, team_id=2), _agent(2, team_id=1, current_workload=45))
    result = await _assign_new(uc, client_repo, 1, team_id=1)
    assert result.agent_id == 2


@pytest.mark.asyncio
async def test_client_without_team_takes_agent_team(
    uc, settings_repo, agent_repo, client_repo, assignment_repo,
):
    settings_repo.add(_global())
    agent_repo.add(_agent(1, team_id=7))
    result = await _assign_new(uc, client_repo, 1, team_id=None)
    assert result.outcome == AssignmentOutcome.ASSIGNED
    assert client_repo.clients[1].team_id == 7
    assert assignment_repo.assignments[0].team_id == 7


# ─── Scoring ────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_lowest_workload_wins(uc, settings_repo, agent_repo, client_repo):
    settings_repo.add(_global())
    agent_repo.add(
        _agent(1, current_workload=30),
        _agent(2, current_workload=5),
        _agent(3, current_workload=20),
    )
    result = await _assign_new(uc, client_repo, 1)
    assert result.agent_id == 2


@pytest.mark.asyncio
async def test_language_match_outweighs_small_workload_gap(
    uc, settings_repo, agent_repo, client_repo,
):
    settings_repo.add(_global())
    agent_repo.add(
        _agent(1, current_workload=0, languages={"en"}),
        _agent(2, current_workload=10, languages={"es"}),
    )
    result = await _assign_new(uc, client_repo, 1, language="ES")
    assert result.agent_id == 2


@pytest.mark.asyncio
async def test_performance_breaks_equal_workload(uc, settings_repo, agent_repo, client_repo):
    settings_repo.add(_global())
    agent_repo.add(
        _agent(1, performance_score=20.0),
        _agent(2, performance_score=85.0),
    )
    result = await _assign_new(uc, client_repo, 1)
    assert result.agent_id == 2
    # 40 workload + 17 performance + 10 availability
    assert result.score == pytest.approx(67.0)


# ─── Tie-break ──────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_round_robin_rotates_through_tied_agents(
    uc, settings_repo, agent_repo, client_repo,
):
    settings_repo.add(_global(**ONLY_ROUND_ROBIN))
    agent_repo.add(_agent(1), _agent(2), _agent(3))

    picked = []
    for cid in range(1, 6):
        result = await _assign_new(uc, client_repo, cid)
        assert result.outcome == AssignmentOutcome.ASSIGNED
        picked.append(result.agent_id)

    assert picked == [1, 2, 3, 1, 2]


@pytest.mark.asyncio
async def test_without_round_robin_lowest_id_always_wins(
    uc, settings_repo, agent_repo, client_repo,
):
    settings_repo.add(_global(**{**ONLY_ROUND_ROBIN, "use_round_robin": False}))
    agent_repo.add(_agent(3), _agent(1), _agent(2))

    picked = [(await _assign_new(uc, client_repo, cid)).agent_id for cid in range(1, 4)]
    assert picked == [1, 1, 1]


@pytest.mark.asyncio
async def test_round_robin_prefers_never_assigned_agent(
    uc, settings_repo, agent_repo, client_repo,
):
    settings_repo.add(_global(**ONLY_ROUND_ROBIN))
    agent_repo.add(_agent(1, last_assignment_seq=4), _agent(2))
    result = await _assign_new(uc, client_repo, 1)
    assert result.agent_id == 2


# ─── Persistence side effects ───────────────────────────────────────


@pytest.mark.asyncio
async def test_assignment_persists_history_workload_and_audit(
    uc, settings_repo, agent_repo, client_repo, assignment_repo, audit_repo,
):
    settings_repo.add(_global())
    agent_repo.add(_agent(1, current_workload=3))
    result = await _assign_new(uc, client_repo, 1)

    assert result.outcome == AssignmentOutcome.ASSIGNED
    assert client_repo.clients[1].assigned_agent_id == 1
    assert agent_repo.agents[1].current_workload == 4
    assert agent_repo.agents[1].last_assignment_seq == 0
    assert agent_repo.agents[1].last_assigned_at is not None

    record = assignment_repo.assignments[0]
    assert record.method == AssignmentMethod.SMART
    assert record.agent_id == 1
    assert record.rule_trace["terms"] == ["workload", "language", "performance", "availability"]
    assert record.rule_trace["sequence"] == 0
    assert record.rule_trace["candidates"][0]["agent_id"] == 1

    entry = audit_repo.entries[0]
    assert entry.action == AuditAction.CLIENT_ASSIGN
    assert entry.target_id == "1"
    assert entry.details["method"] == "smart"


@pytest.mark.asyncio
async def test_reassignment_moves_workload(uc, settings_repo, agent_repo, client_repo):
    settings_repo.add(_global())
    agent_repo.add(_agent(1, current_workload=5), _agent(2, current_workload=1))
    client = _client(1, assigned_agent_id=1)
    client_repo.add(client)

    result = await uc.execute(client)

    assert result.agent_id == 2
    assert agent_repo.agents[1].current_workload == 4
    assert agent_repo.agents[2].current_workload == 2


@pytest.mark.asyncio
async def test_repository_error_reported_as_failed(
    uc, settings_repo, agent_repo, client_repo, assignment_repo, unit_of_work,
):
    settings_repo.add(_global())

    async def _boom(team_id):
        raise RuntimeError("connection lost")

    agent_repo.get_by_team = _boom
    result = await _assign_new(uc, client_repo, 1)

    assert result.outcome == AssignmentOutcome.FAILED
    assert result.error == "connection lost"
    assert assignment_repo.assignments == []
    assert unit_of_work.rollbacks == 1


@pytest.mark.asyncio
async def test_result_serializes_outcome_value(uc, settings_repo, agent_repo, client_repo):
    settings_repo.add(_global())
    agent_repo.add(_agent(1))
    data = (await _assign_new(uc, client_repo, 1)).to_dict()
    assert data["outcome"] == "assigned"
    assert data["agent_name"] == "A1"
    assert data["error"] is None


# ─── Batch ──────────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_batch_assigns_only_unassigned_active_clients(
    uc, settings_repo, agent_repo, client_repo,
):
    settings_repo.add(_global())
    agent_repo.add(_agent(1), _agent(2))
    client_repo.add(
        _client(1),
        _client(2),
        _client(3, assigned_agent_id=1),
        _client(4, is_active=False),
    )

    batch = BatchAssignUseCase(assign_client=uc, client_repo=client_repo)
    results = await batch.execute(actor_id=99)

    assert sorted(r.client_id for r in results) == [1, 2]
    assert all(r.outcome == AssignmentOutcome.ASSIGNED for r in results)
    assert client_repo.clients[4].assigned_agent_id is None


@pytest.mark.asyncio
async def test_batch_failure_rolls_back_only_that_client(
    uc, settings_repo, agent_repo, client_repo, assignment_repo, unit_of_work,
):
    settings_repo.add(_global())
    agent_repo.add(_agent(1))
    client_repo.add(_client(1), _client(2), _client(3))

    update_assignment = client_repo.update_assignment

    async def _fail_for_second(client_id, agent_id, team_id):
        if client_id == 2:
            raise RuntimeError("duplicate key value violates unique constraint")
        await update_assignment(client_id, agent_id, team_id)

    client_repo.update_assignment = _fail_for_second
    batch = BatchAssignUseCase(assign_client=uc, client_repo=client_repo)
    results = await batch.execute()

    assert [r.outcome for r in results] == [
        AssignmentOutcome.ASSIGNED,
        AssignmentOutcome.FAILED,
        AssignmentOutcome.ASSIGNED,
    ]
    assert client_repo.clients[1].assigned_agent_id == 1
    assert client_repo.clients[2].assigned_agent_id is None
    assert client_repo.clients[3].assigned_agent_id == 1
    assert [a.client_id for a in assignment_repo.assignments] == [1, 3]
    assert unit_of_work.savepoints == 3
    assert unit_of_work.rollbacks == 1
