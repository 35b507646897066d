"""Tests for the tie-break selector."""

import pytest

from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.policies.scoring import AgentScore
from brokercrm.domain.policies.tie_break import select_agent, tied_at_top


def _score(aid: int, total: float, seq: int | None = None) -> AgentScore:
    agent = Agent(id=aid, name=f"A{aid}", email=f"a{aid}@desk.test", last_assignment_seq=seq)
    return AgentScore(agent=agent, total=total)


def test_empty_returns_none():
    assert select_agent([], use_round_robin=True) is None


def test_single_best_wins_regardless_of_rotation():
    scores = [_score(1, 50.0, seq=None), _score(2, 70.0, seq=99)]
    assert select_agent(scores, use_round_robin=True).agent.id == 2
    assert select_agent(scores, use_round_robin=False).agent.id == 2


def test_tied_at_top_exact():
    scores = [_score(1, 50.0), _score(2, 50.0), _score(3, 49.9)]
    assert [s.agent.id for s in tied_at_top(scores)] == [1, 2]


def test_tied_at_top_with_tolerance():
    scores = [_score(1, 50.0), _score(2, 48.0), _score(3, 40.0)]
    assert [s.agent.id for s in tied_at_top(scores, tolerance=5.0)] == [1, 2]


def test_float_noise_counts_as_tie():
    scores = [_score(1, 0.1 + 0.2), _score(2, 0.3)]
    assert len(tied_at_top(scores)) == 2


def test_round_robin_picks_least_recent():
    scores = [_score(1, 50.0, seq=7), _score(2, 50.0, seq=3), _score(3, 50.0, seq=5)]
    assert select_agent(scores, use_round_robin=True).agent.id == 2


def test_round_robin_never_assigned_first_then_lowest_id():
    scores = [_score(4, 50.0, seq=0), _score(3, 50.0), _score(2, 50.0)]
    assert select_agent(scores, use_round_robin=True).agent.id == 2


def test_without_round_robin_lowest_id():
    scores = [_score(3, 50.0, seq=None), _score(1, 50.0, seq=10), _score(2, 50.0)]
    assert select_agent(scores, use_round_robin=False).agent.id == 1


def test_tolerance_widens_round_robin_pool():
    scores = [_score(1, 50.0, seq=8), _score(2, 47.0, seq=1)]
    assert select_agent(scores, use_round_robin=True).agent.id == 1
    assert select_agent(scores, use_round_robin=True, tolerance=5.0).agent.id == 2


def test_negative_tolerance_rejected():
    with pytest.raises(ValueError):
        select_agent([_score(1, 1.0)], use_round_robin=True, tolerance=-1)
