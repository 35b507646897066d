"""ScoringEngine — composite suitability score per candidate agent."""

from __future__ import annotations

from dataclasses import dataclass, field

from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.client import Client
from brokercrm.domain.value_objects.rule_set import RuleSet

WORKLOAD_WEIGHT = 40.0
LANGUAGE_WEIGHT = 30.0
PERFORMANCE_WEIGHT = 20.0
AVAILABILITY_WEIGHT = 10.0


@dataclass(frozen=True)
class AgentScore:
    """Score of one candidate with the contribution of every term."""

    agent: Agent
    total: float
    breakdown: dict[str, float] = field(default_factory=dict)

    def as_trace(self) -> dict:
        return {
            "agent_id": self.agent.id,
            "total": round(self.total, 4),
            **{k: round(v, 4) for k, v in self.breakdown.items()},
        }


def workload_term(agent: Agent) -> float:
    """Full weight for an idle agent, falling to zero at capacity."""
    if agent.max_workload <= 0:
        return 0.0
    ratio = agent.current_workload / agent.max_workload
    return max(0.0, WORKLOAD_WEIGHT * (1 - ratio))


def language_term(agent: Agent, client_language: str | None) -> float:
    return LANGUAGE_WEIGHT if agent.speaks(client_language) else 0.0


def performance_term(agent: Agent) -> float:
    if not agent.performance_score:
        return 0.0
    # clamp to the 0..100 range before normalizing
    normalized = min(max(agent.performance_score, 0.0), 100.0) / 100
    return normalized * PERFORMANCE_WEIGHT


def score_agent(agent: Agent, client: Client, rules: RuleSet) -> AgentScore:
    """Disabled terms contribute zero, so a RuleSet with every flag off
    scores all candidates equally and leaves the decision to the tie-break.
    """
    breakdown = {
        "workload": workload_term(agent) if rules.use_workload_balance else 0.0,
        "language": language_term(agent, client.language) if rules.use_language_match else 0.0,
        "performance": performance_term(agent) if rules.use_performance_history else 0.0,
        "availability": (
            AVAILABILITY_WEIGHT if rules.use_availability and agent.is_available else 0.0
        ),
    }
    return AgentScore(agent=agent, total=sum(breakdown.values()), breakdown=breakdown)


def score_candidates(
    candidates: list[Agent],
    client: Client,
    rules: RuleSet,
) -> list[AgentScore]:
    """Score every candidate, highest total first (ties keep roster order)."""
    scores = [score_agent(a, client, rules) for a in candidates]
    return sorted(scores, key=lambda s: -s.total)
