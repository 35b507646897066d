"""CandidateFilter — narrow the agent pool for an incoming client."""

from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.client import Client
from brokercrm.domain.value_objects.rule_set import RuleSet


def agent_is_eligible(agent: Agent, client: Client, rules: RuleSet) -> bool:
    """Check whether a single agent may receive the client.

    Business rules:
      1. Inactive agents never receive clients.
      2. If the client is pre-assigned to a team, the agent must belong to it.
      3. If availability is enabled, the agent must be marked available.
    """
    if not agent.is_active:
        return False

    if client.team_id is not None and agent.team_id != client.team_id:
        return False

    if rules.use_availability and not agent.is_available:
        return False

    return True


def filter_candidates(agents: list[Agent], client: Client, rules: RuleSet) -> list[Agent]:
    """Pure function: return the eligible subset, preserving roster order.

    An empty result is a normal outcome; the client stays unassigned.
    """
    return [a for a in agents if agent_is_eligible(a, client, rules)]
