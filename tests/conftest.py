"""Pytest configuration and shared fixtures."""

import pytest

from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.client import Client
from brokercrm.domain.value_objects.rule_set import RuleSet


@pytest.fixture
def all_rules():
    return RuleSet(
        use_workload_balance=True,
        use_language_match=True,
        use_performance_history=True,
        use_availability=True,
        use_round_robin=True,
    )


@pytest.fixture
def sample_client():
    return Client(
        id=1, first_name="Maria", last_name="Lopez", email="maria@mail.test",
        country="Spain", language="es", team_id=1,
    )


@pytest.fixture
def sample_agent():
    return Agent(
        id=1, name="Carlos Ruiz", email="carlos@desk.test", team_id=1,
        languages={"es", "en"}, current_workload=10, max_workload=50,
        performance_score=60.0,
    )
