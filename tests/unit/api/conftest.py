"""Route test wiring: stubbed session and authorizer on the real app."""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from brokercrm.adapters.persistence.database import get_session
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.errors import PermissionDeniedError
from brokercrm.infrastructure.api.dependencies import get_authorizer
from brokercrm.main import app

MANAGER_ID = 1


class FakeResult:
    def __init__(self, value):
        self._value = value

    def scalar(self):
        return self._value

    def all(self):
        return self._value


class FakeSession:
    """Counts commits; ``execute`` replays queued results in order."""

    def __init__(self):
        self.commits = 0
        self.results: list = []
        self.statements: list = []

    async def commit(self):
        self.commits += 1

    async def execute(self, statement):
        self.statements.append(statement)
        return FakeResult(self.results.pop(0))


class FakeAuthorizer:
    async def execute(self, user_id, permission):
        if user_id != MANAGER_ID:
            raise PermissionDeniedError("Unauthorized: Insufficient permissions")
        return Agent(id=user_id, name="Manager", email="manager@desk.test")


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def overrides(session):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_authorizer] = FakeAuthorizer
    yield app.dependency_overrides
    app.dependency_overrides.clear()


@pytest.fixture
def manager():
    return {"X-User-Id": str(MANAGER_ID)}


@pytest.fixture
def http(overrides):
    return TestClient(app)
