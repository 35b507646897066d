"""FastAPI dependency injection — wires repositories into use cases."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.adapters.persistence.database import get_session
from brokercrm.adapters.persistence.repositories import (
    SqlAgentRepository,
    SqlAssignmentRepository,
    SqlAuditLogRepository,
    SqlClientRepository,
    SqlRoleRepository,
    SqlRoundRobinRepository,
    SqlSmartAssignmentSettingsRepository,
    SqlTeamRepository,
)
from brokercrm.adapters.persistence.unit_of_work import SqlUnitOfWork
from brokercrm.application.use_cases.agent_workload import AgentWorkloadService
from brokercrm.application.use_cases.assign_client import (
    AssignClientUseCase,
    BatchAssignUseCase,
)
from brokercrm.application.use_cases.authorize import AuthorizeStaffUseCase
from brokercrm.application.use_cases.create_client import CreateClientUseCase
from brokercrm.application.use_cases.manage_settings import SmartAssignmentSettingsService
from brokercrm.application.use_cases.manual_assign import ManualAssignUseCase
from brokercrm.config import settings
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.value_objects.enums import Permission

# Re-export session dependency
get_db_session = get_session


def get_client_repo(session: AsyncSession = Depends(get_session)) -> SqlClientRepository:
    return SqlClientRepository(session)


def get_authorizer(session: AsyncSession = Depends(get_session)) -> AuthorizeStaffUseCase:
    return AuthorizeStaffUseCase(
        agent_repo=SqlAgentRepository(session),
        role_repo=SqlRoleRepository(session),
    )


def _build_assign_uc(session: AsyncSession) -> AssignClientUseCase:
    return AssignClientUseCase(
        settings_repo=SqlSmartAssignmentSettingsRepository(session),
        agent_repo=SqlAgentRepository(session),
        client_repo=SqlClientRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        audit_repo=SqlAuditLogRepository(session),
        rr_repo=SqlRoundRobinRepository(session),
        unit_of_work=SqlUnitOfWork(session),
        tie_tolerance=settings.assignment_tie_tolerance,
    )


def get_assign_client_uc(session: AsyncSession = Depends(get_session)) -> AssignClientUseCase:
    return _build_assign_uc(session)


def get_batch_assign_uc(session: AsyncSession = Depends(get_session)) -> BatchAssignUseCase:
    return BatchAssignUseCase(
        assign_client=_build_assign_uc(session),
        client_repo=SqlClientRepository(session),
    )


def get_create_client_uc(session: AsyncSession = Depends(get_session)) -> CreateClientUseCase:
    return CreateClientUseCase(
        client_repo=SqlClientRepository(session),
        team_repo=SqlTeamRepository(session),
        audit_repo=SqlAuditLogRepository(session),
        assign_client=_build_assign_uc(session),
    )


def get_manual_assign_uc(session: AsyncSession = Depends(get_session)) -> ManualAssignUseCase:
    return ManualAssignUseCase(
        client_repo=SqlClientRepository(session),
        agent_repo=SqlAgentRepository(session),
        team_repo=SqlTeamRepository(session),
        assignment_repo=SqlAssignmentRepository(session),
        audit_repo=SqlAuditLogRepository(session),
    )


def get_settings_service(
    session: AsyncSession = Depends(get_session),
) -> SmartAssignmentSettingsService:
    return SmartAssignmentSettingsService(
        settings_repo=SqlSmartAssignmentSettingsRepository(session),
        team_repo=SqlTeamRepository(session),
        audit_repo=SqlAuditLogRepository(session),
    )


def get_workload_service(session: AsyncSession = Depends(get_session)) -> AgentWorkloadService:
    return AgentWorkloadService(
        agent_repo=SqlAgentRepository(session),
        client_repo=SqlClientRepository(session),
        audit_repo=SqlAuditLogRepository(session),
    )


def get_actor_id(x_user_id: int | None = Header(default=None)) -> int:
    """Staff user id from the X-User-Id header (set by the auth gateway)."""
    if x_user_id is None:
        raise HTTPException(status_code=401, detail="Authentication required")
    return x_user_id


def require_permission(permission: Permission):
    """Build a dependency that returns the acting staff user if allowed."""

    async def _dependency(
        actor_id: int = Depends(get_actor_id),
        authorizer: AuthorizeStaffUseCase = Depends(get_authorizer),
    ) -> Agent:
        return await authorizer.execute(actor_id, permission)

    return _dependency
