"""Agent workload endpoints — view, adjust, recalculate."""

from __future__ import annotations

from dataclasses import asdict

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.adapters.persistence.database import get_session
from brokercrm.application.use_cases.agent_workload import AgentWorkloadService
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.value_objects.enums import Permission
from brokercrm.infrastructure.api.dependencies import get_workload_service, require_permission
from brokercrm.infrastructure.api.schemas import WorkloadAdjustIn

router = APIRouter(prefix="/agents", tags=["agents"])

_can_manage = require_permission(Permission.TEAM_MANAGE)


@router.get("/{agent_id}/workload")
async def get_workload(
    agent_id: int,
    _: Agent = Depends(_can_manage),
    service: AgentWorkloadService = Depends(get_workload_service),
):
    view = await service.get(agent_id)
    return asdict(view)


@router.patch("/{agent_id}/workload")
async def adjust_workload(
    agent_id: int,
    payload: WorkloadAdjustIn,
    actor: Agent = Depends(_can_manage),
    service: AgentWorkloadService = Depends(get_workload_service),
    session: AsyncSession = Depends(get_session),
):
    """Change capacity and/or availability of an agent."""
    agent = await service.adjust(
        agent_id,
        max_workload=payload.max_workload,
        is_available=payload.is_available,
        actor_id=actor.id,
    )
    await session.commit()
    return _serialize_agent(agent)


@router.post("/{agent_id}/workload/recalculate")
async def recalculate_workload(
    agent_id: int,
    _: Agent = Depends(_can_manage),
    service: AgentWorkloadService = Depends(get_workload_service),
    session: AsyncSession = Depends(get_session),
):
    agent = await service.recalculate(agent_id)
    await session.commit()
    return _serialize_agent(agent)


def _serialize_agent(a: Agent) -> dict:
    return {
        "id": a.id,
        "name": a.name,
        "team_id": a.team_id,
        "is_active": a.is_active,
        "is_available": a.is_available,
        "current_workload": a.current_workload,
        "max_workload": a.max_workload,
        "utilization_rate": a.utilization_pct(),
    }
