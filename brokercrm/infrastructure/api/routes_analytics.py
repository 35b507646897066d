"""Analytics endpoints — assignment summary + agent load."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.adapters.persistence.database import get_session
from brokercrm.adapters.persistence.models import (
    AgentModel,
    ClientAssignmentModel,
    ClientModel,
    TeamModel,
)
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.value_objects.enums import Permission
from brokercrm.infrastructure.api.dependencies import require_permission

router = APIRouter(prefix="/analytics", tags=["analytics"])

_can_manage = require_permission(Permission.TEAM_MANAGE)


@router.get("/assignments")
async def assignment_summary(
    _: Agent = Depends(_can_manage),
    session: AsyncSession = Depends(get_session),
):
    """Aggregate assignment stats for the dashboard."""
    # Clients
    total_clients = (
        await session.execute(select(func.count(ClientModel.id)))
    ).scalar() or 0

    assigned = (
        await session.execute(
            select(func.count(ClientModel.id)).where(
                ClientModel.assigned_agent_id.is_not(None)
            )
        )
    ).scalar() or 0

    # Active clients waiting in the queue
    unassigned = (
        await session.execute(
            select(func.count(ClientModel.id)).where(
                ClientModel.assigned_agent_id.is_(None),
                ClientModel.is_active.is_(True),
            )
        )
    ).scalar() or 0

    # By method (smart / manual)
    method_rows = (
        await session.execute(
            select(
                ClientAssignmentModel.method,
                func.count(ClientAssignmentModel.id),
            ).group_by(ClientAssignmentModel.method)
        )
    ).all()
    by_method = {row[0]: row[1] for row in method_rows}

    # By team
    team_rows = (
        await session.execute(
            select(TeamModel.name, func.count(ClientModel.id))
            .join(ClientModel, TeamModel.id == ClientModel.team_id)
            .group_by(TeamModel.name)
        )
    ).all()
    by_team = {row[0]: row[1] for row in team_rows}

    avg_score = (
        await session.execute(
            select(func.avg(ClientAssignmentModel.score)).where(
                ClientAssignmentModel.method == "smart"
            )
        )
    ).scalar()

    return {
        "total_clients": total_clients,
        "assigned": assigned,
        "unassigned": unassigned,
        "by_method": by_method,
        "by_team": by_team,
        "average_smart_score": round(float(avg_score), 2) if avg_score is not None else None,
    }


@router.get("/agents")
async def agent_load(
    _: Agent = Depends(_can_manage),
    session: AsyncSession = Depends(get_session),
):
    """Agent load distribution."""
    result = await session.execute(
        select(
            AgentModel.id,
            AgentModel.name,
            AgentModel.current_workload,
            AgentModel.max_workload,
            AgentModel.is_available,
            AgentModel.performance_score,
            TeamModel.name.label("team_name"),
        )
        .outerjoin(TeamModel, AgentModel.team_id == TeamModel.id)
        .where(AgentModel.is_active.is_(True))
        .order_by(AgentModel.current_workload.desc())
    )
    agents = result.all()

    return {
        "total_agents": len(agents),
        "agents": [
            {
                "id": a.id,
                "name": a.name,
                "team_name": a.team_name,
                "current_workload": a.current_workload,
                "max_workload": a.max_workload,
                "utilization_rate": (
                    round(a.current_workload / a.max_workload * 100, 2)
                    if a.max_workload > 0 else 0.0
                ),
                "is_available": a.is_available,
                "performance_score": a.performance_score,
            }
            for a in agents
        ],
    }
