"""Client endpoints — intake with smart assignment, manual override, batch pass."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from brokercrm.adapters.persistence.database import get_session
from brokercrm.adapters.persistence.models import ClientModel
from brokercrm.adapters.persistence.repositories import SqlClientRepository
from brokercrm.application.use_cases.assign_client import (
    AssignClientUseCase,
    BatchAssignUseCase,
)
from brokercrm.application.use_cases.create_client import CreateClientUseCase
from brokercrm.application.use_cases.manual_assign import UNSET, ManualAssignUseCase
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.client import Client
from brokercrm.domain.value_objects.enums import AssignmentOutcome, Permission
from brokercrm.infrastructure.api.dependencies import (
    get_assign_client_uc,
    get_batch_assign_uc,
    get_client_repo,
    get_create_client_uc,
    get_manual_assign_uc,
    require_permission,
)
from brokercrm.infrastructure.api.schemas import ClientIn, ManualAssignIn

router = APIRouter(prefix="/clients", tags=["clients"])

_can_view = require_permission(Permission.CLIENT_VIEW)
_can_edit = require_permission(Permission.CLIENT_EDIT)


@router.get("")
async def list_clients(
    unassigned: bool = False,
    _: Agent = Depends(_can_view),
    session: AsyncSession = Depends(get_session),
):
    """List clients with their assigned agent and team."""
    query = (
        select(ClientModel)
        .options(joinedload(ClientModel.assigned_agent), joinedload(ClientModel.team))
        .order_by(ClientModel.id)
    )
    if unassigned:
        query = query.where(ClientModel.assigned_agent_id.is_(None))
    result = await session.execute(query)
    clients = result.unique().scalars().all()

    return {
        "total": len(clients),
        "clients": [_serialize_client_row(c) for c in clients],
    }


@router.get("/{client_id}")
async def get_client(
    client_id: int,
    _: Agent = Depends(_can_view),
    session: AsyncSession = Depends(get_session),
):
    result = await session.execute(
        select(ClientModel)
        .options(joinedload(ClientModel.assigned_agent), joinedload(ClientModel.team))
        .where(ClientModel.id == client_id)
    )
    client = result.unique().scalar_one_or_none()
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    return _serialize_client_row(client)


@router.post("")
async def create_client(
    payload: ClientIn,
    actor: Agent = Depends(_can_edit),
    create_uc: CreateClientUseCase = Depends(get_create_client_uc),
    session: AsyncSession = Depends(get_session),
):
    """Create a client and run smart assignment for it."""
    client = Client(id=None, **payload.model_dump())
    client, result = await create_uc.execute(client, actor_id=actor.id)
    await session.commit()

    return {
        "client": _serialize_client(client),
        "assignment": result.to_dict(),
    }


@router.post("/auto-assign")
async def auto_assign_unassigned(
    actor: Agent = Depends(_can_edit),
    batch_uc: BatchAssignUseCase = Depends(get_batch_assign_uc),
    session: AsyncSession = Depends(get_session),
):
    """Run smart assignment for every active unassigned client."""
    results = await batch_uc.execute(actor_id=actor.id)
    await session.commit()

    counts = {outcome.value: 0 for outcome in AssignmentOutcome}
    for r in results:
        counts[r.outcome.value] += 1

    return {
        "status": "ok",
        "total_processed": len(results),
        **counts,
        "results": [r.to_dict() for r in results],
    }


@router.post("/{client_id}/auto-assign")
async def auto_assign_client(
    client_id: int,
    actor: Agent = Depends(_can_edit),
    client_repo: SqlClientRepository = Depends(get_client_repo),
    assign_uc: AssignClientUseCase = Depends(get_assign_client_uc),
    session: AsyncSession = Depends(get_session),
):
    """Re-run smart assignment for one client."""
    client = await client_repo.get_by_id(client_id)
    if not client:
        raise HTTPException(status_code=404, detail="Client not found")

    result = await assign_uc.execute(client, actor_id=actor.id)
    await session.commit()

    status = "error" if result.outcome == AssignmentOutcome.FAILED else "ok"
    return {"status": status, **result.to_dict()}


@router.patch("/{client_id}/assign")
async def assign_client_manually(
    client_id: int,
    payload: ManualAssignIn,
    actor: Agent = Depends(_can_edit),
    manual_uc: ManualAssignUseCase = Depends(get_manual_assign_uc),
    session: AsyncSession = Depends(get_session),
):
    """Set or clear the client's agent and/or team."""
    provided = payload.model_fields_set
    client = await manual_uc.execute(
        client_id,
        agent_id=payload.assigned_agent_id if "assigned_agent_id" in provided else UNSET,
        team_id=payload.team_id if "team_id" in provided else UNSET,
        actor_id=actor.id,
    )
    await session.commit()
    return _serialize_client(client)


def _serialize_client(c: Client) -> dict:
    return {
        "id": c.id,
        "first_name": c.first_name,
        "last_name": c.last_name,
        "full_name": c.full_name,
        "email": c.email,
        "phone": c.phone,
        "country": c.country,
        "language": c.language,
        "team_id": c.team_id,
        "assigned_agent_id": c.assigned_agent_id,
        "assignment_status": "assigned" if c.is_assigned() else "unassigned",
        "status": c.status.value,
        "is_active": c.is_active,
        "has_ftd": c.has_ftd,
    }


def _serialize_client_row(c: ClientModel) -> dict:
    """Convert a ClientModel (with loaded relationships) to an API response dict."""
    return {
        "id": c.id,
        "first_name": c.first_name,
        "last_name": c.last_name,
        "email": c.email,
        "phone": c.phone,
        "country": c.country,
        "language": c.language,
        "status": c.status,
        "is_active": c.is_active,
        "has_ftd": c.has_ftd,
        "created_at": c.created_at.isoformat() if c.created_at else None,
        "team_id": c.team_id,
        "team_name": c.team.name if c.team else None,
        "assigned_agent_id": c.assigned_agent_id,
        "assigned_agent_name": c.assigned_agent.name if c.assigned_agent else None,
        "assignment_status": "assigned" if c.assigned_agent_id else "unassigned",
    }
