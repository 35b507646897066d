"""Smart assignment settings endpoints — global row + team overrides."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.adapters.persistence.database import get_session
from brokercrm.application.use_cases.manage_settings import SmartAssignmentSettingsService
from brokercrm.domain.entities.agent import Agent
from brokercrm.domain.entities.smart_assignment_setting import SmartAssignmentSetting
from brokercrm.domain.value_objects.enums import Permission
from brokercrm.infrastructure.api.dependencies import get_settings_service, require_permission
from brokercrm.infrastructure.api.schemas import (
    HeuristicFlags,
    SmartAssignmentSettingIn,
    TeamOverrideIn,
    ToggleIn,
)

router = APIRouter(prefix="/smart-assignment-settings", tags=["smart-assignment"])

_can_manage = require_permission(Permission.TEAM_MANAGE)


@router.get("")
async def get_settings(
    team_id: int | None = None,
    _: Agent = Depends(_can_manage),
    service: SmartAssignmentSettingsService = Depends(get_settings_service),
):
    """Settings of one scope (global when team_id is omitted), defaults if unset."""
    setting = await service.get(team_id)
    return _serialize_setting(setting)


@router.get("/teams")
async def list_team_settings(
    _: Agent = Depends(_can_manage),
    service: SmartAssignmentSettingsService = Depends(get_settings_service),
):
    """All team-specific overrides."""
    overrides = await service.list_team_overrides()
    return [_serialize_setting(s) for s in overrides]


@router.post("")
async def save_settings(
    payload: SmartAssignmentSettingIn,
    actor: Agent = Depends(_can_manage),
    service: SmartAssignmentSettingsService = Depends(get_settings_service),
    session: AsyncSession = Depends(get_session),
):
    """Create or update the settings row of the payload's scope."""
    setting = await service.upsert(
        team_id=payload.team_id,
        is_enabled=payload.is_enabled,
        flags=_flags(payload),
        actor_id=actor.id,
    )
    await session.commit()
    return _serialize_setting(setting)


@router.post("/teams")
async def save_team_override(
    payload: TeamOverrideIn,
    actor: Agent = Depends(_can_manage),
    service: SmartAssignmentSettingsService = Depends(get_settings_service),
    session: AsyncSession = Depends(get_session),
):
    """Create or update a team override (team_id required, enabled when new)."""
    setting = await service.upsert(
        team_id=payload.team_id,
        is_enabled=payload.is_enabled,
        flags=_flags(payload),
        actor_id=actor.id,
        enabled_if_new=True,
    )
    await session.commit()
    return _serialize_setting(setting)


@router.patch("/toggle")
async def toggle_settings(
    payload: ToggleIn,
    actor: Agent = Depends(_can_manage),
    service: SmartAssignmentSettingsService = Depends(get_settings_service),
    session: AsyncSession = Depends(get_session),
):
    setting = await service.toggle(
        is_enabled=payload.is_enabled,
        team_id=payload.team_id,
        actor_id=actor.id,
    )
    await session.commit()
    return _serialize_setting(setting)


@router.delete("/{setting_id}")
async def delete_settings(
    setting_id: int,
    actor: Agent = Depends(_can_manage),
    service: SmartAssignmentSettingsService = Depends(get_settings_service),
    session: AsyncSession = Depends(get_session),
):
    await service.delete(setting_id, actor_id=actor.id)
    await session.commit()
    return {"success": True}


def _flags(payload: HeuristicFlags) -> dict[str, bool]:
    """Heuristic flags present in the request body."""
    return payload.model_dump(include=set(HeuristicFlags.model_fields), exclude_unset=True)


def _serialize_setting(s: SmartAssignmentSetting) -> dict:
    return {
        "id": s.id,
        "team_id": s.team_id,
        "scope": s.scope.value,
        "is_enabled": s.is_enabled,
        **s.flags(),
        "created_at": s.created_at.isoformat() if s.created_at else None,
        "updated_at": s.updated_at.isoformat() if s.updated_at else None,
    }
