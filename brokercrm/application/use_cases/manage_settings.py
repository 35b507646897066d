"""SmartAssignmentSettingsService — CRUD over the global row and team overrides."""

from __future__ import annotations

import logging
from datetime import datetime, timezone

from brokercrm.application.ports.audit_repo import AuditLogRepository
from brokercrm.application.ports.settings_repo import SmartAssignmentSettingsRepository
from brokercrm.application.ports.team_repo import TeamRepository
from brokercrm.domain.entities.audit_log import AuditLog
from brokercrm.domain.entities.smart_assignment_setting import (
    HEURISTIC_FLAGS,
    SmartAssignmentSetting,
)
from brokercrm.domain.errors import NotFoundError
from brokercrm.domain.value_objects.enums import AuditAction

logger = logging.getLogger(__name__)


def default_setting(team_id: int | None = None) -> SmartAssignmentSetting:
    """Unsaved defaults: switched off, every heuristic on."""
    return SmartAssignmentSetting(id=None, team_id=team_id, is_enabled=False)


class SmartAssignmentSettingsService:
    def __init__(
        self,
        settings_repo: SmartAssignmentSettingsRepository,
        team_repo: TeamRepository,
        audit_repo: AuditLogRepository,
    ):
        self._settings = settings_repo
        self._teams = team_repo
        self._audit = audit_repo

    async def _find(self, team_id: int | None) -> SmartAssignmentSetting | None:
        if team_id is None:
            return await self._settings.get_global()
        return await self._settings.get_by_team(team_id)

    async def _ensure_team(self, team_id: int | None) -> None:
        if team_id is not None and await self._teams.get_by_id(team_id) is None:
            raise NotFoundError("Team", team_id)

    async def get(self, team_id: int | None = None) -> SmartAssignmentSetting:
        """Stored row for the scope, or unsaved defaults when none exists."""
        existing = await self._find(team_id)
        return existing if existing is not None else default_setting(team_id)

    async def list_team_overrides(self) -> list[SmartAssignmentSetting]:
        return await self._settings.list_team_overrides()

    async def upsert(
        self,
        team_id: int | None,
        is_enabled: bool | None,
        flags: dict[str, bool],
        actor_id: int | None = None,
        enabled_if_new: bool = False,
    ) -> SmartAssignmentSetting:
        """Create or update the row of the given scope.

        Only the given flags are written. ``is_enabled=None`` keeps the
        stored value; a row created here starts with ``enabled_if_new``.
        """
        unknown = set(flags) - set(HEURISTIC_FLAGS)
        if unknown:
            raise ValueError(f"Unknown heuristic flags: {sorted(unknown)}")
        await self._ensure_team(team_id)

        now = datetime.now(timezone.utc)
        setting = await self._find(team_id)
        if setting is None:
            setting = default_setting(team_id)
            setting.is_enabled = enabled_if_new
            setting.created_at = now
        if is_enabled is not None:
            setting.is_enabled = is_enabled
        for name, value in flags.items():
            setattr(setting, name, value)
        setting.updated_at = now
        setting = await self._settings.save(setting)

        details: dict = {"team_id": team_id if team_id is not None else "global"}
        if is_enabled is not None:
            details["is_enabled"] = is_enabled
        details["settings"] = flags
        await self._audit.save(
            AuditLog(
                id=None,
                action=AuditAction.SMART_ASSIGNMENT_CONFIG,
                user_id=actor_id,
                target_type="smart_assignment_setting",
                target_id=str(setting.id),
                details=details,
            )
        )
        logger.info(
            "Smart assignment settings saved (scope=%s, enabled=%s)",
            setting.scope.value, setting.is_enabled,
        )
        return setting

    async def toggle(
        self,
        is_enabled: bool,
        team_id: int | None = None,
        actor_id: int | None = None,
    ) -> SmartAssignmentSetting:
        """Flip the enabled flag, creating the row with all heuristics on if missing."""
        await self._ensure_team(team_id)

        now = datetime.now(timezone.utc)
        setting = await self._find(team_id)
        if setting is None:
            setting = default_setting(team_id)
            setting.created_at = now
        setting.is_enabled = is_enabled
        setting.updated_at = now
        setting = await self._settings.save(setting)

        await self._audit.save(
            AuditLog(
                id=None,
                action=AuditAction.SMART_ASSIGNMENT_TOGGLE,
                user_id=actor_id,
                target_type="smart_assignment_setting",
                target_id=str(setting.id),
                details={
                    "team_id": team_id if team_id is not None else "global",
                    "is_enabled": is_enabled,
                },
            )
        )
        logger.info(
            "Smart assignment %s (scope=%s)",
            "enabled" if is_enabled else "disabled", setting.scope.value,
        )
        return setting

    async def delete(self, setting_id: int, actor_id: int | None = None) -> None:
        setting = await self._settings.get_by_id(setting_id)
        if setting is None:
            raise NotFoundError("Smart assignment setting", setting_id)

        await self._settings.delete(setting_id)
        await self._audit.save(
            AuditLog(
                id=None,
                action=AuditAction.SMART_ASSIGNMENT_DELETE,
                user_id=actor_id,
                target_type="smart_assignment_setting",
                target_id=str(setting_id),
                details={"setting_id": setting_id, "team_id": setting.team_id},
            )
        )
        logger.info("Smart assignment setting %d deleted", setting_id)
