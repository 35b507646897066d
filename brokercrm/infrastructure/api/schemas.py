"""Pydantic request/response schemas for the CRM API."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from brokercrm.domain.value_objects.enums import ClientStatus


# ── smart assignment settings ───────────────────────────────────────────────

class HeuristicFlags(BaseModel):
    use_workload_balance: bool = True
    use_language_match: bool = True
    use_performance_history: bool = True
    use_availability: bool = True
    use_round_robin: bool = True


class SmartAssignmentSettingIn(HeuristicFlags):
    """Global (team_id omitted) or team-scoped settings.

    Only the fields present in the body are written; the rest keep their
    stored values (or the defaults when the row is created).
    """
    team_id: Optional[int] = None
    is_enabled: Optional[bool] = None


class TeamOverrideIn(HeuristicFlags):
    """Team override — team_id is mandatory; a new override starts enabled."""
    team_id: int
    is_enabled: Optional[bool] = None


class ToggleIn(BaseModel):
    is_enabled: bool
    team_id: Optional[int] = None


# ── clients ─────────────────────────────────────────────────────────────────

class ClientIn(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name:  str = Field(..., min_length=1, max_length=100)
    email:      EmailStr
    phone:      Optional[str] = Field(default=None, max_length=50)
    country:    Optional[str] = Field(default=None, max_length=100)
    language:   Optional[str] = Field(default=None, min_length=2, max_length=10, examples=["en"])
    team_id:    Optional[int] = None
    status:     ClientStatus = ClientStatus.NEW


class ManualAssignIn(BaseModel):
    """Fields left out of the body are not changed; null clears them."""
    assigned_agent_id: Optional[int] = None
    team_id: Optional[int] = None


# ── agents ──────────────────────────────────────────────────────────────────

class WorkloadAdjustIn(BaseModel):
    max_workload: Optional[int] = None
    is_available: Optional[bool] = None
