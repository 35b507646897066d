"""SmartAssignmentSetting entity — one global row plus optional team overrides."""

from dataclasses import dataclass
from datetime import datetime

from brokercrm.domain.value_objects.enums import SettingsScope

HEURISTIC_FLAGS = (
    "use_workload_balance",
    "use_language_match",
    "use_performance_history",
    "use_availability",
    "use_round_robin",
)


@dataclass
class SmartAssignmentSetting:
    id: int | None
    team_id: int | None = None
    is_enabled: bool = False
    use_workload_balance: bool = True
    use_language_match: bool = True
    use_performance_history: bool = True
    use_availability: bool = True
    use_round_robin: bool = True
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def scope(self) -> SettingsScope:
        return SettingsScope.GLOBAL if self.team_id is None else SettingsScope.TEAM

    def flags(self) -> dict[str, bool]:
        return {name: getattr(self, name) for name in HEURISTIC_FLAGS}
