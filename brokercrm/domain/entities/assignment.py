"""ClientAssignment entity — the result of routing a client to an agent."""

from dataclasses import dataclass, field
from datetime import datetime

from brokercrm.domain.value_objects.enums import AssignmentMethod


@dataclass
class ClientAssignment:
    id: int | None
    client_id: int
    agent_id: int | None
    team_id: int | None = None
    score: float | None = None
    method: AssignmentMethod = AssignmentMethod.SMART
    reason: str | None = None
    rule_trace: dict | None = field(default=None)
    assigned_at: datetime | None = None
