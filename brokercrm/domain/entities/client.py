"""Client entity — a brokerage customer moving from sales to retention."""

from dataclasses import dataclass
from datetime import datetime

from brokercrm.domain.value_objects.enums import ClientStatus


@dataclass
class Client:
    id: int | None
    first_name: str
    last_name: str
    email: str
    phone: str | None = None
    country: str | None = None
    language: str | None = None
    team_id: int | None = None
    assigned_agent_id: int | None = None
    status: ClientStatus = ClientStatus.NEW
    is_active: bool = True
    has_ftd: bool = False
    created_at: datetime | None = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def is_assigned(self) -> bool:
        return self.assigned_agent_id is not None
