"""Agent entity — a staff user who works a book of clients."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class Agent:
    id: int | None
    name: str
    email: str
    team_id: int | None = None
    role_id: int | None = None
    languages: set[str] = field(default_factory=set)
    is_active: bool = True
    is_available: bool = True
    current_workload: int = 0
    max_workload: int = 50
    performance_score: float | None = None  # 0..100 conversion rate
    last_assignment_seq: int | None = None
    last_assigned_at: datetime | None = None

    def speaks(self, language: str | None) -> bool:
        if not language:
            return False
        return language.strip().lower() in {lang.lower() for lang in self.languages}

    def utilization_pct(self) -> float:
        if self.max_workload <= 0:
            return 0.0
        return round(self.current_workload / self.max_workload * 100, 2)
