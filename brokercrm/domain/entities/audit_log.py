"""AuditLog entity — who changed what and when."""

from dataclasses import dataclass
from datetime import datetime

from brokercrm.domain.value_objects.enums import AuditAction


@dataclass
class AuditLog:
    id: int | None
    action: AuditAction
    user_id: int | None = None
    target_type: str | None = None
    target_id: str | None = None
    details: dict | None = None
    created_at: datetime | None = None
