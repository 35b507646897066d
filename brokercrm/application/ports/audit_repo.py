"""Port interface for the audit trail."""

from abc import ABC, abstractmethod

from brokercrm.domain.entities.audit_log import AuditLog


class AuditLogRepository(ABC):
    @abstractmethod
    async def save(self, entry: AuditLog) -> AuditLog:
        ...
