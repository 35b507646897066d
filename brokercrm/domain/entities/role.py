"""Role entity — a named set of permission strings."""

from dataclasses import dataclass, field

ADMINISTRATOR_ROLE = "administrator"


@dataclass
class Role:
    id: int | None
    name: str
    permissions: list[str] = field(default_factory=list)

    def is_administrator(self) -> bool:
        return self.name.strip().lower() == ADMINISTRATOR_ROLE

    def allows(self, permission: str) -> bool:
        return self.is_administrator() or permission in self.permissions
