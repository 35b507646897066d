"""Team entity — a sales or retention desk."""

from dataclasses import dataclass

from brokercrm.domain.value_objects.enums import Department


@dataclass
class Team:
    id: int | None
    name: str
    department: Department = Department.SALES
    language_code: str | None = None
    leader_id: int | None = None
