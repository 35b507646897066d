"""Domain enums — pure Python, no external dependencies."""

from enum import Enum


class Department(str, Enum):
    SALES = "sales"
    RETENTION = "retention"


class ClientStatus(str, Enum):
    NEW = "new"
    CONTACTED = "contacted"
    INTERESTED = "interested"
    FTD = "ftd"
    STD = "std"
    LOST = "lost"


class SettingsScope(str, Enum):
    GLOBAL = "global"
    TEAM = "team"


class AssignmentOutcome(str, Enum):
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    DISABLED = "disabled"
    FAILED = "failed"


class AssignmentMethod(str, Enum):
    SMART = "smart"
    MANUAL = "manual"


class AuditAction(str, Enum):
    SMART_ASSIGNMENT_CONFIG = "smart_assignment_config"
    SMART_ASSIGNMENT_TOGGLE = "smart_assignment_toggle"
    SMART_ASSIGNMENT_DELETE = "smart_assignment_delete"
    WORKLOAD_ADJUSTED = "workload_adjusted"
    CLIENT_CREATE = "client_create"
    CLIENT_ASSIGN = "client_assign"


class Permission(str, Enum):
    TEAM_MANAGE = "team.manage"
    CLIENT_EDIT = "client.edit"
    CLIENT_VIEW = "client.view"
