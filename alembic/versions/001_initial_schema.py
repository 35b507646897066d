"""Initial schema — CRM staff, clients and smart assignment tables.

Revision ID: 001
Revises: None
Create Date: 2026-10-19
"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import ARRAY, JSONB

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def upgrade() -> None:
    # Roles
    op.create_table(
        "roles",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("description", sa.Text, nullable=True),
        sa.Column("permissions", JSONB, nullable=False, server_default="[]"),
    )

    # Teams (leader FK added after users exists)
    op.create_table(
        "teams",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(100), unique=True, nullable=False),
        sa.Column("department", sa.String(20), nullable=False, server_default="sales"),
        sa.Column("language_code", sa.String(10), nullable=True),
        sa.Column("leader_id", sa.Integer, nullable=True),
        _created_at(),
    )

    # Staff users (agents)
    op.create_table(
        "users",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("role_id", sa.Integer, sa.ForeignKey("roles.id"), nullable=True),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id"), nullable=True),
        sa.Column(
            "languages", ARRAY(sa.String(10)), nullable=False, server_default="{}"
        ),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("is_available", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("current_workload", sa.Integer, nullable=False, server_default="0"),
        sa.Column("max_workload", sa.Integer, nullable=False, server_default="50"),
        sa.Column("performance_score", sa.Float, nullable=True),
        sa.Column("last_assignment_seq", sa.Integer, nullable=True),
        sa.Column("last_assigned_at", sa.DateTime(timezone=True), nullable=True),
        _created_at(),
    )
    op.create_index("idx_users_team", "users", ["team_id"])
    op.create_foreign_key("fk_teams_leader", "teams", "users", ["leader_id"], ["id"])

    # Clients
    op.create_table(
        "clients",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.String(255), unique=True, nullable=False),
        sa.Column("phone", sa.String(50), nullable=True),
        sa.Column("country", sa.String(100), nullable=True),
        sa.Column("language", sa.String(10), nullable=True),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id"), nullable=True),
        sa.Column(
            "assigned_agent_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True
        ),
        sa.Column("status", sa.String(20), nullable=False, server_default="new"),
        sa.Column("is_active", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("has_ftd", sa.Boolean, nullable=False, server_default="false"),
        _created_at(),
    )
    op.create_index("idx_clients_agent", "clients", ["assigned_agent_id"])
    op.create_index("idx_clients_team", "clients", ["team_id"])

    # Smart assignment settings: one global row (team_id NULL) + one row per team
    op.create_table(
        "smart_assignment_settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "team_id",
            sa.Integer,
            sa.ForeignKey("teams.id", ondelete="CASCADE"),
            unique=True,
            nullable=True,
        ),
        sa.Column("is_enabled", sa.Boolean, nullable=False, server_default="false"),
        sa.Column("use_workload_balance", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("use_language_match", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("use_performance_history", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("use_availability", sa.Boolean, nullable=False, server_default="true"),
        sa.Column("use_round_robin", sa.Boolean, nullable=False, server_default="true"),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index(
        "uq_smart_assignment_global",
        "smart_assignment_settings",
        [sa.text("(team_id IS NULL)")],
        unique=True,
        postgresql_where=sa.text("team_id IS NULL"),
    )

    # Assignment history
    op.create_table(
        "client_assignments",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column(
            "client_id",
            sa.Integer,
            sa.ForeignKey("clients.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("agent_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("team_id", sa.Integer, sa.ForeignKey("teams.id"), nullable=True),
        sa.Column("score", sa.Float, nullable=True),
        sa.Column("method", sa.String(20), nullable=False, server_default="smart"),
        sa.Column("reason", sa.Text, nullable=True),
        sa.Column("rule_trace", JSONB, nullable=True),
        sa.Column(
            "assigned_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )
    op.create_index("idx_assignments_client", "client_assignments", ["client_id"])
    op.create_index("idx_assignments_agent", "client_assignments", ["agent_id"])

    # Audit log
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer, sa.ForeignKey("users.id"), nullable=True),
        sa.Column("action", sa.String(50), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=True),
        sa.Column("target_id", sa.String(100), nullable=True),
        sa.Column("details", JSONB, nullable=True),
        _created_at(),
    )
    op.create_index("idx_audit_logs_action", "audit_logs", ["action"])

    # Round Robin State
    op.create_table(
        "round_robin_state",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("rr_key", sa.String(200), unique=True, nullable=False),
        sa.Column("counter", sa.Integer, nullable=False, server_default="0"),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    )


def downgrade() -> None:
    op.drop_table("round_robin_state")
    op.drop_table("audit_logs")
    op.drop_table("client_assignments")
    op.drop_index("uq_smart_assignment_global", table_name="smart_assignment_settings")
    op.drop_table("smart_assignment_settings")
    op.drop_table("clients")
    op.drop_constraint("fk_teams_leader", "teams", type_="foreignkey")
    op.drop_table("users")
    op.drop_table("teams")
    op.drop_table("roles")
