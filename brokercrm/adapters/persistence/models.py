"""SQLAlchemy ORM models — maps to PostgreSQL tables."""

from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brokercrm.adapters.persistence.database import Base


class RoleModel(Base):
    __tablename__ = "roles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    permissions: Mapped[list[str]] = mapped_column(JSONB, nullable=False, default=list)


class TeamModel(Base):
    __tablename__ = "teams"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    department: Mapped[str] = mapped_column(String(20), nullable=False, default="sales")
    language_code: Mapped[str | None] = mapped_column(String(10), nullable=True)
    leader_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", use_alter=True, name="fk_teams_leader"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    agents: Mapped[list["AgentModel"]] = relationship(
        back_populates="team", foreign_keys="AgentModel.team_id"
    )


class AgentModel(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    role_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("roles.id"), nullable=True)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True)
    languages: Mapped[list[str]] = mapped_column(ARRAY(String(10)), nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    current_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    max_workload: Mapped[int] = mapped_column(Integer, nullable=False, default=50)
    performance_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    last_assignment_seq: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_assigned_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    team: Mapped["TeamModel | None"] = relationship(
        back_populates="agents", foreign_keys=[team_id]
    )
    role: Mapped["RoleModel | None"] = relationship()

    __table_args__ = (Index("idx_users_team", "team_id"),)


class ClientModel(Base):
    __tablename__ = "clients"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(50), nullable=True)
    country: Mapped[str | None] = mapped_column(String(100), nullable=True)
    language: Mapped[str | None] = mapped_column(String(10), nullable=True)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True)
    assigned_agent_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="new")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    has_ftd: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    team: Mapped["TeamModel | None"] = relationship()
    assigned_agent: Mapped["AgentModel | None"] = relationship()

    __table_args__ = (
        Index("idx_clients_agent", "assigned_agent_id"),
        Index("idx_clients_team", "team_id"),
    )


class SmartAssignmentSettingModel(Base):
    __tablename__ = "smart_assignment_settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    team_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("teams.id", ondelete="CASCADE"), unique=True, nullable=True
    )
    is_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    use_workload_balance: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    use_language_match: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    use_performance_history: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    use_availability: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    use_round_robin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    # at most one global row
    __table_args__ = (
        Index(
            "uq_smart_assignment_global",
            text("(team_id IS NULL)"),
            unique=True,
            postgresql_where=text("team_id IS NULL"),
        ),
    )


class ClientAssignmentModel(Base):
    __tablename__ = "client_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    client_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("clients.id", ondelete="CASCADE"), nullable=False
    )
    agent_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    team_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("teams.id"), nullable=True)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)
    method: Mapped[str] = mapped_column(String(20), nullable=False, default="smart")
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    rule_trace: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    assigned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    agent: Mapped["AgentModel | None"] = relationship()

    __table_args__ = (
        Index("idx_assignments_client", "client_id"),
        Index("idx_assignments_agent", "agent_id"),
    )


class AuditLogModel(Base):
    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), nullable=True)
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    target_type: Mapped[str | None] = mapped_column(String(50), nullable=True)
    target_id: Mapped[str | None] = mapped_column(String(100), nullable=True)
    details: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (Index("idx_audit_logs_action", "action"),)


class RoundRobinStateModel(Base):
    __tablename__ = "round_robin_state"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rr_key: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    counter: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )
