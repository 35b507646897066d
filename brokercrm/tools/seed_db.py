"""Seed database from CSV files.

Usage:
    python -m brokercrm.tools.seed_db
    python -m brokercrm.tools.seed_db --data-dir data
    python -m brokercrm.tools.seed_db --drop  # drop existing data first
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from brokercrm.adapters.csv_loader.loader import load_agents, load_clients, load_teams
from brokercrm.adapters.persistence.database import async_session_factory
from brokercrm.adapters.persistence.models import (
    AgentModel,
    AuditLogModel,
    ClientAssignmentModel,
    ClientModel,
    RoleModel,
    RoundRobinStateModel,
    SmartAssignmentSettingModel,
    TeamModel,
)
from brokercrm.config import settings
from brokercrm.domain.value_objects.enums import Permission

logger = logging.getLogger(__name__)

DEFAULT_ROLES: dict[str, list[str]] = {
    "Administrator": [p.value for p in Permission],
    "Sales Manager": [Permission.TEAM_MANAGE.value, Permission.CLIENT_EDIT.value, Permission.CLIENT_VIEW.value],
    "Team Leader": [Permission.CLIENT_EDIT.value, Permission.CLIENT_VIEW.value],
    "Agent": [Permission.CLIENT_VIEW.value],
}


async def _drop_all(session: AsyncSession) -> None:
    # children first
    for model in (
        AuditLogModel,
        ClientAssignmentModel,
        ClientModel,
        SmartAssignmentSettingModel,
        RoundRobinStateModel,
        AgentModel,
        TeamModel,
        RoleModel,
    ):
        await session.execute(delete(model))
    logger.info("Existing data dropped")


async def _ensure_roles(session: AsyncSession) -> dict[str, int]:
    existing = {r.name.lower(): r.id for r in (await session.execute(select(RoleModel))).scalars()}
    created = 0
    for name, permissions in DEFAULT_ROLES.items():
        if name.lower() in existing:
            continue
        role = RoleModel(name=name, permissions=permissions)
        session.add(role)
        await session.flush()
        existing[name.lower()] = role.id
        created += 1
    logger.info("Roles: %d created, %d total", created, len(existing))
    return existing


async def _seed_teams(session: AsyncSession, path: Path) -> dict[str, int]:
    team_ids = {t.name: t.id for t in (await session.execute(select(TeamModel))).scalars()}
    if not path.exists():
        logger.warning("%s not found, skipping teams", path)
        return team_ids

    for row in load_teams(path):
        if row["name"] in team_ids:
            continue
        team = TeamModel(**row)
        session.add(team)
        await session.flush()
        team_ids[team.name] = team.id
    return team_ids


async def _seed_agents(
    session: AsyncSession, path: Path, team_ids: dict[str, int], role_ids: dict[str, int]
) -> int:
    if not path.exists():
        logger.warning("%s not found, skipping agents", path)
        return 0

    known = set((await session.execute(select(AgentModel.email))).scalars())
    count = 0
    for row in load_agents(path):
        if row["email"] in known:
            continue
        team_name = row.pop("team_name")
        role_name = row.pop("role_name")
        if team_name and team_name not in team_ids:
            logger.warning("Agent %s: unknown team %r", row["email"], team_name)
        row["team_id"] = team_ids.get(team_name) if team_name else None
        row["role_id"] = role_ids.get((role_name or "agent").lower())
        row["languages"] = sorted(row["languages"])
        row["max_workload"] = row["max_workload"] or settings.default_max_workload
        session.add(AgentModel(**row))
        known.add(row["email"])
        count += 1
    await session.flush()
    return count


async def _seed_clients(session: AsyncSession, path: Path, team_ids: dict[str, int]) -> int:
    if not path.exists():
        logger.warning("%s not found, skipping clients", path)
        return 0

    known = set((await session.execute(select(ClientModel.email))).scalars())
    count = 0
    for row in load_clients(path):
        if row["email"] in known:
            continue
        team_name = row.pop("team_name")
        row["team_id"] = team_ids.get(team_name) if team_name else None
        session.add(ClientModel(**row))
        known.add(row["email"])
        count += 1
    await session.flush()
    return count


async def _ensure_global_settings(session: AsyncSession) -> bool:
    existing = (
        await session.execute(
            select(SmartAssignmentSettingModel).where(SmartAssignmentSettingModel.team_id.is_(None))
        )
    ).scalar_one_or_none()
    if existing is not None:
        return False
    session.add(SmartAssignmentSettingModel(team_id=None, is_enabled=True))
    await session.flush()
    return True


async def seed(data_dir: Path, drop: bool = False) -> dict[str, int]:
    """Load teams, agents and clients from *data_dir*; rows already present are skipped.

    Returns the number of rows created per entity.
    """
    async with async_session_factory() as session:
        if drop:
            await _drop_all(session)

        role_ids = await _ensure_roles(session)
        team_ids = await _seed_teams(session, data_dir / "teams.csv")
        agents = await _seed_agents(session, data_dir / "agents.csv", team_ids, role_ids)
        clients = await _seed_clients(session, data_dir / "clients.csv", team_ids)
        settings_created = await _ensure_global_settings(session)

        await session.commit()

    counts = {
        "teams": len(team_ids),
        "agents": agents,
        "clients": clients,
        "global_settings_created": int(settings_created),
    }
    logger.info("Seed complete: %s", counts)
    return counts


def main(argv: list[str] | None = None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s | %(message)s")

    parser = argparse.ArgumentParser(description="Seed the CRM database from CSV files")
    parser.add_argument("--data-dir", default=settings.csv_data_path, help="directory with the CSV files")
    parser.add_argument("--drop", action="store_true", help="delete existing data first")
    args = parser.parse_args(argv)

    data_dir = Path(args.data_dir)
    if not data_dir.is_dir():
        logger.error("Data directory not found: %s", data_dir)
        return 1

    asyncio.run(seed(data_dir, drop=args.drop))
    return 0


if __name__ == "__main__":
    sys.exit(main())
