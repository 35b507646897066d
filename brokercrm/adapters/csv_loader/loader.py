"""CSV loader — reads and normalizes team, agent and client export files."""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from brokercrm.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    parse_bool,
    parse_languages,
)

logger = logging.getLogger(__name__)


def _sniff_dialect(sample: str) -> type[csv.Dialect]:
    """Detect the delimiter (comma/semicolon/tab) of spreadsheet exports."""
    if not sample:
        return csv.excel

    first_line = sample.splitlines()[0]
    delims = [";", ",", "\t"]
    counts = {d: first_line.count(d) for d in delims}
    best_delim = max(counts, key=counts.get)

    if counts[best_delim] > 0:
        class DynamicDialect(csv.excel):
            delimiter = best_delim
        return DynamicDialect

    return csv.excel


def _read_csv(file_path: Path, encoding: str = "utf-8-sig") -> list[dict[str, str | None]]:
    """Read a CSV file with BOM handling and column normalization.

    Args:
        file_path: path to the CSV file.
        encoding: file encoding (utf-8-sig strips BOM automatically).

    Returns:
        List of dicts with normalized column names and blank cells as None.
    """
    with open(file_path, encoding=encoding, newline="") as f:
        sample = f.read(4096)
        f.seek(0)
        reader = csv.DictReader(f, dialect=_sniff_dialect(sample))
        if reader.fieldnames is None:
            raise ValueError(f"CSV file {file_path} has no header row")

        col_map = {col: normalize_column_name(col) for col in reader.fieldnames}
        rows = [
            {col_map[k]: clean_string(v) for k, v in raw_row.items() if k is not None}
            for raw_row in reader
        ]

    logger.info("Loaded %d rows from %s (columns: %s)", len(rows), file_path.name, list(col_map.values()))
    return rows


def load_teams(file_path: Path) -> list[dict]:
    """Expected columns: name, department, language (or language_code)."""
    teams = []
    for row in _read_csv(file_path):
        name = clean_string(row.get("name") or row.get("team"))
        if not name:
            logger.warning("Skipping team row without a name: %s", row)
            continue
        teams.append({
            "name": name,
            "department": (row.get("department") or "sales").lower(),
            "language_code": (row.get("language_code") or row.get("language") or "").lower() or None,
        })
    logger.info("Parsed %d teams", len(teams))
    return teams


def load_agents(file_path: Path) -> list[dict]:
    """Expected columns: name, email, team, role, languages, available,
    current_workload, max_workload, performance_score.
    """
    agents = []
    for row in _read_csv(file_path):
        email = clean_string(row.get("email"))
        if not email:
            logger.warning("Skipping agent row without an email: %s", row)
            continue
        agents.append({
            "name": row.get("name") or row.get("full_name") or email,
            "email": email.lower(),
            "team_name": row.get("team") or row.get("team_name"),
            "role_name": row.get("role") or row.get("role_name"),
            "languages": parse_languages(row.get("languages") or row.get("language")),
            "is_active": parse_bool(row.get("active") or row.get("is_active"), True),
            "is_available": parse_bool(row.get("available") or row.get("is_available"), True),
            "current_workload": _parse_int(row.get("current_workload") or row.get("workload")),
            "max_workload": _parse_int(row.get("max_workload")) or None,
            "performance_score": _parse_float(
                row.get("performance_score") or row.get("conversion_rate")
            ),
        })
    logger.info("Parsed %d agents", len(agents))
    return agents


def load_clients(file_path: Path) -> list[dict]:
    """Expected columns: first_name, last_name, email, phone, country,
    language, team.
    """
    clients = []
    for row in _read_csv(file_path):
        email = clean_string(row.get("email"))
        if not email:
            logger.warning("Skipping client row without an email: %s", row)
            continue
        first_name = row.get("first_name")
        last_name = row.get("last_name")
        if not first_name and row.get("name"):
            first_name, _, last_name = row["name"].partition(" ")
        clients.append({
            "first_name": first_name or "",
            "last_name": last_name or "",
            "email": email.lower(),
            "phone": row.get("phone"),
            "country": row.get("country"),
            "language": (row.get("language") or "").lower() or None,
            "team_name": row.get("team") or row.get("team_name"),
        })
    logger.info("Parsed %d clients", len(clients))
    return clients


def _parse_float(value: str | None) -> float | None:
    """Safely parse a float from a string ('12,5' and '12.5%' included)."""
    if not value:
        return None
    try:
        return float(value.replace(",", ".").rstrip("%").strip())
    except (ValueError, AttributeError):
        return None


def _parse_int(value: str | None) -> int:
    if not value:
        return 0
    try:
        # handle "4", "4.0"
        return int(float(str(value).replace(",", ".").strip()))
    except ValueError:
        return 0
