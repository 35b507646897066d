"""CSV value normalization — column names, blanks, language lists, booleans."""

from __future__ import annotations

import re

TRUE_VALUES = {"1", "true", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "no", "n", "off"}


def normalize_column_name(name: str) -> str:
    """Normalize a CSV column name.

    - Removes BOM characters (\\ufeff)
    - Replaces runs of spaces, dashes and non-breaking spaces with one underscore
    - Lowercases and drops anything that is not a word character
    """
    name = name.replace("\ufeff", "").strip()
    name = re.sub(r"[\s\u00a0\-]+", "_", name)
    return re.sub(r"[^\w]", "", name.lower(), flags=re.UNICODE)


def clean_string(value: str | None) -> str | None:
    """Strip whitespace and return None for empty strings."""
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def parse_languages(raw: str | None) -> set[str]:
    """Parse language lists like 'EN, de; ES' into lowercase codes."""
    if not raw:
        return set()
    parts = re.split(r"[,;|\s]+", raw.strip())
    return {p.strip().lower() for p in parts if p.strip()}


def parse_bool(raw: str | None, default: bool) -> bool:
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    return default
