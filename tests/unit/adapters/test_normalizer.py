"""Tests for CSV normalizer functions."""

import pytest

from brokercrm.adapters.csv_loader.normalizer import (
    clean_string,
    normalize_column_name,
    parse_bool,
    parse_languages,
)

# ─── normalize_column_name ───────────────────────────────────────────


def test_strip_trailing_spaces():
    assert normalize_column_name("  Email  ") == "email"


def test_remove_bom():
    assert normalize_column_name("\ufeffName") == "name"


def test_replace_spaces_with_underscore():
    assert normalize_column_name("First Name") == "first_name"


def test_non_breaking_space():
    assert normalize_column_name("Last\u00a0Name") == "last_name"


def test_dashes_and_multiple_spaces():
    assert normalize_column_name("Max -  Workload") == "max_workload"


def test_punctuation_dropped():
    assert normalize_column_name("Performance (%)") == "performance_"


# ─── clean_string ────────────────────────────────────────────────────


def test_clean_string_blank_is_none():
    assert clean_string("   ") is None
    assert clean_string(None) is None


def test_clean_string_strips():
    assert clean_string("  Sales EN ") == "Sales EN"


# ─── parse_languages ─────────────────────────────────────────────────


def test_parse_languages_mixed_separators():
    assert parse_languages("EN, de; ES|fr it") == {"en", "de", "es", "fr", "it"}


def test_parse_languages_empty():
    assert parse_languages(None) == set()
    assert parse_languages("") == set()


# ─── parse_bool ──────────────────────────────────────────────────────


@pytest.mark.parametrize("raw", ["1", "TRUE", "yes", " y "])
def test_parse_bool_true(raw):
    assert parse_bool(raw, default=False) is True


@pytest.mark.parametrize("raw", ["0", "False", "no", "off"])
def test_parse_bool_false(raw):
    assert parse_bool(raw, default=True) is False


def test_parse_bool_unknown_uses_default():
    assert parse_bool("maybe", default=True) is True
    assert parse_bool(None, default=False) is False
