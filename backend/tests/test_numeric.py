import os
import sys

import pytest

# Add the project root to sys.path so we can import blextract
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from blextract.utils.numeric import parse_count, parse_numeric


def test_both_locale_conventions_give_the_same_value():
    assert parse_numeric("25,000.50") == 25000.50
    assert parse_numeric("25.000,50") == 25000.50
    assert parse_numeric("25,000.50") == parse_numeric("25.000,50")


@pytest.mark.parametrize("raw, expected", [
    ("57000", 57000.0),
    ("25 000.50", 25000.50),
    ("1.234.567,8", 1234567.8),
    ("1.5", 1.5),
    ("12.500,00", 12500.0),
])
def test_parse_numeric(raw, expected):
    assert parse_numeric(raw) == expected


@pytest.mark.parametrize("raw", ["not a number", "", "   ", ".", "-500", "inf", "nan"])
def test_unparseable_or_negative_is_zero(raw):
    assert parse_numeric(raw) == 0


def test_parse_count_strips_separators():
    assert parse_count("1140") == 1140
    assert parse_count("1,140") == 1140
    assert parse_count("1.140") == 1140
    assert parse_count("") == 0
    assert parse_count("abc") == 0


def test_parse_count_rejects_huge_digit_runs():
    assert parse_count("1" * 5000) == 0
    assert parse_count("1" * 13) == 0
    assert parse_count("9" * 12) == 999999999999
