# tests/test_parsing.py
import locale
from datetime import date, datetime

import pytest

from app.core.parsing import (
    format_amount,
    format_display_datetime,
    is_payment_timestamp,
    normalize_cash_amount,
    parse_amount,
    parse_item_token,
    parse_items,
    parse_ledger_date,
    parse_ledger_datetime,
)


@pytest.mark.parametrize(
    "text, expected",
    [
        ("Jan 26, 2025 3:45 PM", datetime(2025, 1, 26, 15, 45)),
        ("Jan 6, 2025 9:05 AM", datetime(2025, 1, 6, 9, 5)),
        ("01/26/2025 2:30 PM", datetime(2025, 1, 26, 14, 30)),
        ("01/26/2025 14:30:00", datetime(2025, 1, 26, 14, 30)),
        ("Jan 26, 2025", datetime(2025, 1, 26)),
        ("2025-01-26T08:00:00", datetime(2025, 1, 26, 8, 0)),
    ],
)
def test_parse_ledger_datetime_known_formats(text, expected):
    assert parse_ledger_datetime(text) == expected


@pytest.mark.parametrize("text", [None, "", "   ", "yesterday", "Foo 26, 2025"])
def test_parse_ledger_datetime_rejects_unknown(text):
    assert parse_ledger_datetime(text) is None


def test_other_spellings_fall_back_to_dateutil():
    assert parse_ledger_datetime("January 26, 2025 3:45 PM") == datetime(2025, 1, 26, 15, 45)
    assert parse_ledger_datetime("26 Jan 2025 15:45") == datetime(2025, 1, 26, 15, 45)
    assert parse_ledger_datetime("2025-01-26T08:00:00+08:00") == datetime(2025, 1, 26, 8, 0)


def test_legacy_24_hour_clock_with_marker():
    assert parse_ledger_datetime("Jan 26, 2025 15:45 PM") == datetime(2025, 1, 26, 15, 45)
    assert parse_ledger_datetime("Jan 26, 2025 12:10 AM") == datetime(2025, 1, 26, 0, 10)


def test_parse_ledger_date():
    assert parse_ledger_date("Jan 26, 2025 3:45 PM") == date(2025, 1, 26)
    assert parse_ledger_date("nope") is None


def test_format_display_datetime_has_no_padding():
    assert format_display_datetime(datetime(2025, 1, 6, 14, 5)) == "Jan 6, 2025 2:05 PM"
    assert format_display_datetime(datetime(2025, 3, 15, 0, 30)) == "Mar 15, 2025 12:30 AM"
    assert parse_ledger_datetime(format_display_datetime(datetime(2025, 3, 15, 0, 30))) == datetime(2025, 3, 15, 0, 30)


def test_display_format_round_trips_every_month():
    for month in range(1, 13):
        moment = datetime(2025, month, 9, 23, 59)
        assert parse_ledger_datetime(format_display_datetime(moment)) == moment


def test_display_format_ignores_locale():
    previous = locale.setlocale(locale.LC_TIME)
    try:
        locale.setlocale(locale.LC_TIME, "de_DE.UTF-8")
    except locale.Error:
        pytest.skip("de_DE.UTF-8 locale not available")
    try:
        moment = datetime(2025, 3, 5, 14, 5)
        assert format_display_datetime(moment) == "Mar 5, 2025 2:05 PM"
        assert parse_ledger_datetime("Mar 5, 2025 2:05 PM") == moment
        assert is_payment_timestamp("03/05/2025 2:05 PM")
    finally:
        locale.setlocale(locale.LC_TIME, previous)


@pytest.mark.parametrize(
    "text, ok",
    [
        ("01/26/2025 2:30 PM", True),
        ("12/31/2024 11:59 AM", True),
        ("1/26/2025 2:30 PM", False),
        ("13/26/2025 2:30 PM", False),
        ("01/26/2025 14:30", False),
        ("2025-01-26 2:30 PM", False),
    ],
)
def test_is_payment_timestamp(text, ok):
    assert is_payment_timestamp(text) is ok


def test_parse_amount():
    assert parse_amount("₱1,234.50") == 1234.5
    assert parse_amount(" 90 ") == 90.0
    assert parse_amount("") == 0.0
    assert parse_amount("N/A") == 0.0
    assert parse_amount(None) == 0.0


def test_format_amount():
    assert format_amount(90) == "₱90.00"
    assert format_amount(12.5, "$") == "$12.50"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("150", "150.00"),
        ("1,000.5", "1000.50"),
        ("", "0.00"),
        (None, "0.00"),
        ("abc", "0.00"),
        ("-5", "0.00"),
        ("nan", "0.00"),
        ("inf", "0.00"),
    ],
)
def test_normalize_cash_amount(raw, expected):
    assert normalize_cash_amount(raw) == expected


@pytest.mark.parametrize(
    "token, expected",
    [
        ("2x Classic", (2, "Classic")),
        ("10 x Banana Split", (10, "Banana Split")),
        ("Classic x 3", (3, "Classic")),
        ("Tropiham", (1, "Tropiham")),
    ],
)
def test_parse_item_token(token, expected):
    assert parse_item_token(token) == expected


def test_parse_items_skips_empty_tokens():
    assert parse_items("2x Classic; ; 1x Tropiham;") == [(2, "Classic"), (1, "Tropiham")]
    assert parse_items("") == []
