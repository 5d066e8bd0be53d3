from datetime import date, datetime, timedelta, timezone

import pytest

from erp_dashboard.utils.dates import to_datetime, to_utc, whole_days_between
from erp_dashboard.utils.formatting import format_days, format_huf, format_percent
from erp_dashboard.utils.money import round_money, round_percent
from erp_dashboard.utils.params import (
    clamp_days,
    clamp_limit,
    clamp_months,
    month_key,
    parse_month,
    previous_month,
)

TODAY = date(2026, 2, 10)


# ─── Money ───

@pytest.mark.parametrize("value,expected", [
    (0.125, 0.13),
    (-0.125, -0.12),
    (150000, 150000),
    (33.3333, 33.33),
    (-66.6666, -66.67),
    (1e-9, 0),
])
def test_round_money_half_up(value, expected):
    assert round_money(value) == expected


@pytest.mark.parametrize("value,expected", [(12.5, 13), (33.33, 33), (-2.5, -2), (66.67, 67)])
def test_round_percent(value, expected):
    assert round_percent(value) == expected
    assert isinstance(round_percent(value), int)


# ─── Dates ───

def test_to_datetime_promotes_date():
    assert to_datetime(date(2026, 2, 1)) == datetime(2026, 2, 1)
    assert to_datetime(date(2026, 2, 1), timezone.utc).tzinfo is timezone.utc


def test_whole_days_between_floors_both_ways():
    start = datetime(2026, 2, 10, 12, tzinfo=timezone.utc)

    assert whole_days_between(start, start + timedelta(hours=5)) == 0
    assert whole_days_between(start, start - timedelta(hours=5)) == -1
    assert whole_days_between(start, start + timedelta(days=3)) == 3


def test_whole_days_between_mixed_timezones():
    aware = datetime(2026, 2, 10, 0, tzinfo=timezone.utc)

    assert whole_days_between(date(2026, 2, 1), aware) == 9
    assert whole_days_between(aware, datetime(2026, 2, 12)) == 2


# ─── Params ───

@pytest.mark.parametrize("raw,expected", [(0, 1), (-4, 1), (50, 20), ("7", 7), ("abc", 5), (None, 5)])
def test_clamp_limit(raw, expected):
    assert clamp_limit(raw) == expected


def test_clamp_months_and_days():
    assert clamp_months(30) == 24
    assert clamp_months(None) == 6
    assert clamp_days(0) == 1
    assert clamp_days(45) == 30
    assert clamp_days("x") == 7


@pytest.mark.parametrize("raw,expected", [
    ("2026-03", date(2026, 3, 1)),
    ("2025-12-17", date(2025, 12, 1)),
    (date(2026, 5, 20), date(2026, 5, 1)),
    (None, date(2026, 2, 1)),
    ("", date(2026, 2, 1)),
    ("március", date(2026, 2, 1)),
    ("2026-13", date(2026, 2, 1)),
])
def test_parse_month(raw, expected):
    assert parse_month(raw, TODAY) == expected


def test_previous_month_wraps_year():
    assert previous_month(date(2026, 1, 1)) == date(2025, 12, 1)
    assert previous_month(date(2026, 3, 1)) == date(2026, 2, 1)


def test_month_key():
    assert month_key(date(2026, 2, 1)) == "2026-02"


# ─── Formatting ───

def test_format_huf():
    assert format_huf(1234567) == "1 234 567 Ft"
    assert format_huf(-400000) == "-400 000 Ft"
    assert format_huf(0) == "0 Ft"
    assert format_huf(-0.2) == "0 Ft"


def test_format_percent():
    assert format_percent(6.666) == "6.7%"
    assert format_percent(-20, 2) == "-20.00%"


def test_format_days():
    assert format_days(0) == "ma"
    assert format_days(-3) == "3 napja lejárt"
    assert format_days(5) == "5 nap múlva"


def test_to_utc_makes_mixed_values_comparable():
    naive = datetime(2026, 1, 1, 9, 0)
    aware = datetime(2026, 1, 5, tzinfo=timezone.utc)

    assert to_utc(naive) < to_utc(aware)
    assert to_utc(date(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)
    assert to_utc(aware) is aware
