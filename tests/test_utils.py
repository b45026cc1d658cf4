from decimal import Decimal

import pytest

from cashout_sim.utils import (
    add_days,
    add_months,
    month_index,
    month_range,
    round_factor,
    safe_money,
    to_decimal,
    to_month_key,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        ("2025-01-15", "2025-01"),
        ("2025-12", "2025-12"),
        ("  2026-03-01  ", "2026-03"),
        ("2025-13-01", None),
        ("2025-00-01", None),
        ("2025", None),
        ("", None),
        (None, None),
        ("abcd-ef", None),
    ],
)
def test_to_month_key(value, expected):
    assert to_month_key(value) == expected


def test_month_index_orders_months():
    assert month_index("2025-01") == 2025 * 12
    assert month_index("2024-12") == month_index("2025-01") - 1
    assert month_index("2025-1-1") is None
    assert month_index("garbage") is None
    assert month_index(None) is None


def test_add_months_crosses_years_both_ways():
    assert add_months("2025-11", 3) == "2026-02"
    assert add_months("2025-01", -1) == "2024-12"
    assert add_months("2025-01", 0) == "2025-01"
    assert add_months("bad", 2) == ""


@pytest.mark.parametrize(
    "start, end",
    [("2025-01", "2025-01"), ("2025-11", "2026-02"), ("2024-03", "2027-08")],
)
def test_month_range_length_matches_index_difference(start, end):
    months = month_range(start, end)
    assert len(months) == month_index(end) - month_index(start) + 1
    assert months[0] == start
    assert months[-1] == end
    assert months == sorted(months)


def test_month_range_is_empty_when_reversed_or_invalid():
    assert month_range("2026-02", "2025-11") == []
    assert month_range("2025-01", "nope") == []
    assert month_range(None, "2025-01") == []


def test_month_range_accepts_full_dates():
    assert month_range("2025-01-31", "2025-03-01") == ["2025-01", "2025-02", "2025-03"]


def test_add_days_shifts_at_day_level():
    assert add_days("2026-06-01", 180) == "2026-11-28"
    assert add_days("2025-01-31", 1) == "2025-02-01"
    assert add_days("2025-01-31", -10) == "2025-01-31"
    assert add_days("2025-01", 10) is None
    assert add_days("2025-02-30", 1) is None


def test_money_helpers():
    assert to_decimal("1,250.50") == Decimal("1250.50")
    assert to_decimal("abc") == Decimal("0")
    assert to_decimal(True) == Decimal("0")
    assert to_decimal("Infinity", fallback=Decimal("3")) == Decimal("3")
    assert safe_money(Decimal("333.335")) == Decimal("333.34")
    assert safe_money(Decimal("-5")) == Decimal("0.00")
    assert round_factor(Decimal("1.0303010000001")) == Decimal("1.03030100")


def test_rounding_handles_amounts_beyond_default_precision():
    assert safe_money(Decimal("1e27")) == Decimal("1e27")
    assert safe_money(Decimal("123456789012345678901234567890.125")) == Decimal("123456789012345678901234567890.13")
    assert round_factor(Decimal("1e30")) == Decimal("1e30")


def test_to_decimal_rejects_numbers_beyond_double_range():
    assert to_decimal("1e27") == Decimal("1e27")
    assert to_decimal("1e400") == Decimal("0")
    assert to_decimal("-1e400", fallback=Decimal("7")) == Decimal("7")
