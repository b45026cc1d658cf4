"""Utility functions for the cash-out simulator.

This module provides the month-key algebra used everywhere in the engine
(``"YYYY-MM"`` strings, their integer indices and ranges), a day-level date
shift for the delivery tolerance period, and ``Decimal`` helpers for coercing
and rounding money values.
"""

from __future__ import annotations

from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, getcontext, localcontext
from typing import List, Optional

getcontext().prec = 28  # increase decimal precision to avoid rounding errors

CENT = Decimal("0.01")
FACTOR_PLACES = Decimal("0.00000001")
ZERO = Decimal("0")
# largest magnitude a JSON number can carry (IEEE 754 double)
MAX_MAGNITUDE = Decimal("1.7976931348623157e308")


def to_decimal(value: object, fallback: Decimal = ZERO) -> Decimal:
    """Convert ``value`` into a finite ``Decimal``.

    Strings may carry thousands separators (``"1,000.50"``). Booleans, ``None``
    and anything that does not parse to a finite number yield ``fallback``,
    as do numbers beyond ``MAX_MAGNITUDE``.
    """
    if value is None or isinstance(value, bool):
        return fallback
    if isinstance(value, Decimal):
        parsed = value
    else:
        try:
            cleaned = str(value).strip().replace(",", "")
            if not cleaned:
                return fallback
            parsed = Decimal(cleaned)
        except (InvalidOperation, ValueError):
            return fallback
    if not parsed.is_finite() or parsed.copy_abs() > MAX_MAGNITUDE:
        return fallback
    return parsed


def _quantize(value: Decimal, places: Decimal) -> Decimal:
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the places kept
        ctx.prec = max(ctx.prec, value.adjusted() - places.as_tuple().exponent + 2)
        return value.quantize(places, rounding=ROUND_HALF_UP)


def safe_money(value: Decimal) -> Decimal:
    """Clamp ``value`` to zero or more and round it to cents."""
    if not value.is_finite() or value < 0:
        return ZERO.quantize(CENT)
    return _quantize(value, CENT)


def round_factor(value: Decimal) -> Decimal:
    """Round a correction factor to eight decimal places."""
    if not value.is_finite():
        return Decimal("1")
    return _quantize(value, FACTOR_PLACES)


def to_month_key(value: Optional[str]) -> Optional[str]:
    """Return the ``YYYY-MM`` key of a date string, or ``None``.

    Only the first seven characters are inspected, so ``"2025-01-15"`` and
    ``"2025-01"`` both give ``"2025-01"``.
    """
    text = str(value or "").strip()
    if len(text) < 7:
        return None
    try:
        year = int(text[0:4])
        month = int(text[5:7])
    except ValueError:
        return None
    if month < 1 or month > 12:
        return None
    return f"{year:04d}-{month:02d}"


def month_index(month_key: Optional[str]) -> Optional[int]:
    """Map a month key to ``year * 12 + (month - 1)``; ``None`` if malformed."""
    if not isinstance(month_key, str):
        return None
    parts = month_key.split("-")
    if len(parts) != 2:
        return None
    try:
        year = int(parts[0])
        month = int(parts[1])
    except ValueError:
        return None
    if month < 1 or month > 12:
        return None
    return year * 12 + (month - 1)


def month_index_to_key(index: int) -> str:
    year, month0 = divmod(int(index), 12)
    return f"{year:04d}-{month0 + 1:02d}"


def add_months(month_key: str, months: int) -> str:
    """Return the month key ``months`` months after ``month_key``.

    Negative offsets move backwards. A malformed key gives an empty string.
    """
    start = month_index(month_key)
    if start is None:
        return ""
    return month_index_to_key(start + int(months))


def _as_month_key(value: Optional[str]) -> Optional[str]:
    # full dates are reduced to their month, plain month keys pass through
    text = str(value or "")
    if len(text) >= 10:
        return to_month_key(text)
    return text


def month_range(start: Optional[str], end: Optional[str]) -> List[str]:
    """Inclusive, ascending list of month keys between ``start`` and ``end``.

    Either argument may be a month key or a full ISO date. The result is
    empty when an endpoint is invalid or ``end`` precedes ``start``.
    """
    start_index = month_index(_as_month_key(start))
    end_index = month_index(_as_month_key(end))
    if start_index is None or end_index is None or end_index < start_index:
        return []
    return [month_index_to_key(i) for i in range(start_index, end_index + 1)]


def parse_iso_date(value: Optional[str]) -> Optional[date]:
    """Parse the ``YYYY-MM-DD`` prefix of a string into a ``date``."""
    text = str(value or "").strip()
    if len(text) < 10:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


def add_days(value: Optional[str], days: int) -> Optional[str]:
    """Shift an ISO date by ``days`` calendar days (negative counts as zero)."""
    parsed = parse_iso_date(value)
    if parsed is None:
        return None
    try:
        shifted = parsed + timedelta(days=max(0, int(days)))
    except OverflowError:
        return None
    return shifted.isoformat()
