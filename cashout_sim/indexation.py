"""Monetary correction (indexation) factors for builder payments.

Each builder payment may name an index reference, for example ``"INCC"``.
The monthly rate for a reference comes from the explicit series in the
simulation when one is provided for that month, and otherwise from the
simulation's default monthly rate when indexation is enabled.
"""

from __future__ import annotations

from decimal import Decimal

from .data_models import IndexConfig
from .utils import ZERO, month_range

ONE = Decimal("1")


def rate_percent_for_month(index: IndexConfig, index_ref: str, month_key: str) -> Decimal:
    """Return the monthly correction rate, in percent, for one reference and month."""
    if not index_ref:
        return ZERO
    series = index.series.get(index_ref)
    if series:
        override = series.get(month_key)
        if override is not None and override.is_finite():
            return override
    return index.monthly_rate if index.enabled else ZERO


def compound_factor(index: IndexConfig, index_ref: str, start_month: str, target_month: str) -> Decimal:
    """Cumulative correction from ``start_month`` through ``target_month``.

    Both months are included, so a payment in the first month of the
    timeline is already corrected by one period. Without a reference the
    factor is 1.
    """
    if not index_ref:
        return ONE
    factor = ONE
    for month_key in month_range(start_month, target_month):
        rate = rate_percent_for_month(index, index_ref, month_key) / Decimal(100)
        if not rate.is_finite():
            continue
        factor *= 1 + rate
        if not factor.is_finite() or factor <= 0:
            factor = ONE
    return factor
