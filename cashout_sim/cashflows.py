"""Expansion of free-form (legacy) cash-flow items onto the timeline.

Unlike builder payments, legacy cash flows share a single correction factor
per month: it starts at 1 before the first timeline month and grows by the
simulation's default monthly rate every month while indexation is enabled.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List, Tuple

from .builder import stepped_months
from .data_models import (
    BalloonSchedule,
    CashflowItem,
    IndexConfig,
    InstallmentsSchedule,
    MonthlySchedule,
    OnceSchedule,
    Simulation,
    TimelineRow,
)
from .utils import (
    ZERO,
    month_index,
    month_index_to_key,
    month_range,
    round_factor,
    safe_money,
    to_month_key,
)

logger = logging.getLogger(__name__)

ONE = Decimal("1")


def legacy_month_factors(months: List[str], index: IndexConfig) -> Dict[str, Decimal]:
    """Rolling correction factor for each timeline month."""
    rate = index.monthly_rate / Decimal(100)
    factors: Dict[str, Decimal] = {}
    rolling = ONE
    for month_key in months:
        if index.enabled:
            rolling *= 1 + rate
            if not rolling.is_finite() or rolling <= 0:
                rolling = ONE
        else:
            rolling = ONE
        factors[month_key] = rolling
    return factors


def installment_amounts(total: Decimal, count: int) -> List[Decimal]:
    """Split ``total`` into ``count`` cent-rounded parts.

    Every part but the last is ``total / count`` rounded, capped at what is
    still unallocated; the last part takes what is left so the parts add back
    up to ``total`` exactly.
    """
    count = max(1, int(count))
    total = safe_money(total)
    base = safe_money(total / Decimal(count))
    parts: List[Decimal] = []
    allocated = ZERO
    for number in range(count):
        remaining = safe_money(total - allocated)
        part = remaining if number == count - 1 else min(base, remaining)
        allocated = safe_money(allocated + part)
        parts.append(part)
    return parts


def cashflow_occurrences(item: CashflowItem) -> List[Tuple[str, Decimal]]:
    """Return ``(month_key, amount)`` pairs for one cash-flow item."""
    amount = max(ZERO, item.amount)
    schedule = item.schedule
    if isinstance(schedule, OnceSchedule):
        month_key = to_month_key(schedule.date)
        return [(month_key, amount)] if month_key else []
    if isinstance(schedule, MonthlySchedule):
        start = to_month_key(schedule.start_date)
        end = to_month_key(schedule.end_date)
        if not start or not end:
            return []
        return [(month_key, amount) for month_key in month_range(start, end)]
    if isinstance(schedule, BalloonSchedule):
        months = stepped_months(schedule.start_date, schedule.end_date, schedule.every_months)
        return [(month_key, amount) for month_key in months]
    if isinstance(schedule, InstallmentsSchedule):
        first_index = month_index(to_month_key(schedule.date))
        if first_index is None:
            return []
        step = max(1, int(schedule.every_months or 1))
        parts = installment_amounts(amount, schedule.installment_count)
        return [
            (month_index_to_key(first_index + number * step), part)
            for number, part in enumerate(parts)
        ]
    return []


def apply_legacy_cashflows(
    rows_by_key: Dict[str, TimelineRow], months: List[str], simulation: Simulation
) -> None:
    factors = legacy_month_factors(months, simulation.index)
    for item in simulation.cashflows:
        if item.amount <= 0:
            logger.debug("Skipping cash flow %s (%s) with no amount", item.id, item.label)
            continue
        for month_key, amount in cashflow_occurrences(item):
            row = rows_by_key.get(month_key)
            if row is None:
                continue
            nominal = safe_money(amount)
            factor = round_factor(factors.get(month_key, ONE))
            categories = row.categories
            categories.legacy_cashflow_nominal = safe_money(categories.legacy_cashflow_nominal + nominal)
            categories.legacy_cashflow_corrected = safe_money(
                categories.legacy_cashflow_corrected + safe_money(nominal * factor)
            )
