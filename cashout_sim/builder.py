"""Expansion of builder payment items onto the simulation timeline."""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Dict, List

from .data_models import (
    BalloonSchedule,
    BuilderPaymentItem,
    BuilderSchedule,
    MonthlySchedule,
    OnceSchedule,
    Simulation,
    TimelineRow,
)
from .indexation import compound_factor
from .utils import ZERO, month_index, month_index_to_key, month_range, safe_money, to_month_key

logger = logging.getLogger(__name__)


def resolve_builder_amount(item: BuilderPaymentItem, base_price: Decimal) -> Decimal:
    """Return the money amount of a builder payment.

    Percent-mode items are a share of the base price, e.g. ``amount=10``
    means 10 % of ``base_price``.
    """
    amount = max(ZERO, item.amount)
    if item.amount_mode == "percent":
        return safe_money(max(ZERO, base_price) * amount / Decimal(100))
    return safe_money(amount)


def stepped_months(start_date: str, end_date: str, every_months: int) -> List[str]:
    """Months from ``start_date`` every ``every_months`` months, up to ``end_date``."""
    start_index = month_index(to_month_key(start_date))
    end_index = month_index(to_month_key(end_date))
    if start_index is None or end_index is None or end_index < start_index:
        return []
    step = max(1, int(every_months or 1))
    return [month_index_to_key(i) for i in range(start_index, end_index + 1, step)]


def builder_occurrence_months(schedule: BuilderSchedule) -> List[str]:
    if isinstance(schedule, OnceSchedule):
        month_key = to_month_key(schedule.date)
        return [month_key] if month_key else []
    if isinstance(schedule, MonthlySchedule):
        start = to_month_key(schedule.start_date)
        end = to_month_key(schedule.end_date)
        if not start or not end:
            return []
        return month_range(start, end)
    if isinstance(schedule, BalloonSchedule):
        return stepped_months(schedule.start_date, schedule.end_date, schedule.every_months)
    return []


def apply_builder_payments(
    rows_by_key: Dict[str, TimelineRow], simulation: Simulation, start_month: str
) -> None:
    """Post every builder payment occurrence to the matching timeline row.

    The corrected amount compounds the item's index from ``start_month`` up
    to the occurrence month. Occurrences outside the timeline are dropped.
    """
    for item in simulation.builder_payments:
        amount = resolve_builder_amount(item, simulation.base_price)
        if amount <= 0:
            logger.debug("Skipping builder payment %s with no amount", item.id)
            continue
        for month_key in builder_occurrence_months(item.schedule):
            row = rows_by_key.get(month_key)
            if row is None:
                continue
            factor = compound_factor(simulation.index, item.index_ref, start_month, month_key)
            categories = row.categories
            categories.builder_nominal = safe_money(categories.builder_nominal + amount)
            categories.builder_corrected = safe_money(
                categories.builder_corrected + safe_money(amount * factor)
            )
