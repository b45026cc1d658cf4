"""Bank financing of the balance left after the builder-phase payments.

The financed principal is the base price minus everything already paid, in
corrected terms, through builder payments and legacy cash flows up to and
including the first financing month. The resulting schedule is placed on the
timeline starting at that month.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional

from .amortization import build_schedule
from .data_models import AmortizationEntry, Simulation, TimelineRow
from .utils import ZERO, add_months, month_index, safe_money, to_month_key

logger = logging.getLogger(__name__)


@dataclass
class FinancingSummary:
    """Descriptor of the financing, returned even when it is degenerate."""

    enabled: bool = False
    principal: Decimal = ZERO
    months: int = 0
    system: str = "SAC"
    start_month: Optional[str] = None
    annual_rate_percent: Decimal = ZERO
    schedule: List[AmortizationEntry] = field(default_factory=list)


def paid_before_financing(rows_by_key: Dict[str, TimelineRow], months: List[str], start_month: str) -> Decimal:
    """Corrected builder and legacy amounts posted up to ``start_month``."""
    start_index = month_index(start_month)
    paid = ZERO
    if start_index is None:
        return paid
    for month_key in months:
        index = month_index(month_key)
        row = rows_by_key.get(month_key)
        if row is None or index is None or index > start_index:
            continue
        paid += row.categories.builder_corrected + row.categories.legacy_cashflow_corrected
    return paid


def apply_financing(
    rows_by_key: Dict[str, TimelineRow], months: List[str], simulation: Simulation
) -> FinancingSummary:
    config = simulation.financing
    if not config.enabled:
        return FinancingSummary()

    start_month = to_month_key(config.start_date)
    term = max(0, int(config.months))
    annual_rate = max(ZERO, config.annual_rate)
    system = "PRICE" if config.system == "PRICE" else "SAC"

    if not start_month or term <= 0:
        logger.debug("Financing enabled without a start month or term")
        return FinancingSummary(
            enabled=True,
            months=term,
            system=system,
            start_month=start_month,
            annual_rate_percent=annual_rate,
        )

    paid = paid_before_financing(rows_by_key, months, start_month)
    principal = max(ZERO, simulation.base_price - paid)
    schedule = build_schedule(system, principal, annual_rate, term)

    for offset, entry in enumerate(schedule):
        month_key = add_months(start_month, offset)
        row = rows_by_key.get(month_key)
        if row is None:
            continue
        entry.month_key = month_key
        row.categories.financing_installment = safe_money(
            row.categories.financing_installment + entry.installment
        )

    logger.info(
        "Financing %s: principal %s over %d months from %s", system, safe_money(principal), term, start_month
    )
    return FinancingSummary(
        enabled=True,
        principal=safe_money(principal),
        months=term,
        system=system,
        start_month=start_month,
        annual_rate_percent=annual_rate,
        schedule=schedule,
    )
