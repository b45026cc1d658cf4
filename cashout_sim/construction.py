"""Interest charged on construction funding before delivery.

During construction part of the price is disbursed to the builder every
month and the buyer pays interest on the disbursed amount. Each month
contributes ``principal * disbursement% * monthly_rate%`` until the delivery
month (tolerance included).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Optional

from .data_models import Simulation, TimelineRow
from .utils import ZERO, month_index, safe_money

logger = logging.getLogger(__name__)


@dataclass
class ConstructionSummary:
    monthly_rate_percent: Decimal = ZERO
    principal: Decimal = ZERO
    disbursement_percent_monthly: Decimal = ZERO
    total: Decimal = ZERO


def apply_construction_interest(
    rows_by_key: Dict[str, TimelineRow],
    months: List[str],
    simulation: Simulation,
    end_month: Optional[str],
) -> ConstructionSummary:
    config = simulation.construction_interest
    if not config.enabled:
        return ConstructionSummary()

    principal = config.construction_principal
    if principal is None:
        principal = simulation.base_price
    principal = max(ZERO, principal)
    rate_percent = max(ZERO, config.monthly_rate)
    default_percent = max(ZERO, config.disbursement_percent_monthly)

    if principal <= 0 or rate_percent <= 0:
        logger.debug("Construction interest enabled without principal or rate")
        return ConstructionSummary(
            monthly_rate_percent=rate_percent,
            principal=safe_money(principal),
            disbursement_percent_monthly=default_percent,
        )

    rate = rate_percent / Decimal(100)
    end_index = month_index(end_month)
    total = ZERO
    for month_key in months:
        index = month_index(month_key)
        if index is None or (end_index is not None and index > end_index):
            continue
        percent = max(ZERO, config.disbursement_by_month.get(month_key, default_percent))
        if percent <= 0:
            continue
        interest = safe_money(principal * percent / Decimal(100) * rate)
        if interest <= 0:
            continue
        row = rows_by_key.get(month_key)
        if row is None:
            continue
        row.categories.construction_interest = safe_money(row.categories.construction_interest + interest)
        total += interest

    return ConstructionSummary(
        monthly_rate_percent=rate_percent,
        principal=safe_money(principal),
        disbursement_percent_monthly=default_percent,
        total=safe_money(total),
    )
