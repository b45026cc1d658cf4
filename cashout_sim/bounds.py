"""Resolution of the first and last month of a simulation timeline."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .data_models import (
    BalloonSchedule,
    InstallmentsSchedule,
    MonthlySchedule,
    OnceSchedule,
    Simulation,
)
from .utils import add_days, add_months, month_index, month_index_to_key, to_month_key

logger = logging.getLogger(__name__)


@dataclass
class TimelineBounds:
    start_month: str
    end_month: str
    delivery_plus_tolerance_month: Optional[str]
    financing_end_month: Optional[str]


def last_occurrence_index(schedule) -> Optional[int]:
    """Month index of the last occurrence implied by a payment schedule."""
    if isinstance(schedule, OnceSchedule):
        return month_index(to_month_key(schedule.date))
    if isinstance(schedule, (MonthlySchedule, BalloonSchedule)):
        return month_index(to_month_key(schedule.end_date))
    if isinstance(schedule, InstallmentsSchedule):
        first = month_index(to_month_key(schedule.date))
        if first is None:
            return None
        count = max(1, int(schedule.installment_count or 1))
        step = max(1, int(schedule.every_months or 1))
        return first + (count - 1) * step
    return None


def _latest(indices: Iterable[Optional[int]]) -> Optional[int]:
    valid = [i for i in indices if i is not None]
    return max(valid) if valid else None


def resolve_bounds(simulation: Simulation) -> Optional[TimelineBounds]:
    """Return the timeline bounds, or ``None`` when the contract date is invalid.

    The end month is the latest of the delivery month (tolerance days added
    at the day level), the last financing month and the last occurrence of
    any cash flow or builder payment.
    """
    contract_month = to_month_key(simulation.contract_date)
    if not contract_month:
        logger.debug("Contract date %r does not parse; no timeline", simulation.contract_date)
        return None

    delivery_plus_tolerance = add_days(simulation.delivery_date, simulation.tolerance_days or 0)
    delivery_month = (
        to_month_key(delivery_plus_tolerance)
        or to_month_key(simulation.delivery_date)
        or contract_month
    )

    financing = simulation.financing
    financing_end_month = None
    if financing.enabled:
        financing_start = to_month_key(financing.start_date)
        if financing_start and financing.months > 0:
            financing_end_month = add_months(financing_start, financing.months - 1)

    end_index = _latest(
        [
            month_index(delivery_month),
            month_index(financing_end_month),
            _latest(last_occurrence_index(item.schedule) for item in simulation.cashflows),
            _latest(last_occurrence_index(item.schedule) for item in simulation.builder_payments),
        ]
    )
    end_month = month_index_to_key(end_index) if end_index is not None else delivery_month

    logger.info("Timeline bounds %s to %s", contract_month, end_month)
    return TimelineBounds(
        start_month=contract_month,
        end_month=end_month,
        delivery_plus_tolerance_month=delivery_month,
        financing_end_month=financing_end_month,
    )
