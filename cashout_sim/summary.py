"""Breakdowns reported next to the simulation timeline.

Three views complement ``Results``:

* the nominal builder total per contract phase (signal, entry, work,
  intermediary, keys), counted from the payment items themselves so that
  occurrences outside the timeline still show up;
* the corrected total per timeline category;
* the total of the informational extra costs, which never reach the timeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict

from .builder import resolve_builder_amount
from .data_models import (
    BUILDER_PHASES,
    BalloonSchedule,
    BuilderPaymentItem,
    MonthlySchedule,
    OnceSchedule,
    Results,
    Simulation,
)
from .utils import ZERO, month_index, safe_money, to_month_key


@dataclass
class SimulationSummary:
    phase_totals: Dict[str, Decimal] = field(default_factory=dict)
    category_totals: Dict[str, Decimal] = field(default_factory=dict)
    extras_costs_total: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "phaseTotals": {phase: float(v) for phase, v in self.phase_totals.items()},
            "categoryTotals": {name: float(v) for name, v in self.category_totals.items()},
            "extrasCostsTotal": float(self.extras_costs_total),
        }


def phase_occurrences(item: BuilderPaymentItem) -> int:
    """Number of times a builder payment falls due.

    A single payment always counts once. Recurring payments count their
    months between the start and end dates, and none when the dates do not
    parse or are reversed.
    """
    schedule = item.schedule
    if isinstance(schedule, OnceSchedule):
        return 1
    if not isinstance(schedule, (MonthlySchedule, BalloonSchedule)):
        return 0
    start = month_index(to_month_key(schedule.start_date))
    end = month_index(to_month_key(schedule.end_date))
    if start is None or end is None or end < start:
        return 0
    if isinstance(schedule, MonthlySchedule):
        return end - start + 1
    if isinstance(schedule, BalloonSchedule):
        return (end - start) // max(1, int(schedule.every_months or 1)) + 1
    return 0


def phase_totals(simulation: Simulation) -> Dict[str, Decimal]:
    totals = {phase: ZERO for phase in BUILDER_PHASES}
    for item in simulation.builder_payments:
        if item.phase not in totals:
            continue
        amount = resolve_builder_amount(item, simulation.base_price)
        if amount <= 0:
            continue
        totals[item.phase] = safe_money(totals[item.phase] + amount * phase_occurrences(item))
    return totals


def category_totals(results: Results) -> Dict[str, Decimal]:
    builder = legacy = construction = financing = ZERO
    for row in results.timeline:
        c = row.categories
        builder += c.builder_corrected
        legacy += c.legacy_cashflow_corrected
        construction += c.construction_interest
        financing += c.financing_installment
    return {
        "builderCorrected": safe_money(builder),
        "legacyCashflowCorrected": safe_money(legacy),
        "constructionInterest": safe_money(construction),
        "financingInstallment": safe_money(financing),
    }


def extras_costs_total(simulation: Simulation) -> Decimal:
    return safe_money(sum((cost.amount for cost in simulation.extras_costs), ZERO))


def summarize(simulation: Simulation, results: Results) -> SimulationSummary:
    """Build the phase, category and extra-cost breakdowns of a simulation.

    Parameters
    ----------
    simulation: Simulation
        The simulation ``results`` were computed from.
    results: Results
        Output of ``compute_simulation_results``.

    Returns
    -------
    SimulationSummary
        Phase totals are nominal; category totals are corrected and match
        ``results.totals`` when added up.
    """
    return SimulationSummary(
        phase_totals=phase_totals(simulation),
        category_totals=category_totals(results),
        extras_costs_total=extras_costs_total(simulation),
    )
