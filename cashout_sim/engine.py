"""Core calculation engine for the cash-out simulator.

This module builds the month-by-month projection of a purchase contract. One
row is created for every month between the contract and the last payment,
then the payment components are posted in a fixed order:

1. builder payments (per-item index correction),
2. legacy cash flows (shared rolling correction),
3. construction interest (up to delivery plus tolerance),
4. financing installments (principal depends on steps 1 and 2).

Each row is then finalized with its nominal and corrected totals and the
whole result is returned as a ``Results`` object. The computation never
raises on bad input: unusable items are left out and an unparseable contract
date gives an empty result.
"""

from __future__ import annotations

from decimal import Decimal, Overflow, localcontext
from typing import Any, Dict, List, Mapping

from .bounds import resolve_bounds
from .builder import apply_builder_payments
from .cashflows import apply_legacy_cashflows
from .construction import apply_construction_interest
from .data_models import Results, ResultsMeta, Simulation, TimelineRow, Totals
from .financing import apply_financing
from .sanitize import sanitize_simulation
from .utils import ZERO, month_range, round_factor, safe_money


def _finalize_row(row: TimelineRow) -> None:
    c = row.categories
    row.nominal = safe_money(c.builder_nominal + c.legacy_cashflow_nominal + c.construction_interest)
    row.corrected = safe_money(c.builder_corrected + c.legacy_cashflow_corrected + c.construction_interest)
    row.factor = round_factor(row.corrected / row.nominal) if row.nominal > 0 else Decimal("1")
    row.financing_installment = safe_money(c.financing_installment)
    row.total_out = safe_money(row.corrected + row.financing_installment)


def compute_simulation_results(simulation: Simulation) -> Results:
    """Compute the cash-out timeline, totals and metadata for a simulation.

    Parameters
    ----------
    simulation: Simulation
        A normalized simulation. It is read but never modified.

    Returns
    -------
    Results
        ``timeline`` holds one ``TimelineRow`` per month in ascending order
        with no gaps; ``totals`` sums the rows; ``meta`` reports the bounds,
        the financing descriptor and the construction interest total.
    """
    with localcontext() as ctx:
        # long compounding runs past the exponent range give Infinity, which
        # the factor helpers reset to 1
        ctx.traps[Overflow] = False
        return _compute(simulation)


def _compute(simulation: Simulation) -> Results:
    bounds = resolve_bounds(simulation)
    if bounds is None:
        return Results.empty()

    months = month_range(bounds.start_month, bounds.end_month)
    timeline: List[TimelineRow] = [TimelineRow(month_key=m) for m in months]
    rows_by_key: Dict[str, TimelineRow] = {row.month_key: row for row in timeline}

    apply_builder_payments(rows_by_key, simulation, bounds.start_month)
    apply_legacy_cashflows(rows_by_key, months, simulation)
    construction = apply_construction_interest(
        rows_by_key, months, simulation, bounds.delivery_plus_tolerance_month
    )
    financing = apply_financing(rows_by_key, months, simulation)

    total_nominal = ZERO
    total_corrected = ZERO
    total_financing = ZERO
    for row in timeline:
        _finalize_row(row)
        total_nominal += row.nominal
        total_corrected += row.corrected
        total_financing += row.financing_installment

    totals = Totals(
        nominal=safe_money(total_nominal),
        corrected=safe_money(total_corrected),
        financing=safe_money(total_financing),
        grand_total=safe_money(total_corrected + total_financing),
    )
    meta = ResultsMeta(
        start_month=bounds.start_month,
        end_month=bounds.end_month,
        delivery_plus_tolerance_month=bounds.delivery_plus_tolerance_month,
        financing_end_month=bounds.financing_end_month,
        financing_principal=financing.principal,
        financing_months=financing.months,
        financing_system=financing.system,
        financing_start_month=financing.start_month,
        financing_annual_rate=financing.annual_rate_percent,
        financing_schedule=financing.schedule,
        construction_interest_total=construction.total,
        construction_interest_monthly_rate_percent=construction.monthly_rate_percent,
        monthly_index_rate_percent=simulation.index.monthly_rate,
    )
    return Results(timeline=timeline, totals=totals, meta=meta)


def simulate(document: Mapping[str, Any]) -> Results:
    """Normalize a raw simulation document and compute its results."""
    return compute_simulation_results(sanitize_simulation(document))
