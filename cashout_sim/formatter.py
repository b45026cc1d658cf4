"""Output helpers for the cash-out simulator.

This module renders simulation totals, the monthly timeline, amortization
schedules and risk flags as plain tab-separated tables.
"""

from __future__ import annotations

from typing import Iterable

from .data_models import AmortizationEntry, Results, TimelineRow
from .risks import RiskFlag
from .summary import SimulationSummary


def print_totals(results: Results) -> None:
    """Print the totals and the main bounds of a simulation."""
    totals = results.totals
    meta = results.meta
    print("Summary")
    print("-" * 72)
    print(f"Timeline           : {meta.start_month or '-'} to {meta.end_month or '-'}")
    print(f"Delivery + grace   : {meta.delivery_plus_tolerance_month or '-'}")
    print(f"Nominal total      : {totals.nominal:.2f}")
    print(f"Corrected total    : {totals.corrected:.2f}")
    if meta.construction_interest_total:
        print(f"Construction int.  : {meta.construction_interest_total:.2f}")
    if meta.financing_schedule:
        print(
            f"Financing          : {meta.financing_system} {meta.financing_principal:.2f} "
            f"over {meta.financing_months} months from {meta.financing_start_month}"
        )
        print(f"Financing total    : {totals.financing:.2f}")
    print(f"Grand total        : {totals.grand_total:.2f}")
    print("-" * 72)


def print_breakdown(summary: SimulationSummary) -> None:
    """Print the per-phase and per-category breakdowns of a simulation."""
    print("Builder payments by phase")
    for phase, amount in summary.phase_totals.items():
        print(f"  {phase:<17}: {amount:.2f}")
    print("Corrected totals by category")
    for name, amount in summary.category_totals.items():
        print(f"  {name:<25}: {amount:.2f}")
    print(f"Extra costs        : {summary.extras_costs_total:.2f}")
    print("-" * 72)


def print_timeline(timeline: Iterable[TimelineRow]) -> None:
    """Print the monthly timeline, skipping months with nothing to pay."""
    headers = ["Month", "Builder", "BuilderCorr", "Cashflow", "CashflowCorr", "ConstrInt", "Financing", "TotalOut"]
    print("\t".join(headers))
    for row in timeline:
        if row.total_out == 0 and row.nominal == 0:
            continue
        c = row.categories
        print(
            "\t".join(
                [
                    row.month_key,
                    f"{c.builder_nominal:.2f}",
                    f"{c.builder_corrected:.2f}",
                    f"{c.legacy_cashflow_nominal:.2f}",
                    f"{c.legacy_cashflow_corrected:.2f}",
                    f"{c.construction_interest:.2f}",
                    f"{row.financing_installment:.2f}",
                    f"{row.total_out:.2f}",
                ]
            )
        )


def print_schedule(schedule: Iterable[AmortizationEntry]) -> None:
    """Print an amortization schedule as a simple table."""
    print("\t".join(["Period", "Month", "Installment", "Interest", "Amort", "Balance"]))
    for period, entry in enumerate(schedule, 1):
        print(
            "\t".join(
                [
                    str(period),
                    entry.month_key or "-",
                    f"{entry.installment:.2f}",
                    f"{entry.interest:.2f}",
                    f"{entry.amort:.2f}",
                    f"{entry.balance:.2f}",
                ]
            )
        )


def print_risks(flags: Iterable[RiskFlag]) -> None:
    flags = list(flags)
    if not flags:
        print("No risk flags.")
        return
    for flag in flags:
        print(f"[{flag.severity.upper():6s}] {flag.title}: {flag.detail}")
