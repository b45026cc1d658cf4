"""Command-line interface for the cash-out simulator.

This module uses the ``click`` library to implement a multi-command
interface. Users can run a saved simulation document through the engine,
print a stand-alone SAC/PRICE amortization schedule or list the checklist
risk flags. Results can be printed to the terminal or exported to JSON/CSV
files.
"""

from __future__ import annotations

import csv
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import click

from . import config
from .amortization import build_schedule
from .data_models import MAX_TERM_MONTHS, AmortizationEntry, Results
from .engine import compute_simulation_results
from .formatter import print_breakdown, print_risks, print_schedule, print_timeline, print_totals
from .risks import build_risk_flags
from .sanitize import load_document, sanitize_simulation, select_simulation
from .summary import SimulationSummary, summarize
from .utils import add_months, month_index, to_decimal


def parse_amount(value: str) -> float:
    """Parse a numeric string with optional suffixes.

    Accepts plain floats ("500000") and shorthand with ``k``/``m`` suffixes
    (e.g., "500k" meaning 500_000). Returns a float.
    """
    value = value.strip().lower()
    value = value.replace(",", "")
    factor = 1.0
    if value.endswith("k"):
        factor = 1_000.0
        value = value[:-1]
    elif value.endswith("m"):
        factor = 1_000_000.0
        value = value[:-1]
    try:
        return float(value) * factor
    except ValueError:
        raise click.BadParameter(f"Invalid amount: {value}")


def _load_simulation(path: str, sim_id: Optional[int]):
    try:
        document = load_document(Path(path))
        raw_simulation, project = select_simulation(document, sim_id)
    except ValueError as exc:
        raise click.BadParameter(str(exc))
    project_tolerance = project.get("toleranceDays") if project else None
    try:
        project_tolerance = int(project_tolerance) if project_tolerance is not None else None
    except (TypeError, ValueError, OverflowError):
        project_tolerance = None
    return sanitize_simulation(raw_simulation), project_tolerance


def export_to_json(path: Path, results: Results, summary: SimulationSummary) -> None:
    """Export the full results document, with its breakdowns, to a JSON file."""
    data = results.to_dict()
    data["summary"] = summary.to_dict()
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)


def export_to_csv(path: Path, results: Results) -> None:
    """Export the monthly timeline to a CSV file."""
    header = [
        "Month",
        "Builder_Nominal",
        "Builder_Corrected",
        "Cashflow_Nominal",
        "Cashflow_Corrected",
        "Construction_Interest",
        "Nominal",
        "Corrected",
        "Factor",
        "Financing_Installment",
        "Total_Out",
    ]
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        for row in results.timeline:
            c = row.categories
            writer.writerow(
                [
                    row.month_key,
                    float(c.builder_nominal),
                    float(c.builder_corrected),
                    float(c.legacy_cashflow_nominal),
                    float(c.legacy_cashflow_corrected),
                    float(c.construction_interest),
                    float(row.nominal),
                    float(row.corrected),
                    float(row.factor),
                    float(row.financing_installment),
                    float(row.total_out),
                ]
            )


def export_schedule_to_csv(path: Path, schedule: List[AmortizationEntry]) -> None:
    with path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(["Period", "Month", "Installment", "Interest", "Amort", "Balance"])
        for period, e in enumerate(schedule, 1):
            writer.writerow(
                [period, e.month_key, float(e.installment), float(e.interest), float(e.amort), float(e.balance)]
            )


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """Cash-out simulator for real-estate purchase contracts."""
    config.configure_logging(verbose)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--sim-id", "sim_id", type=int, help="Simulation id inside a backup document")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
@click.option("--max-rows", "max_rows", type=int, default=None, help="Timeline rows to print")
def simulate(document: str, sim_id: Optional[int], output: Optional[str], max_rows: Optional[int]) -> None:
    """Compute the month-by-month cash-out timeline of a simulation."""
    simulation, _ = _load_simulation(document, sim_id)
    results = compute_simulation_results(simulation)
    summary = summarize(simulation, results)
    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            export_to_json(path, results, summary)
        elif path.suffix.lower() == ".csv":
            export_to_csv(path, results)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Results exported to {path}")
        return

    if not results.timeline:
        click.echo("No timeline: the contract date is missing or invalid.")
        return
    print_totals(results)
    print_breakdown(summary)
    limit = max_rows if max_rows is not None else config.MAX_ROWS
    if len(results.timeline) > limit:
        click.echo(f"Timeline has {len(results.timeline)} rows; showing first {limit} rows.")
    print_timeline(results.timeline[:limit])


@cli.command()
@click.option("--principal", "-p", "principal", required=True, help="Financed amount")
@click.option("--rate", "-r", "rate", required=True, type=float, help="Annual interest rate (percent)")
@click.option("--months", "-t", "months", required=True, type=int, help="Loan term in months")
@click.option("--system", "system", type=click.Choice(["SAC", "PRICE"], case_sensitive=False), default="SAC")
@click.option("--start-month", "-s", "start_month", help="First installment month (YYYY-MM)")
@click.option("--output", "output", type=str, help="Output file path (.json or .csv)")
def schedule(
    principal: str, rate: float, months: int, system: str, start_month: Optional[str], output: Optional[str]
) -> None:
    """Compute and print a SAC or PRICE amortization schedule."""
    if months <= 0:
        raise click.BadParameter("Term must be positive")
    if months > MAX_TERM_MONTHS:
        raise click.BadParameter(f"Term must not exceed {MAX_TERM_MONTHS} months")
    if start_month is not None and month_index(start_month) is None:
        raise click.BadParameter(f"Invalid year-month string: {start_month}")
    entries = build_schedule(system.upper(), to_decimal(parse_amount(principal)), to_decimal(rate), months)
    if start_month:
        for offset, entry in enumerate(entries):
            entry.month_key = add_months(start_month, offset)

    if output:
        path = Path(output)
        if path.suffix.lower() == ".json":
            data: Dict[str, Any] = {"system": system.upper(), "schedule": [e.to_dict() for e in entries]}
            with path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
        elif path.suffix.lower() == ".csv":
            export_schedule_to_csv(path, entries)
        else:
            raise click.BadParameter("Unsupported output format; use .json or .csv")
        click.echo(f"Schedule exported to {path}")
    else:
        print_schedule(entries)


@cli.command()
@click.argument("document", type=click.Path(exists=True, dir_okay=False))
@click.option("--sim-id", "sim_id", type=int, help="Simulation id inside a backup document")
def risks(document: str, sim_id: Optional[int]) -> None:
    """List the checklist risk flags of a simulation."""
    simulation, project_tolerance = _load_simulation(document, sim_id)
    print_risks(build_risk_flags(simulation, project_tolerance))


if __name__ == "__main__":
    cli()
