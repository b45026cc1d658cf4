from decimal import Decimal

from cashout_sim.data_models import (
    BalloonSchedule,
    BuilderPaymentItem,
    ExtraCost,
    MonthlySchedule,
    OnceSchedule,
)
from cashout_sim.engine import compute_simulation_results, simulate
from cashout_sim.sanitize import sanitize_simulation
from cashout_sim.summary import (
    category_totals,
    extras_costs_total,
    phase_occurrences,
    phase_totals,
    summarize,
)


def _payment(schedule, phase="Work", amount="1000", amount_mode="fixed"):
    return BuilderPaymentItem(id=1, amount=Decimal(amount), schedule=schedule, amount_mode=amount_mode, phase=phase)


def test_phase_occurrences_per_schedule_variant():
    assert phase_occurrences(_payment(OnceSchedule(""))) == 1
    assert phase_occurrences(_payment(MonthlySchedule("2025-02-01", "2026-05-01"))) == 16
    assert phase_occurrences(_payment(BalloonSchedule("2025-01-01", "2026-01-01", 6))) == 3
    assert phase_occurrences(_payment(BalloonSchedule("2025-01-01", "2025-12-01", 6))) == 2
    assert phase_occurrences(_payment(MonthlySchedule("2026-01-01", "2025-01-01"))) == 0
    assert phase_occurrences(_payment(MonthlySchedule("bad", "2025-01-01"))) == 0


def test_phase_totals_count_every_occurrence(base_simulation, signal_payment):
    base_simulation.builder_payments = [
        signal_payment,
        _payment(MonthlySchedule("2025-02-01", "2025-04-01"), phase="Work", amount="2000"),
        _payment(OnceSchedule("2026-06-10"), phase="Keys", amount="20", amount_mode="percent"),
        _payment(OnceSchedule("2025-03-01"), phase="Entry", amount="0"),
    ]
    totals = phase_totals(base_simulation)
    assert list(totals) == ["Signal", "Entry", "Work", "Intermediary", "Keys"]
    assert totals["Signal"] == Decimal("100000")
    assert totals["Entry"] == 0
    assert totals["Work"] == Decimal("6000")
    assert totals["Intermediary"] == 0
    assert totals["Keys"] == Decimal("100000")


def test_phase_totals_ignore_the_timeline_window(base_simulation):
    # a payment dated before the contract never reaches the timeline
    base_simulation.builder_payments = [_payment(OnceSchedule("2024-06-01"), phase="Signal")]
    results = compute_simulation_results(base_simulation)
    assert results.totals.nominal == 0
    assert phase_totals(base_simulation)["Signal"] == Decimal("1000")


def test_extras_costs_total(base_simulation):
    base_simulation.extras_costs = [
        ExtraCost(id=1, label="ITBI", category="tax", due_month="2026-07", amount=Decimal("15000")),
        ExtraCost(id=2, label="Registry", category="fee", due_month="2026-08", amount=Decimal("2500.50")),
    ]
    assert extras_costs_total(base_simulation) == Decimal("17500.50")
    base_simulation.extras_costs = []
    assert extras_costs_total(base_simulation) == Decimal("0.00")


def test_category_totals_add_up_to_results_totals(raw_document):
    results = simulate(raw_document)
    totals = category_totals(results)
    corrected = totals["builderCorrected"] + totals["legacyCashflowCorrected"] + totals["constructionInterest"]
    assert corrected == results.totals.corrected
    assert totals["financingInstallment"] == results.totals.financing
    assert totals["legacyCashflowCorrected"] > Decimal("1000")


def test_summarize_serializes_camel_case(raw_document):
    simulation = sanitize_simulation(raw_document)
    data = summarize(simulation, compute_simulation_results(simulation)).to_dict()
    assert set(data) == {"phaseTotals", "categoryTotals", "extrasCostsTotal"}
    assert data["phaseTotals"]["Signal"] == 50000.0
    assert data["extrasCostsTotal"] == 15000.0
