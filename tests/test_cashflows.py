from decimal import Decimal

from cashout_sim.cashflows import (
    apply_legacy_cashflows,
    cashflow_occurrences,
    installment_amounts,
    legacy_month_factors,
)
from cashout_sim.data_models import (
    BalloonSchedule,
    CashflowItem,
    IndexConfig,
    InstallmentsSchedule,
    MonthlySchedule,
    OnceSchedule,
    TimelineRow,
)
from cashout_sim.utils import month_range


def test_installment_split_last_absorbs_remainder():
    parts = installment_amounts(Decimal("1000"), 3)
    assert parts == [Decimal("333.33"), Decimal("333.33"), Decimal("333.34")]
    assert sum(parts) == Decimal("1000")


def test_installment_split_sums_exactly_for_awkward_totals():
    cases = [(Decimal("100"), 7), (Decimal("999.99"), 12), (Decimal("0.05"), 3), (Decimal("0.07"), 10), (Decimal("0.99"), 100)]
    for total, count in cases:
        parts = installment_amounts(total, count)
        assert len(parts) == count
        assert sum(parts) == total
        assert all(part >= 0 for part in parts)


def test_installment_split_never_overshoots_small_totals():
    parts = installment_amounts(Decimal("0.07"), 10)
    assert parts == [Decimal("0.01")] * 7 + [Decimal("0.00")] * 3


def test_installments_occurrences_are_stepped():
    item = CashflowItem(
        id=1,
        label="Keys",
        amount=Decimal("1000"),
        schedule=InstallmentsSchedule("2025-11-15", installment_count=3, every_months=2),
    )
    assert cashflow_occurrences(item) == [
        ("2025-11", Decimal("333.33")),
        ("2026-01", Decimal("333.33")),
        ("2026-03", Decimal("333.34")),
    ]


def test_occurrences_for_other_variants():
    monthly = CashflowItem(1, "Rent", Decimal("50"), MonthlySchedule("2025-01-01", "2025-02-01"))
    balloon = CashflowItem(2, "Yearly", Decimal("70"), BalloonSchedule("2025-01-01", "2026-01-01", 12))
    broken = CashflowItem(3, "Broken", Decimal("70"), OnceSchedule("not a date"))
    assert cashflow_occurrences(monthly) == [("2025-01", Decimal("50")), ("2025-02", Decimal("50"))]
    assert cashflow_occurrences(balloon) == [("2025-01", Decimal("70")), ("2026-01", Decimal("70"))]
    assert cashflow_occurrences(broken) == []


def test_legacy_factors_roll_from_first_month():
    months = ["2025-01", "2025-02", "2025-03"]
    factors = legacy_month_factors(months, IndexConfig(enabled=True, monthly_rate=Decimal("1")))
    assert factors == {
        "2025-01": Decimal("1.01"),
        "2025-02": Decimal("1.0201"),
        "2025-03": Decimal("1.030301"),
    }
    flat = legacy_month_factors(months, IndexConfig(enabled=False, monthly_rate=Decimal("1")))
    assert set(flat.values()) == {Decimal("1")}


def test_apply_posts_corrected_with_shared_factor(base_simulation, indexed_config, once_cashflow):
    base_simulation.index = indexed_config
    base_simulation.cashflows = [once_cashflow]
    months = month_range("2025-01", "2025-03")
    rows = {m: TimelineRow(month_key=m) for m in months}
    apply_legacy_cashflows(rows, months, base_simulation)

    categories = rows["2025-02"].categories
    assert categories.legacy_cashflow_nominal == Decimal("1000")
    assert categories.legacy_cashflow_corrected == Decimal("1020.10")


def test_apply_without_index_keeps_nominal(base_simulation, once_cashflow):
    base_simulation.cashflows = [once_cashflow]
    months = month_range("2025-01", "2025-03")
    rows = {m: TimelineRow(month_key=m) for m in months}
    apply_legacy_cashflows(rows, months, base_simulation)

    categories = rows["2025-02"].categories
    assert categories.legacy_cashflow_corrected == categories.legacy_cashflow_nominal
