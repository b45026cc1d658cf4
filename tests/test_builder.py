from decimal import Decimal

from cashout_sim.builder import apply_builder_payments, builder_occurrence_months, resolve_builder_amount
from cashout_sim.data_models import (
    BalloonSchedule,
    BuilderPaymentItem,
    IndexConfig,
    MonthlySchedule,
    OnceSchedule,
    TimelineRow,
)
from cashout_sim.utils import month_range


def _rows(start, end):
    return {m: TimelineRow(month_key=m) for m in month_range(start, end)}


def test_resolve_amount_fixed_and_percent():
    fixed = BuilderPaymentItem(id=1, amount=Decimal("2500.555"), schedule=OnceSchedule("2025-01-01"))
    percent = BuilderPaymentItem(
        id=2, amount=Decimal("10"), schedule=OnceSchedule("2025-01-01"), amount_mode="percent"
    )
    assert resolve_builder_amount(fixed, Decimal("500000")) == Decimal("2500.56")
    assert resolve_builder_amount(percent, Decimal("500000")) == Decimal("50000")


def test_occurrence_months_per_variant():
    assert builder_occurrence_months(OnceSchedule("2025-03-10")) == ["2025-03"]
    assert builder_occurrence_months(OnceSchedule("")) == []
    assert builder_occurrence_months(MonthlySchedule("2025-01-05", "2025-03-05")) == [
        "2025-01",
        "2025-02",
        "2025-03",
    ]
    assert builder_occurrence_months(MonthlySchedule("2025-01-05", "")) == []
    assert builder_occurrence_months(BalloonSchedule("2025-01-01", "2025-12-01", 6)) == ["2025-01", "2025-07"]
    assert builder_occurrence_months(BalloonSchedule("2025-01-01", "2025-03-01", 0)) == [
        "2025-01",
        "2025-02",
        "2025-03",
    ]


def test_apply_posts_nominal_and_corrected(base_simulation, signal_payment):
    base_simulation.builder_payments = [signal_payment]
    rows = _rows("2025-01", "2025-03")
    apply_builder_payments(rows, base_simulation, "2025-01")

    assert rows["2025-01"].categories.builder_nominal == Decimal("100000")
    assert rows["2025-01"].categories.builder_corrected == Decimal("100000")
    assert rows["2025-02"].categories.builder_nominal == 0


def test_apply_corrects_indexed_payments(base_simulation, indexed_config):
    base_simulation.index = indexed_config
    base_simulation.builder_payments = [
        BuilderPaymentItem(id=1, amount=Decimal("1000"), schedule=OnceSchedule("2025-03-01"), index_ref="INCC")
    ]
    rows = _rows("2025-01", "2025-04")
    apply_builder_payments(rows, base_simulation, "2025-01")

    categories = rows["2025-03"].categories
    assert categories.builder_nominal == Decimal("1000")
    assert categories.builder_corrected == Decimal("1030.30")


def test_apply_drops_out_of_range_and_zero_items(base_simulation):
    base_simulation.builder_payments = [
        BuilderPaymentItem(id=1, amount=Decimal("500"), schedule=MonthlySchedule("2024-11-01", "2025-02-01")),
        BuilderPaymentItem(id=2, amount=Decimal("0"), schedule=OnceSchedule("2025-01-01")),
    ]
    rows = _rows("2025-01", "2025-01")
    apply_builder_payments(rows, base_simulation, "2025-01")

    assert list(rows) == ["2025-01"]
    assert rows["2025-01"].categories.builder_nominal == Decimal("500")


def test_apply_accumulates_multiple_items_in_same_month(base_simulation):
    base_simulation.index = IndexConfig()
    base_simulation.builder_payments = [
        BuilderPaymentItem(id=1, amount=Decimal("100.10"), schedule=OnceSchedule("2025-02-01")),
        BuilderPaymentItem(id=2, amount=Decimal("200.20"), schedule=MonthlySchedule("2025-01-01", "2025-02-01")),
    ]
    rows = _rows("2025-01", "2025-02")
    apply_builder_payments(rows, base_simulation, "2025-01")
    assert rows["2025-02"].categories.builder_nominal == Decimal("300.30")
    assert rows["2025-02"].categories.builder_corrected == Decimal("300.30")
