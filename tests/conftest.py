from decimal import Decimal

import pytest

from cashout_sim.data_models import (
    BuilderPaymentItem,
    CashflowItem,
    IndexConfig,
    OnceSchedule,
    Simulation,
)


@pytest.fixture
def base_simulation() -> Simulation:
    """Contract signed in January 2025, delivery mid-2026 with 180 days of grace."""
    return Simulation(
        name="Tower A 1201",
        contract_date="2025-01-15",
        delivery_date="2026-06-01",
        tolerance_days=180,
        base_price=Decimal("500000"),
    )


@pytest.fixture
def indexed_config() -> IndexConfig:
    return IndexConfig(enabled=True, monthly_rate=Decimal("1"))


@pytest.fixture
def signal_payment() -> BuilderPaymentItem:
    return BuilderPaymentItem(
        id=1,
        amount=Decimal("100000"),
        schedule=OnceSchedule("2025-01-20"),
        phase="Signal",
    )


@pytest.fixture
def once_cashflow() -> CashflowItem:
    return CashflowItem(id=1, label="Down payment", amount=Decimal("1000"), schedule=OnceSchedule("2025-02-10"))


@pytest.fixture
def raw_document() -> dict:
    """A simulation document as saved by the front-end (camelCase keys)."""
    return {
        "id": 7,
        "projectId": 1,
        "name": "Tower A 1201",
        "contractDate": "2025-01-15",
        "deliveryDate": "2026-06-01",
        "toleranceDays": 180,
        "basePrice": 500000,
        "index": {"enabled": True, "monthlyRate": 0.5},
        "financing": {
            "enabled": True,
            "system": "PRICE",
            "startDate": "2026-12-01",
            "months": 24,
            "annualRate": 10,
        },
        "builderPayments": [
            {"id": 1, "type": "once", "phase": "Signal", "amountMode": "percent", "amount": 10, "date": "2025-01-20"},
            {
                "id": 2,
                "type": "monthly",
                "phase": "Work",
                "amount": 2000,
                "indexRef": "INCC",
                "startDate": "2025-02-01",
                "endDate": "2026-05-01",
            },
        ],
        "cashflows": [
            {"id": 1, "type": "installments", "label": "Keys", "amount": 1000, "date": "2026-06-10",
             "installmentCount": 3, "everyMonths": 1},
        ],
        "extrasCosts": [{"id": 1, "label": "ITBI", "category": "tax", "dueMonth": "2026-07", "amount": 15000}],
        "protectionChecklist": {"quadroResumo": True},
    }
