"""Data models for the cash-out simulator.

This module defines dataclasses for the simulation input (index, financing
and construction-interest settings, cash-flow and builder payment items) and
for the engine output (timeline rows, amortization entries, totals and the
results envelope). Payment schedules are a tagged union: one frozen dataclass
per recurrence variant, so an item only carries the fields its variant uses.

Output dataclasses provide ``to_dict`` methods producing the camelCase field
names used by saved and exported backup documents.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

ZERO = Decimal("0")
ONE = Decimal("1")

FINANCING_SYSTEMS = ("SAC", "PRICE")
BUILDER_PHASES = ("Signal", "Entry", "Work", "Intermediary", "Keys")
AMOUNT_MODES = ("fixed", "percent")
# longest loan term or installment plan accepted, in months (100 years)
MAX_TERM_MONTHS = 1200


@dataclass(frozen=True)
class OnceSchedule:
    """A single payment on ``date``."""

    date: str
    kind: str = field(default="once", init=False)


@dataclass(frozen=True)
class MonthlySchedule:
    """A payment every month from ``start_date`` to ``end_date`` inclusive."""

    start_date: str
    end_date: str
    kind: str = field(default="monthly", init=False)


@dataclass(frozen=True)
class BalloonSchedule:
    """A payment every ``every_months`` months between two dates."""

    start_date: str
    end_date: str
    every_months: int = 6
    kind: str = field(default="balloon", init=False)


@dataclass(frozen=True)
class InstallmentsSchedule:
    """A total amount split into ``installment_count`` parts.

    The first part falls on ``date``; the following ones are spaced
    ``every_months`` apart.
    """

    date: str
    installment_count: int = 12
    every_months: int = 1
    kind: str = field(default="installments", init=False)


CashflowSchedule = Union[OnceSchedule, MonthlySchedule, BalloonSchedule, InstallmentsSchedule]
BuilderSchedule = Union[OnceSchedule, MonthlySchedule, BalloonSchedule]


@dataclass
class CashflowItem:
    """A free-form cash flow paid by the buyer."""

    id: int
    label: str
    amount: Decimal
    schedule: CashflowSchedule


@dataclass
class BuilderPaymentItem:
    """A payment due to the builder under the purchase contract.

    Attributes
    ----------
    amount: Decimal
        Either a money amount (``amount_mode == "fixed"``) or a percentage of
        the simulation base price (``amount_mode == "percent"``).
    index_ref: str
        Key into the index series used to correct this payment. An empty
        string means the payment is not corrected.
    """

    id: int
    amount: Decimal
    schedule: BuilderSchedule
    amount_mode: str = "fixed"
    phase: str = "Work"
    index_ref: str = ""


@dataclass
class ExtraCost:
    """An informational cost (taxes, fees) that is not placed on the timeline."""

    id: int
    label: str
    category: str
    due_month: str
    amount: Decimal


@dataclass
class ProtectionChecklist:
    quadro_resumo: bool = False
    memorial_registry_checked: bool = False
    brokerage_highlighted: bool = False
    sati_present: bool = False
    itbi_provisioned: bool = False
    notes: str = ""


@dataclass
class IndexConfig:
    """Monetary correction settings.

    ``monthly_rate`` is a percentage applied every month when ``enabled``.
    ``series`` maps an index reference to explicit ``{month_key: rate}``
    overrides, which take precedence over the default rate.
    """

    enabled: bool = False
    monthly_rate: Decimal = ZERO
    series: Dict[str, Dict[str, Decimal]] = field(default_factory=dict)


@dataclass
class FinancingConfig:
    enabled: bool = False
    system: str = "SAC"
    start_date: str = ""
    months: int = 0
    annual_rate: Decimal = ZERO  # nominal annual rate in percent


@dataclass
class ConstructionInterestConfig:
    """Interest charged on funds disbursed to the builder before delivery.

    When ``construction_principal`` is ``None`` the simulation base price is
    used. ``disbursement_by_month`` overrides the flat monthly disbursement
    percentage for specific month keys.
    """

    enabled: bool = False
    construction_principal: Optional[Decimal] = None
    monthly_rate: Decimal = ZERO
    disbursement_percent_monthly: Decimal = ZERO
    disbursement_by_month: Dict[str, Decimal] = field(default_factory=dict)


@dataclass
class Simulation:
    """Configuration of one purchase simulation.

    This collects every input of the engine into a single object. Dates are
    kept as the ISO strings supplied by the caller; the engine converts them
    to month keys and ignores the ones that do not parse.
    """

    contract_date: str
    delivery_date: str
    name: str = ""
    id: Optional[int] = None
    tolerance_days: Optional[int] = None  # None when the document leaves it out
    base_price: Decimal = ZERO
    index: IndexConfig = field(default_factory=IndexConfig)
    financing: FinancingConfig = field(default_factory=FinancingConfig)
    construction_interest: ConstructionInterestConfig = field(
        default_factory=ConstructionInterestConfig
    )
    cashflows: List[CashflowItem] = field(default_factory=list)
    builder_payments: List[BuilderPaymentItem] = field(default_factory=list)
    extras_costs: List[ExtraCost] = field(default_factory=list)
    protection_checklist: ProtectionChecklist = field(default_factory=ProtectionChecklist)


@dataclass
class AmortizationEntry:
    """One period of a loan amortization schedule.

    ``month_key`` is empty for stand-alone schedules and is stamped when the
    schedule is placed on a simulation timeline.
    """

    installment: Decimal
    interest: Decimal
    amort: Decimal
    balance: Decimal
    month_key: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthKey": self.month_key,
            "installment": float(self.installment),
            "interest": float(self.interest),
            "amort": float(self.amort),
            "balance": float(self.balance),
        }


@dataclass
class TimelineCategories:
    builder_nominal: Decimal = ZERO
    builder_corrected: Decimal = ZERO
    legacy_cashflow_nominal: Decimal = ZERO
    legacy_cashflow_corrected: Decimal = ZERO
    construction_interest: Decimal = ZERO
    financing_installment: Decimal = ZERO

    def to_dict(self) -> Dict[str, float]:
        return {
            "builderNominal": float(self.builder_nominal),
            "builderCorrected": float(self.builder_corrected),
            "legacyCashflowNominal": float(self.legacy_cashflow_nominal),
            "legacyCashflowCorrected": float(self.legacy_cashflow_corrected),
            "constructionInterest": float(self.construction_interest),
            "financingInstallment": float(self.financing_installment),
        }


@dataclass
class TimelineRow:
    """Amounts due in one calendar month of the projection."""

    month_key: str
    nominal: Decimal = ZERO
    corrected: Decimal = ZERO
    factor: Decimal = ONE
    financing_installment: Decimal = ZERO
    total_out: Decimal = ZERO
    categories: TimelineCategories = field(default_factory=TimelineCategories)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthKey": self.month_key,
            "nominal": float(self.nominal),
            "corrected": float(self.corrected),
            "factor": float(self.factor),
            "financingInstallment": float(self.financing_installment),
            "totalOut": float(self.total_out),
            "categories": self.categories.to_dict(),
        }


@dataclass
class Totals:
    nominal: Decimal = ZERO
    corrected: Decimal = ZERO
    financing: Decimal = ZERO
    grand_total: Decimal = ZERO

    def to_dict(self) -> Dict[str, float]:
        return {
            "nominal": float(self.nominal),
            "corrected": float(self.corrected),
            "financing": float(self.financing),
            "grandTotal": float(self.grand_total),
        }


@dataclass
class ResultsMeta:
    """Bounds and per-component summaries reported next to the timeline."""

    start_month: Optional[str] = None
    end_month: Optional[str] = None
    delivery_plus_tolerance_month: Optional[str] = None
    financing_end_month: Optional[str] = None
    financing_principal: Decimal = ZERO
    financing_months: int = 0
    financing_system: str = "SAC"
    financing_start_month: Optional[str] = None
    financing_annual_rate: Decimal = ZERO
    financing_schedule: List[AmortizationEntry] = field(default_factory=list)
    construction_interest_total: Decimal = ZERO
    construction_interest_monthly_rate_percent: Decimal = ZERO
    monthly_index_rate_percent: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "startMonth": self.start_month,
            "endMonth": self.end_month,
            "deliveryPlusToleranceMonth": self.delivery_plus_tolerance_month,
            "financingEndMonth": self.financing_end_month,
            "financingPrincipal": float(self.financing_principal),
            "financingMonths": self.financing_months,
            "financingSystem": self.financing_system,
            "financingStartMonth": self.financing_start_month,
            "financingAnnualRate": float(self.financing_annual_rate),
            "financingSchedule": [e.to_dict() for e in self.financing_schedule],
            "constructionInterestTotal": float(self.construction_interest_total),
            "constructionInterestMonthlyRatePercent": float(
                self.construction_interest_monthly_rate_percent
            ),
            "monthlyIndexRatePercent": float(self.monthly_index_rate_percent),
        }


@dataclass
class Results:
    timeline: List[TimelineRow] = field(default_factory=list)
    totals: Totals = field(default_factory=Totals)
    meta: ResultsMeta = field(default_factory=ResultsMeta)

    @classmethod
    def empty(cls) -> "Results":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timeline": [row.to_dict() for row in self.timeline],
            "totals": self.totals.to_dict(),
            "meta": self.meta.to_dict(),
        }
