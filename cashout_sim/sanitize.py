"""Normalization of raw simulation documents.

Simulations arrive as JSON-like mappings with camelCase keys, the format
used by saved and exported backup documents. ``sanitize_simulation`` turns
such a mapping into a typed ``Simulation``: numbers are coerced with neutral
fallbacks, enums are clamped to their allowed values and every payment item
gets the schedule variant its ``type`` names. It never raises, so the engine
can assume its input is well formed.

``load_document`` and ``select_simulation`` read a document from disk and
pick one simulation out of a backup that holds several.
"""

from __future__ import annotations

import json
import logging
from decimal import ROUND_FLOOR, Decimal
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .data_models import (
    AMOUNT_MODES,
    BUILDER_PHASES,
    MAX_TERM_MONTHS,
    BalloonSchedule,
    BuilderPaymentItem,
    CashflowItem,
    ConstructionInterestConfig,
    ExtraCost,
    FinancingConfig,
    IndexConfig,
    InstallmentsSchedule,
    MonthlySchedule,
    OnceSchedule,
    ProtectionChecklist,
    Simulation,
)
from .utils import ZERO, to_decimal

logger = logging.getLogger(__name__)

DEFAULT_EVERY_MONTHS = 6
DEFAULT_INSTALLMENT_COUNT = 12


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _list(value: Any) -> List[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _non_negative(value: Any) -> Decimal:
    number = to_decimal(value)
    return number if number >= 0 else ZERO


def _int_or(value: Any, fallback: int) -> int:
    number = to_decimal(value, fallback=Decimal(fallback))
    return int(number.to_integral_value(rounding=ROUND_FLOOR))


def _at_least_one(value: Any, fallback: int) -> int:
    if value is None or value == "":
        return fallback
    return max(1, _int_or(value, fallback))


def _term_months(value: Any, fallback: int) -> int:
    if value is None or value == "":
        return fallback
    months = max(0, _int_or(value, fallback))
    if months > MAX_TERM_MONTHS:
        logger.debug("Term of %d months capped at %d", months, MAX_TERM_MONTHS)
        return MAX_TERM_MONTHS
    return months


def _tolerance_days(value: Any) -> Optional[int]:
    # an absent value stays None so a project-level default can apply
    if value is None or value == "":
        return None
    return max(0, _int_or(value, 0))


def _item_id(raw: Mapping[str, Any], fallback: int) -> int:
    item_id = _int_or(raw.get("id"), 0)
    return item_id if item_id > 0 else fallback


def _rate_series(value: Any) -> Dict[str, Decimal]:
    series: Dict[str, Decimal] = {}
    for month_key, rate in _mapping(value).items():
        number = to_decimal(rate, fallback=Decimal("NaN"))
        if number.is_finite():
            series[str(month_key)] = number
    return series


def sanitize_index(raw: Mapping[str, Any], top_level_series: Any = None) -> IndexConfig:
    raw = _mapping(raw)
    series_source = top_level_series if isinstance(top_level_series, Mapping) else raw.get("series")
    series = {
        str(ref).strip(): _rate_series(values)
        for ref, values in _mapping(series_source).items()
        if str(ref).strip()
    }
    return IndexConfig(
        enabled=raw.get("enabled") is True,
        monthly_rate=to_decimal(raw.get("monthlyRate")),
        series=series,
    )


def sanitize_financing(raw: Mapping[str, Any]) -> FinancingConfig:
    raw = _mapping(raw)
    return FinancingConfig(
        enabled=raw.get("enabled") is True,
        system="PRICE" if raw.get("system") == "PRICE" else "SAC",
        start_date=_text(raw.get("startDate")),
        months=_term_months(raw.get("months"), 0),
        annual_rate=to_decimal(raw.get("annualRate")),
    )


def sanitize_construction_interest(raw: Mapping[str, Any]) -> ConstructionInterestConfig:
    raw = _mapping(raw)
    principal_raw = raw.get("constructionPrincipal")
    principal: Optional[Decimal] = None
    if principal_raw not in (None, ""):
        parsed = to_decimal(principal_raw, fallback=Decimal("NaN"))
        principal = max(ZERO, parsed) if parsed.is_finite() else None
    return ConstructionInterestConfig(
        enabled=raw.get("enabled") is True,
        construction_principal=principal,
        monthly_rate=_non_negative(raw.get("monthlyRate")),
        disbursement_percent_monthly=_non_negative(raw.get("disbursementPercentMonthly")),
        disbursement_by_month=_rate_series(raw.get("disbursementByMonth")),
    )


def sanitize_cashflow(raw: Mapping[str, Any], fallback_id: int) -> CashflowItem:
    raw = _mapping(raw)
    kind = _text(raw.get("type")) or "once"
    if kind == "monthly":
        schedule = MonthlySchedule(_text(raw.get("startDate")), _text(raw.get("endDate")))
    elif kind == "balloon":
        schedule = BalloonSchedule(
            _text(raw.get("startDate")),
            _text(raw.get("endDate")),
            _at_least_one(raw.get("everyMonths"), DEFAULT_EVERY_MONTHS),
        )
    elif kind == "installments":
        schedule = InstallmentsSchedule(
            _text(raw.get("date")),
            max(1, _term_months(raw.get("installmentCount"), DEFAULT_INSTALLMENT_COUNT)),
            _at_least_one(raw.get("everyMonths"), 1),
        )
    else:
        if kind != "once":
            logger.debug("Unknown cash-flow type %r treated as once", kind)
        schedule = OnceSchedule(_text(raw.get("date")))
    return CashflowItem(
        id=_item_id(raw, fallback_id),
        label=_text(raw.get("label")),
        amount=_non_negative(raw.get("amount")),
        schedule=schedule,
    )


def sanitize_builder_payment(raw: Mapping[str, Any], fallback_id: int) -> BuilderPaymentItem:
    raw = _mapping(raw)
    kind = _text(raw.get("type")) or "once"
    if kind == "monthly":
        schedule = MonthlySchedule(_text(raw.get("startDate")), _text(raw.get("endDate")))
    elif kind == "balloon":
        schedule = BalloonSchedule(
            _text(raw.get("startDate")),
            _text(raw.get("endDate")),
            _at_least_one(raw.get("everyMonths"), DEFAULT_EVERY_MONTHS),
        )
    else:
        schedule = OnceSchedule(_text(raw.get("date")))

    mode = _text(raw.get("amountMode")).lower()
    phase = _text(raw.get("phase"))
    return BuilderPaymentItem(
        id=_item_id(raw, fallback_id),
        amount=_non_negative(raw.get("amount")),
        schedule=schedule,
        amount_mode=mode if mode in AMOUNT_MODES else "fixed",
        phase=phase if phase in BUILDER_PHASES else "Work",
        index_ref=_text(raw.get("indexRef")),
    )


def sanitize_extra_cost(raw: Mapping[str, Any], fallback_id: int) -> ExtraCost:
    raw = _mapping(raw)
    return ExtraCost(
        id=_item_id(raw, fallback_id),
        label=_text(raw.get("label")),
        category=_text(raw.get("category")),
        due_month=_text(raw.get("dueMonth")),
        amount=_non_negative(raw.get("amount")),
    )


def sanitize_checklist(raw: Mapping[str, Any]) -> ProtectionChecklist:
    raw = _mapping(raw)
    return ProtectionChecklist(
        quadro_resumo=raw.get("quadroResumo") is True,
        memorial_registry_checked=raw.get("memorialRegistryChecked") is True,
        brokerage_highlighted=raw.get("brokerageHighlighted") is True,
        sati_present=raw.get("satiPresent") is True,
        itbi_provisioned=raw.get("itbiProvisioned") is True,
        notes=_text(raw.get("notes")),
    )


def sanitize_simulation(raw: Any) -> Simulation:
    """Build a ``Simulation`` from a raw camelCase mapping.

    Anything that is not a mapping is treated as an empty document, which
    produces a simulation without a contract date (and so an empty result).
    """
    raw = _mapping(raw)
    sim_id = _int_or(raw.get("id"), 0)
    return Simulation(
        id=sim_id if sim_id > 0 else None,
        name=_text(raw.get("name")),
        contract_date=_text(raw.get("contractDate")),
        delivery_date=_text(raw.get("deliveryDate")),
        tolerance_days=_tolerance_days(raw.get("toleranceDays")),
        base_price=_non_negative(raw.get("basePrice")),
        index=sanitize_index(raw.get("index"), raw.get("indexSeries")),
        financing=sanitize_financing(raw.get("financing")),
        construction_interest=sanitize_construction_interest(raw.get("constructionInterest")),
        cashflows=[sanitize_cashflow(item, n) for n, item in enumerate(_list(raw.get("cashflows")), 1)],
        builder_payments=[
            sanitize_builder_payment(item, n) for n, item in enumerate(_list(raw.get("builderPayments")), 1)
        ],
        extras_costs=[sanitize_extra_cost(item, n) for n, item in enumerate(_list(raw.get("extrasCosts")), 1)],
        protection_checklist=sanitize_checklist(raw.get("protectionChecklist")),
    )


def load_document(path: Path) -> Dict[str, Any]:
    """Read a JSON document from ``path``.

    Raises
    ------
    ValueError
        If the file cannot be read or is not a JSON object.
    """
    try:
        with Path(path).open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as exc:
        raise ValueError(f"Cannot read simulation document {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Simulation document {path} must contain a JSON object")
    return data


def select_simulation(
    document: Mapping[str, Any], sim_id: Optional[int] = None
) -> Tuple[Mapping[str, Any], Mapping[str, Any]]:
    """Return ``(simulation, project)`` raw mappings from a document.

    A document with a ``simulations`` list is a backup: the simulation is
    chosen by ``sim_id``, then by the backup's selected simulation, then the
    first one. Any other document is taken as a single simulation. The
    project is the matching entry of ``projects`` or an empty mapping.

    Raises
    ------
    ValueError
        If the backup holds no simulations or none with ``sim_id``.
    """
    if "simulations" not in document:
        return document, {}

    simulations = [s for s in _list(document.get("simulations")) if isinstance(s, Mapping)]
    if not simulations:
        raise ValueError("Backup document contains no simulations")

    wanted = sim_id
    if wanted is None:
        wanted = _int_or(_mapping(document.get("ui")).get("selectedSimulationId"), 0) or None
    chosen = simulations[0]
    if wanted is not None:
        matches = [s for s in simulations if _int_or(s.get("id"), 0) == wanted]
        if matches:
            chosen = matches[0]
        elif sim_id is not None:
            raise ValueError(f"Simulation {sim_id} not found in backup document")

    project_id = _int_or(chosen.get("projectId"), 0)
    projects = [p for p in _list(document.get("projects")) if isinstance(p, Mapping)]
    project = next((p for p in projects if _int_or(p.get("id"), 0) == project_id), {})
    return chosen, project
