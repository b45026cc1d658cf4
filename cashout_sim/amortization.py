"""Loan amortization schedules for the post-delivery financing.

Two systems are supported:

* **SAC** (constant amortization): every period repays ``principal / n`` of
  the balance, so the installment declines as interest falls.
* **PRICE** (annuity): every period pays the same installment

      payment = P * i / (1 - (1 + i)^-n)

  where ``P`` is the principal, ``i`` the monthly rate and ``n`` the number
  of payments. With a zero rate the payment simplifies to ``P / n``.

In both systems the final period repays whatever balance is left, so the
schedule always ends at exactly zero regardless of rounding drift.
"""

from __future__ import annotations

import logging
from decimal import Decimal, InvalidOperation
from typing import List

from .data_models import AmortizationEntry
from .utils import ZERO, safe_money, to_decimal

logger = logging.getLogger(__name__)

RESIDUAL_EPSILON = Decimal("0.000001")


def annual_to_monthly_rate(annual_rate_percent: Decimal) -> Decimal:
    """Convert a nominal annual rate in percent to an effective monthly decimal.

    The conversion compounds, ``(1 + a)^(1/12) - 1``, so 12 % a year gives
    about 0.9489 % a month rather than a flat 1 %. Rates at or below -100 %
    give 0.
    """
    annual = to_decimal(annual_rate_percent) / Decimal(100)
    base = 1 + annual
    if base <= 0:
        return ZERO
    try:
        monthly = base ** (Decimal(1) / Decimal(12)) - 1
    except InvalidOperation:
        return ZERO
    return monthly if monthly.is_finite() else ZERO


def _normalize_inputs(principal, annual_rate_percent, months):
    principal = max(ZERO, to_decimal(principal))
    annual_rate_percent = max(ZERO, to_decimal(annual_rate_percent))
    try:
        months = int(months)
    except (TypeError, ValueError):
        months = 0
    return principal, annual_rate_percent, months


def _clamp_residual(balance: Decimal) -> Decimal:
    if balance.copy_abs() < RESIDUAL_EPSILON:
        return ZERO
    return balance


def _entry(installment: Decimal, interest: Decimal, amort: Decimal, balance: Decimal) -> AmortizationEntry:
    return AmortizationEntry(
        installment=safe_money(installment),
        interest=safe_money(interest),
        amort=safe_money(amort),
        balance=safe_money(balance),
    )


def schedule_sac(principal: Decimal, annual_rate_percent: Decimal, months: int) -> List[AmortizationEntry]:
    """Build a constant-amortization (SAC) schedule.

    Returns an empty list when the principal or the term is not positive.
    """
    principal, annual_rate_percent, months = _normalize_inputs(principal, annual_rate_percent, months)
    if principal <= 0 or months <= 0:
        return []
    rate = annual_to_monthly_rate(annual_rate_percent)

    constant_amort = principal / Decimal(months)
    balance = principal
    schedule: List[AmortizationEntry] = []
    for period in range(1, months + 1):
        interest = balance * rate
        amort = balance if period == months else constant_amort
        balance = _clamp_residual(balance - amort)
        schedule.append(_entry(amort + interest, interest, amort, balance))
    return schedule


def _annuity_payment(principal: Decimal, rate: Decimal, months: int) -> Decimal:
    if rate == 0:
        return principal / Decimal(months)
    try:
        denominator = 1 - (1 + rate) ** -months
    except InvalidOperation:
        return principal / Decimal(months)
    if denominator == 0 or not denominator.is_finite():
        return principal / Decimal(months)
    payment = principal * rate / denominator
    return payment if payment.is_finite() else principal / Decimal(months)


def schedule_price(principal: Decimal, annual_rate_percent: Decimal, months: int) -> List[AmortizationEntry]:
    """Build a fixed-installment (PRICE / French) schedule.

    Every installment is equal except the last, which is recomputed as the
    remaining balance plus its interest.
    """
    principal, annual_rate_percent, months = _normalize_inputs(principal, annual_rate_percent, months)
    if principal <= 0 or months <= 0:
        return []
    rate = annual_to_monthly_rate(annual_rate_percent)
    payment = _annuity_payment(principal, rate, months)

    balance = principal
    schedule: List[AmortizationEntry] = []
    for period in range(1, months + 1):
        interest = balance * rate
        if period == months:
            amort = balance
            installment = amort + interest
        else:
            amort = payment - interest
            installment = payment
        balance = _clamp_residual(balance - amort)
        schedule.append(_entry(installment, interest, amort, balance))
    return schedule


def build_schedule(system: str, principal: Decimal, annual_rate_percent: Decimal, months: int) -> List[AmortizationEntry]:
    """Dispatch to the SAC or PRICE generator; unknown systems use SAC."""
    if str(system).upper() == "PRICE":
        return schedule_price(principal, annual_rate_percent, months)
    if str(system).upper() != "SAC":
        logger.debug("Unknown amortization system %r, using SAC", system)
    return schedule_sac(principal, annual_rate_percent, months)
