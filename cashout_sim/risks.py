"""Rule-based flags raised from the contract protection checklist."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from .data_models import Simulation

TOLERANCE_DAYS_LIMIT = 180


@dataclass(frozen=True)
class RiskFlag:
    id: str
    severity: str  # "high", "medium" or "low"
    title: str
    detail: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


def build_risk_flags(simulation: Simulation, project_tolerance_days: Optional[int] = None) -> List[RiskFlag]:
    """Return the risk flags for a simulation, most of them checklist gaps.

    ``project_tolerance_days`` is used only when the simulation leaves its
    tolerance period out; an explicit 0 is kept.
    """
    checklist = simulation.protection_checklist
    flags: List[RiskFlag] = []

    if not checklist.quadro_resumo:
        flags.append(
            RiskFlag(
                "missing-quadro-resumo",
                "high",
                "Summary table missing",
                "The checklist does not confirm a reviewed contract summary table (quadro-resumo).",
            )
        )
    if not checklist.brokerage_highlighted:
        flags.append(
            RiskFlag(
                "brokerage-not-highlighted",
                "medium",
                "Brokerage fee not confirmed",
                "There is no confirmation that the brokerage fee is highlighted in the contract.",
            )
        )
    if checklist.sati_present:
        flags.append(
            RiskFlag(
                "sati-present",
                "medium",
                "SATI fee present",
                "The checklist reports a SATI fee; review the charge and its legal basis.",
            )
        )
    if not checklist.itbi_provisioned:
        flags.append(
            RiskFlag(
                "missing-itbi-provision",
                "medium",
                "ITBI not provisioned",
                "No provision for the ITBI transfer tax is confirmed.",
            )
        )
    if not checklist.memorial_registry_checked:
        flags.append(
            RiskFlag(
                "missing-memorial-registry-check",
                "high",
                "Memorial and registry not checked",
                "The checklist does not confirm the building memorial and the property registry.",
            )
        )

    tolerance = simulation.tolerance_days
    if tolerance is None:
        tolerance = project_tolerance_days or 0
    if tolerance > TOLERANCE_DAYS_LIMIT:
        flags.append(
            RiskFlag(
                "tolerance-days-over-180",
                "low",
                "Tolerance period over 180 days",
                f"The delivery tolerance period is {tolerance} days.",
            )
        )
    return flags
