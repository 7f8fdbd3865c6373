"""
Endocrine Therapy Rules (HR-positive only)

Postmenopausal:
    aromatase inhibitor — letrozole recommended, anastrozole / exemestane
    as alternatives.
Premenopausal:
    high risk (chemotherapy indicated, ≥ N1, G3, Ki-67 ≥ 30 % or age < 35)
        → ovarian-function suppression + AI (recommended), OFS + tamoxifen
    otherwise
        → tamoxifen alone

When the high-risk intensification criterion is met the CDK4/6 inhibitor is
offered separately under targeted therapy and stacks onto whichever endocrine
regimen is chosen; the rationale says so.
"""
from __future__ import annotations

from typing import List

from .base import DosingUnit, DrugDetail, Modality, RegimenOption
from .profile import (
    KI67_HIGH_RISK,
    RegimenContext,
    high_risk_intensification_criterion,
)

OFS_YOUNG_AGE = 35
DAILY_FIVE_YEARS = 1825
MONTHLY_FIVE_YEARS = 65     # 28-day depot injections over 5 years


def _daily(option_id: str, name: str, dose: float, recommended: bool, rationale: str) -> RegimenOption:
    return RegimenOption(
        id=option_id,
        name=name,
        modality=Modality.ENDOCRINE,
        description=f"{name} {dose:g} mg once daily",
        cycle="qd × 5 years",
        total_cycles=DAILY_FIVE_YEARS,
        frequency_days=1,
        recommended=recommended,
        rationale=rationale,
        drugs=[DrugDetail(name=name, standard_dose=dose, unit=DosingUnit.FIXED, administration="qd")],
    )


def _ofs(option_id: str, name: str, partner: DrugDetail, recommended: bool, rationale: str) -> RegimenOption:
    return RegimenOption(
        id=option_id,
        name=name,
        modality=Modality.ENDOCRINE,
        description=f"Goserelin depot every 28 days with daily {partner.name.lower()}",
        cycle="q4w × 5 years",
        total_cycles=MONTHLY_FIVE_YEARS,
        frequency_days=28,
        recommended=recommended,
        rationale=rationale,
        drugs=[
            DrugDetail(name="Goserelin", standard_dose=3.6, unit=DosingUnit.FIXED),
            partner,
        ],
    )


def _stacking_note(ctx: RegimenContext) -> str:
    if high_risk_intensification_criterion(ctx.profile):
        return " Abemaciclib intensification (targeted therapy) is given alongside."
    return ""


def evaluate_endocrine(ctx: RegimenContext) -> List[RegimenOption]:
    p = ctx.profile
    if not p.hr_positive:
        return []
    note = _stacking_note(ctx)
    receptors = f"ER {p.markers.er_percent:g}%, PR {p.markers.pr_percent:g}%"

    if p.markers.menopausal:
        base = f"Postmenopausal, {receptors}: aromatase inhibitor."
        return [
            _daily("e_letrozole", "Letrozole", 2.5, True, base + note),
            _daily("e_anastrozole", "Anastrozole", 1, False, base + " Alternative AI." + note),
            _daily("e_exemestane", "Exemestane", 25, False, base + " Steroidal AI alternative." + note),
        ]

    young = p.age is not None and p.age < OFS_YOUNG_AGE
    high_risk = (
        ctx.chemo_indicated
        or p.node_stage >= 1
        or p.grade == 3
        or p.ki67 >= KI67_HIGH_RISK
        or young
    )
    drivers = (
        f"{receptors}, {p.summary()}, age {p.age if p.age is not None else '?'}, "
        f"chemotherapy {'indicated' if ctx.chemo_indicated else 'not indicated'}; OFS when "
        f"chemotherapy indicated, ≥ N1, G3, Ki-67 ≥ {KI67_HIGH_RISK}% or age < {OFS_YOUNG_AGE}"
    )
    if high_risk:
        return [
            _ofs(
                "e_ofs_ai", "OFS + Exemestane",
                DrugDetail(name="Exemestane", standard_dose=25, unit=DosingUnit.FIXED, administration="qd"),
                True, f"Premenopausal high risk ({drivers})." + note,
            ),
            _ofs(
                "e_ofs_tam", "OFS + Tamoxifen",
                DrugDetail(name="Tamoxifen", standard_dose=20, unit=DosingUnit.FIXED, administration="qd"),
                False, f"Premenopausal high risk, AI not tolerated ({drivers})." + note,
            ),
        ]
    return [
        _daily("e_tamoxifen", "Tamoxifen", 20, True, f"Premenopausal lower risk ({drivers})." + note),
    ]
