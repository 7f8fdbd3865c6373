"""
Targeted Therapy Rules

HER2-positive:
    dual blockade (trastuzumab + pertuzumab) recommended when node-positive or
    tumor > 2 cm, single-agent trastuzumab otherwise; 18 × q3w (≈ 1 year).

HR-positive (any HER2 status) meeting the high-risk intensification criterion:
    abemaciclib 150 mg bid for 2 years alongside endocrine therapy, offered
    next to the HER2 options when both apply.
"""
from __future__ import annotations

from typing import List

from .base import DosingUnit, DrugDetail, Modality, RegimenOption
from .profile import (
    INTENSIFY_GRADE,
    INTENSIFY_KI67,
    INTENSIFY_NODE_STAGE,
    INTENSIFY_TUMOR_CM,
    RegimenContext,
    high_risk_intensification_criterion,
)

DUAL_BLOCKADE_TUMOR_CM = 2.0
HER2_MAINTENANCE_CYCLES = 18
ABEMACICLIB_DAYS = 730


def _trastuzumab() -> DrugDetail:
    return DrugDetail(name="Trastuzumab", standard_dose=6, loading_dose=8, unit=DosingUnit.WEIGHT)


def _her2_options(ctx: RegimenContext) -> List[RegimenOption]:
    p = ctx.profile
    dual = p.node_stage >= 1 or p.tumor_cm > DUAL_BLOCKADE_TUMOR_CM
    drivers = (
        f"N{p.node_stage}, tumor {p.tumor_cm:g} cm; dual blockade when ≥ N1 "
        f"or tumor > {DUAL_BLOCKADE_TUMOR_CM:g} cm"
    )
    return [
        RegimenOption(
            id="t_hp",
            name="HP dual HER2 blockade",
            modality=Modality.TARGET,
            description="Trastuzumab + Pertuzumab",
            cycle="q3w, 1 year",
            total_cycles=HER2_MAINTENANCE_CYCLES,
            frequency_days=21,
            recommended=dual,
            rationale=f"HER2-positive ({drivers}).",
            drugs=[
                _trastuzumab(),
                DrugDetail(name="Pertuzumab", standard_dose=420, loading_dose=840, unit=DosingUnit.FIXED),
            ],
            pros=["Improved invasive disease-free survival in node-positive disease"],
            cons=["Diarrhea", "Cost"],
        ),
        RegimenOption(
            id="t_h",
            name="Trastuzumab",
            modality=Modality.TARGET,
            description="Single-agent trastuzumab",
            cycle="q3w, 1 year",
            total_cycles=HER2_MAINTENANCE_CYCLES,
            frequency_days=21,
            recommended=not dual,
            rationale=f"HER2-positive, lower anatomic risk ({drivers}).",
            drugs=[_trastuzumab()],
            pros=["Fewer side effects"],
            cons=["Less benefit in node-positive disease"],
        ),
    ]


def _intensification_option(ctx: RegimenContext) -> RegimenOption:
    p = ctx.profile
    return RegimenOption(
        id="t_abema",
        name="Abemaciclib intensification (CDK4/6i)",
        modality=Modality.TARGET,
        description="Abemaciclib alongside endocrine therapy (monarchE)",
        cycle="bid × 2 years",
        total_cycles=ABEMACICLIB_DAYS,
        frequency_days=1,
        recommended=True,
        rationale=(
            f"High-risk intensification criterion met (N{p.node_stage}, G{p.grade or '?'}, "
            f"tumor {p.tumor_cm:g} cm, Ki-67 {p.ki67:g}%; criterion ≥ N{INTENSIFY_NODE_STAGE}, "
            f"or N1 with G{INTENSIFY_GRADE}, tumor ≥ {INTENSIFY_TUMOR_CM:g} cm or "
            f"Ki-67 ≥ {INTENSIFY_KI67}%)."
        ),
        drugs=[
            DrugDetail(name="Abemaciclib", standard_dose=150, unit=DosingUnit.FIXED, administration="bid"),
        ],
        pros=["Reduces early recurrence"],
        cons=["Diarrhea", "Neutropenia"],
    )


def evaluate_targeted(ctx: RegimenContext) -> List[RegimenOption]:
    p = ctx.profile
    options: List[RegimenOption] = []
    if p.her2_positive:
        options.extend(_her2_options(ctx))
    if p.hr_positive and high_risk_intensification_criterion(p):
        options.append(_intensification_option(ctx))
    return options
