"""
Immunotherapy Rules

Triple-negative on the neoadjuvant pathway with tumor > 2 cm or node-positive
disease: pembrolizumab with chemotherapy, continued after surgery
(17 × q3w in total).
"""
from __future__ import annotations

from typing import List

from .base import DosingUnit, DrugDetail, Modality, RegimenOption
from .profile import RegimenContext

CHECKPOINT_TUMOR_CM = 2.0
CHECKPOINT_TOTAL_CYCLES = 17


def evaluate_immune(ctx: RegimenContext) -> List[RegimenOption]:
    p = ctx.profile
    if not (p.triple_negative and ctx.is_neoadjuvant):
        return []
    if not (p.tumor_cm > CHECKPOINT_TUMOR_CM or p.node_stage >= 1):
        return []
    return [
        RegimenOption(
            id="i_pembro",
            name="Pembrolizumab",
            modality=Modality.IMMUNE,
            description="With neoadjuvant chemotherapy, continued post-operatively (KEYNOTE-522)",
            cycle=f"q3w × {CHECKPOINT_TOTAL_CYCLES}",
            total_cycles=CHECKPOINT_TOTAL_CYCLES,
            frequency_days=21,
            recommended=True,
            rationale=(
                f"Triple-negative, neoadjuvant pathway, tumor {p.tumor_cm:g} cm / N{p.node_stage} "
                f"(threshold tumor > {CHECKPOINT_TUMOR_CM:g} cm or ≥ N1)."
            ),
            drugs=[DrugDetail(name="Pembrolizumab", standard_dose=200, unit=DosingUnit.FIXED)],
            pros=["Improves event-free survival"],
            cons=["Immune-related adverse events"],
        )
    ]
