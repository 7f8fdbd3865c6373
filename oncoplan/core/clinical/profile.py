"""
Clinical Profile

Derived flags shared by the pathway recommender and every regimen rule
module, computed once per invocation from the subtype and classified markers.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from oncoplan.core.markers import ClassifiedMarkers
from .base import MolecularSubtype

# ── Thresholds ────────────────────────────────────────────────────────────────

KI67_HIGH_RISK        = 30     # %, clinical high-risk proliferation cutoff
ER_LOW_UPPER          = 10     # %, ER 1–9% is treated as triple-negative for chemo choice

# High-risk intensification criterion (CDK4/6 inhibitor, monarchE)
INTENSIFY_NODE_STAGE      = 2      # ≥ N2 qualifies alone
INTENSIFY_TUMOR_CM        = 5.0    # N1 plus tumor ≥ 5 cm
INTENSIFY_KI67            = 20     # N1 plus Ki-67 ≥ 20 %
INTENSIFY_GRADE           = 3      # N1 plus grade 3

PATH_NEOADJUVANT  = "path_neoadjuvant"
PATH_SURGERY      = "path_surgery"
PATH_CONSERVATIVE = "path_conservative"

RS_CHEMO_BENEFIT = 26   # recurrence score at or above which chemotherapy is indicated

_HER2_SUBTYPES = (MolecularSubtype.HER2_POSITIVE, MolecularSubtype.HER2_ENRICHED)


@dataclass(frozen=True)
class ClinicalProfile:
    markers: ClassifiedMarkers
    age: Optional[int]
    her2_positive: bool
    triple_negative: bool
    hr_positive: bool
    er_low: bool
    clinical_high_risk: bool

    @property
    def node_stage(self) -> int:
        return self.markers.node_stage

    @property
    def tumor_cm(self) -> float:
        return self.markers.tumor_size_cm

    @property
    def grade(self) -> int:
        return self.markers.grade

    @property
    def ki67(self) -> float:
        return self.markers.ki67

    @property
    def recurrence_score(self) -> Optional[float]:
        return self.markers.recurrence_score

    def summary(self) -> str:
        """Compact marker citation used in rationale text."""
        return (
            f"tumor {self.tumor_cm:g} cm, N{self.node_stage}, "
            f"G{self.grade or '?'}, Ki-67 {self.ki67:g}%"
        )


def build_profile(
    subtype: MolecularSubtype,
    markers: ClassifiedMarkers,
    age: Optional[int] = None,
) -> ClinicalProfile:
    her2_positive = subtype in _HER2_SUBTYPES or markers.her2_positive
    return ClinicalProfile(
        markers=markers,
        age=age,
        her2_positive=her2_positive,
        triple_negative=subtype == MolecularSubtype.TRIPLE_NEGATIVE and not her2_positive,
        hr_positive=markers.hormone_receptor_positive,
        er_low=0 < markers.er_percent < ER_LOW_UPPER,
        clinical_high_risk=(
            markers.grade == 3
            or markers.ki67 >= KI67_HIGH_RISK
            or markers.node_stage >= 1
        ),
    )


def high_risk_intensification_criterion(profile: ClinicalProfile) -> bool:
    """
    CDK4/6-inhibitor intensification: node stage ≥ N2, or N1 together with
    grade 3, tumor ≥ 5 cm or Ki-67 ≥ 20 %.
    """
    if profile.node_stage >= INTENSIFY_NODE_STAGE:
        return True
    return profile.node_stage == 1 and (
        profile.grade == INTENSIFY_GRADE
        or profile.tumor_cm >= INTENSIFY_TUMOR_CM
        or profile.ki67 >= INTENSIFY_KI67
    )


@dataclass(frozen=True)
class RegimenContext:
    """Inputs shared by the per-modality regimen rules."""
    profile: ClinicalProfile
    pathway_id: str

    @property
    def is_neoadjuvant(self) -> bool:
        return self.pathway_id == PATH_NEOADJUVANT

    @property
    def is_conservative(self) -> bool:
        return self.pathway_id == PATH_CONSERVATIVE

    @property
    def chemo_indicated(self) -> bool:
        """Chemotherapy is part of the plan on clinical grounds."""
        if self.is_conservative:
            return False
        p = self.profile
        rs = p.recurrence_score
        return (
            self.is_neoadjuvant
            or p.her2_positive
            or p.triple_negative
            or (rs is not None and rs >= RS_CHEMO_BENEFIT)
        )
