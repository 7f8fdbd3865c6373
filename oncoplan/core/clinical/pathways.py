"""
Pathway Recommender

Chooses between three high-level pathways and always offers exactly two of
them, the recommended one first.

Rule ordering (first match wins):
    1. Neoadjuvant-first
         - HER2-positive or triple-negative with tumor > 2 cm or node stage ≥ N1
         - HR-positive / HER2-negative with node stage ≥ N3, or ≥ N2 and grade 3
       → [neoadjuvant (recommended), surgery-first]
    2. Chemotherapy waiver (HR-positive, HER2-negative, node stage ≤ N1)
         with recurrence score (RS):
           RS < 11                  strongly waive
           11 ≤ RS < 18             strongly waive
           18 ≤ RS < 26             waiver offered after surgery-first;
                                    RS ≥ 21 with clinical high risk → caution
           RS ≥ 26                  no waiver (falls through to rule 3)
         without RS:
           N0, tumor ≤ 1 cm, grade ≤ 2, Ki-67 < 15 %   strongly waive
           not clinically high risk                     waiver offered, test advised
           clinically high risk                         no waiver
       → [conservative (recommended), surgery-first] or
         [surgery-first (recommended), conservative]
    3. Default → [surgery-first (recommended), neoadjuvant]
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from oncoplan.utils import get_logger
from .base import PathwayOption
from .profile import (
    ClinicalProfile,
    KI67_HIGH_RISK,
    PATH_CONSERVATIVE,
    PATH_NEOADJUVANT,
    PATH_SURGERY,
    RS_CHEMO_BENEFIT,
)

logger = get_logger(__name__)

# ── Thresholds ────────────────────────────────────────────────────────────────

NEO_TUMOR_CM              = 2.0   # HER2+/TNBC: tumor > 2 cm
NEO_NODE_STAGE            = 1     # HER2+/TNBC: ≥ N1
LUMINAL_NEO_NODE_STAGE    = 3     # HR+/HER2−: ≥ N3
LUMINAL_NEO_NODE_STAGE_G3 = 2     # HR+/HER2−: ≥ N2 with grade 3

WAIVER_MAX_NODE_STAGE     = 1

RS_VERY_LOW               = 11
RS_CAUTION                = 21
RS_STRONG_WAIVER          = 18    # waiver goes first below this score

VERY_LOW_RISK_TUMOR_CM    = 1.0
VERY_LOW_RISK_MAX_GRADE   = 2
VERY_LOW_RISK_KI67        = 15


@dataclass(frozen=True)
class WaiverAssessment:
    """Outcome of the chemotherapy-waiver rule for an eligible-to-assess patient."""
    eligible: bool
    recommended: bool
    highly_recommended: bool
    rationale: str


# ── Rule 1: Neoadjuvant-first ─────────────────────────────────────────────────

def neoadjuvant_trigger(profile: ClinicalProfile) -> Optional[str]:
    """Return the rationale when neoadjuvant therapy should come first."""
    p = profile
    if p.her2_positive or p.triple_negative:
        family = "HER2-positive" if p.her2_positive else "Triple-negative"
        if p.tumor_cm > NEO_TUMOR_CM or p.node_stage >= NEO_NODE_STAGE:
            return (
                f"{family} disease with tumor {p.tumor_cm:g} cm (threshold > {NEO_TUMOR_CM:g} cm) "
                f"or node stage N{p.node_stage} (threshold ≥ N{NEO_NODE_STAGE}): "
                "neoadjuvant systemic therapy allows downstaging and in-vivo response assessment."
            )
        return None

    if p.hr_positive:
        if p.node_stage >= LUMINAL_NEO_NODE_STAGE:
            return (
                f"HR-positive/HER2-negative disease with node stage N{p.node_stage} "
                f"(threshold ≥ N{LUMINAL_NEO_NODE_STAGE}): neoadjuvant therapy to downstage "
                "bulky nodal disease."
            )
        if p.node_stage >= LUMINAL_NEO_NODE_STAGE_G3 and p.grade == 3:
            return (
                f"HR-positive/HER2-negative disease with node stage N{p.node_stage} "
                f"(threshold ≥ N{LUMINAL_NEO_NODE_STAGE_G3}) and grade 3: neoadjuvant therapy "
                "to downstage before surgery."
            )
    return None


# ── Rule 2: Chemotherapy waiver ───────────────────────────────────────────────

def assess_chemo_waiver(profile: ClinicalProfile) -> Optional[WaiverAssessment]:
    """
    Evaluate the waiver rule.

    Returns None when the patient is outside the waiver population
    (not HR-positive/HER2-negative, or node stage above N1). Lowering the
    recurrence score never turns an eligible assessment into an ineligible one.
    """
    p = profile
    if not p.hr_positive or p.her2_positive or p.node_stage > WAIVER_MAX_NODE_STAGE:
        return None

    rs = p.recurrence_score
    if rs is not None:
        if rs < RS_VERY_LOW:
            return WaiverAssessment(
                eligible=True, recommended=True, highly_recommended=True,
                rationale=(
                    f"Recurrence score {rs:g} (< {RS_VERY_LOW}, very low risk): "
                    "chemotherapy waiver highly recommended."
                ),
            )
        if rs < RS_CHEMO_BENEFIT:
            if p.clinical_high_risk and rs >= RS_CAUTION:
                return WaiverAssessment(
                    eligible=True, recommended=False, highly_recommended=False,
                    rationale=(
                        f"Recurrence score {rs:g} ({RS_CAUTION}–{RS_CHEMO_BENEFIT - 1}) with clinical "
                        f"high-risk features ({p.summary()}; high risk = G3, Ki-67 ≥ {KI67_HIGH_RISK}% "
                        "or ≥ N1): consider the waiver with caution."
                    ),
                )
            strong = rs < RS_STRONG_WAIVER
            return WaiverAssessment(
                eligible=True, recommended=strong, highly_recommended=strong,
                rationale=(
                    f"Recurrence score {rs:g} ({RS_VERY_LOW}–{RS_CHEMO_BENEFIT - 1}): "
                    "chemotherapy benefit is minimal, waiver recommended"
                    + (f" (score < {RS_STRONG_WAIVER})." if strong else
                       f"; with score ≥ {RS_STRONG_WAIVER} surgery-first stays the default.")
                ),
            )
        return WaiverAssessment(
            eligible=False, recommended=False, highly_recommended=False,
            rationale=(
                f"Recurrence score {rs:g} (≥ {RS_CHEMO_BENEFIT}): chemotherapy followed by "
                "endocrine therapy is advised."
            ),
        )

    if (
        p.node_stage == 0
        and p.tumor_cm <= VERY_LOW_RISK_TUMOR_CM
        and p.grade <= VERY_LOW_RISK_MAX_GRADE
        and p.ki67 < VERY_LOW_RISK_KI67
    ):
        return WaiverAssessment(
            eligible=True, recommended=True, highly_recommended=True,
            rationale=(
                f"Very low-risk features ({p.summary()}; N0, tumor ≤ {VERY_LOW_RISK_TUMOR_CM:g} cm, "
                f"G ≤ {VERY_LOW_RISK_MAX_GRADE}, Ki-67 < {VERY_LOW_RISK_KI67}%): "
                "chemotherapy waiver can be considered."
            ),
        )
    if not p.clinical_high_risk:
        return WaiverAssessment(
            eligible=True, recommended=False, highly_recommended=False,
            rationale=(
                f"Clinically low risk ({p.summary()}): genomic recurrence-score testing is "
                "recommended to confirm whether chemotherapy can be waived."
            ),
        )
    return WaiverAssessment(
        eligible=False, recommended=False, highly_recommended=False,
        rationale=(
            f"Clinically high risk ({p.summary()}; G3, Ki-67 ≥ {KI67_HIGH_RISK}% or ≥ N1): "
            "chemotherapy benefit is likely; genomic testing advised to confirm."
        ),
    )


# ── Option builders ───────────────────────────────────────────────────────────

def _neoadjuvant_option(rationale: str, recommended: bool) -> PathwayOption:
    return PathwayOption(
        id=PATH_NEOADJUVANT,
        title="Neoadjuvant therapy → Surgery → Adjuvant therapy",
        rationale=rationale,
        recommended=recommended,
        duration="6-8 months pre-operative + surgery + post-operative therapy",
        pros=["In-vivo assessment of drug sensitivity", "Higher breast-conservation rate"],
        cons=["Longer overall course"],
    )


def _surgery_option(rationale: str, recommended: bool) -> PathwayOption:
    return PathwayOption(
        id=PATH_SURGERY,
        title="Surgery → Adjuvant therapy",
        rationale=rationale,
        recommended=recommended,
        duration="1 month surgery + 4-6 months chemotherapy + 5-10 years endocrine therapy",
        pros=["Immediate tumor removal", "Accurate pathological staging"],
        cons=["No in-vivo drug-sensitivity assessment"],
    )


def _conservative_option(waiver: WaiverAssessment) -> PathwayOption:
    return PathwayOption(
        id=PATH_CONSERVATIVE,
        title="Surgery → Endocrine therapy only (chemotherapy waived)",
        rationale=waiver.rationale,
        recommended=waiver.recommended,
        highly_recommended=waiver.highly_recommended,
        duration="5-10 years endocrine therapy",
        pros=["High quality of life", "No chemotherapy toxicity"],
        cons=["Depends on accurate genomic risk assessment"],
    )


def _default_rationale(profile: ClinicalProfile, waiver: Optional[WaiverAssessment]) -> str:
    text = (
        f"No neoadjuvant trigger ({profile.summary()}; HER2+/TNBC threshold tumor > "
        f"{NEO_TUMOR_CM:g} cm or ≥ N{NEO_NODE_STAGE}, HR+ threshold ≥ N{LUMINAL_NEO_NODE_STAGE} "
        f"or ≥ N{LUMINAL_NEO_NODE_STAGE_G3} with G3): upfront surgery for pathological staging."
    )
    if waiver is not None:
        text += " " + waiver.rationale
    return text


# ── Recommender ──────────────────────────────────────────────────────────────

def recommend_pathways(profile: ClinicalProfile) -> List[PathwayOption]:
    """
    Build the two pathway options for this profile, recommended first.

    The list is regenerated from scratch on every call.
    """
    neo_rationale = neoadjuvant_trigger(profile)
    if neo_rationale is not None:
        logger.info("PathwayRecommender: neoadjuvant-first")
        return [
            _neoadjuvant_option(neo_rationale, recommended=True),
            _surgery_option(
                "Alternative: upfront surgery for pathological staging; forgoes "
                "in-vivo response assessment.",
                recommended=False,
            ),
        ]

    waiver = assess_chemo_waiver(profile)
    if waiver is not None and waiver.eligible:
        conservative = _conservative_option(waiver)
        if waiver.recommended:
            logger.info(
                f"PathwayRecommender: chemotherapy waiver recommended "
                f"(highly={waiver.highly_recommended})"
            )
            return [
                conservative,
                _surgery_option(
                    "Alternative: surgery followed by adjuvant therapy as dictated "
                    "by final pathology.",
                    recommended=False,
                ),
            ]
        logger.info("PathwayRecommender: surgery-first, waiver offered as alternative")
        return [_surgery_option(_default_rationale(profile, None), recommended=True), conservative]

    logger.info("PathwayRecommender: surgery-first (default)")
    return [
        _surgery_option(_default_rationale(profile, waiver), recommended=True),
        _neoadjuvant_option(
            "Alternative: pre-operative systemic therapy for downstaging and "
            "response assessment.",
            recommended=False,
        ),
    ]
