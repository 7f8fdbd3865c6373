"""
Chemotherapy Regimen Rules

Families (first match):
    1. HER2-positive      — TCbHP (6 × q3w, recommended) / AC-THP alternative
    2. Triple-negative    — neoadjuvant: KEYNOTE-522 backbone (platinum induction)
       (or ER-low 1–9 %)    adjuvant:    dose-dense AC → T (q2w)
    3. HR-positive        — AC-T when clinically high risk, TC otherwise

No chemotherapy options are produced on the chemotherapy-waiver pathway.
"""
from __future__ import annotations

from typing import List

from .base import DosingUnit, DrugDetail, Modality, RegimenOption
from .profile import ClinicalProfile, KI67_HIGH_RISK, RegimenContext


def _her2_regimens(p: ClinicalProfile) -> List[RegimenOption]:
    return [
        RegimenOption(
            id="c_tchp",
            name="TCbHP (TCHP)",
            modality=Modality.CHEMO,
            description="Docetaxel + Carboplatin with dual HER2 blockade",
            cycle="q3w × 6",
            total_cycles=6,
            frequency_days=21,
            recommended=True,
            rationale=(
                f"HER2-positive ({p.summary()}): anthracycline-free platinum/taxane backbone "
                "given with trastuzumab + pertuzumab is the preferred first-line regimen."
            ),
            drugs=[
                DrugDetail(name="Docetaxel", standard_dose=75, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Carboplatin", standard_dose=6, unit=DosingUnit.AUC),
            ],
            pros=["No anthracycline cardiotoxicity", "High pCR rate"],
            cons=["Diarrhea", "Thrombocytopenia"],
        ),
        RegimenOption(
            id="c_ac_thp",
            name="AC-THP",
            modality=Modality.CHEMO,
            description="Doxorubicin + Cyclophosphamide → Paclitaxel with HER2 blockade",
            cycle="AC q3w × 4 → T weekly × 12",
            total_cycles=8,
            frequency_days=21,
            recommended=False,
            rationale=(
                f"HER2-positive ({p.summary()}): anthracycline-containing alternative when "
                "platinum is unsuitable."
            ),
            drugs=[
                DrugDetail(name="Doxorubicin", standard_dose=60, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Cyclophosphamide", standard_dose=600, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Paclitaxel", standard_dose=80, unit=DosingUnit.SURFACE_AREA,
                           administration="weekly"),
            ],
            pros=["Long-term outcome data"],
            cons=["Cumulative cardiotoxicity with trastuzumab"],
        ),
    ]


def _triple_negative_regimens(ctx: RegimenContext) -> List[RegimenOption]:
    p = ctx.profile
    family = "Triple-negative" if p.triple_negative else f"ER-low ({p.markers.er_percent:g}%)"
    if ctx.is_neoadjuvant:
        return [
            RegimenOption(
                id="c_kn522",
                name="TP-AC (KEYNOTE-522)",
                modality=Modality.CHEMO,
                description="Paclitaxel + Carboplatin → Doxorubicin + Cyclophosphamide",
                cycle="8 cycles pre-operative",
                total_cycles=8,
                frequency_days=21,
                recommended=True,
                rationale=(
                    f"{family} on the neoadjuvant pathway ({p.summary()}): platinum-containing "
                    "induction maximises pathological complete response."
                ),
                drugs=[
                    DrugDetail(name="Paclitaxel", standard_dose=80, unit=DosingUnit.SURFACE_AREA,
                               administration="weekly"),
                    DrugDetail(name="Carboplatin", standard_dose=5, unit=DosingUnit.AUC),
                    DrugDetail(name="Doxorubicin", standard_dose=60, unit=DosingUnit.SURFACE_AREA),
                    DrugDetail(name="Cyclophosphamide", standard_dose=600, unit=DosingUnit.SURFACE_AREA),
                ],
                pros=["Highest pCR rate"],
                cons=["Myelosuppression"],
            )
        ]
    return [
        RegimenOption(
            id="c_dd_act",
            name="ddAC-T (dose-dense)",
            modality=Modality.CHEMO,
            description="AC (q2w) → Paclitaxel (q2w)",
            cycle="q2w × 8",
            total_cycles=8,
            frequency_days=14,
            recommended=True,
            rationale=(
                f"{family} treated adjuvantly ({p.summary()}): dose-dense anthracycline → "
                "taxane sequence."
            ),
            drugs=[
                DrugDetail(name="Doxorubicin", standard_dose=60, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Cyclophosphamide", standard_dose=600, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Paclitaxel", standard_dose=175, unit=DosingUnit.SURFACE_AREA),
            ],
            pros=["Shorter treatment interval improves survival"],
            cons=["Requires G-CSF support"],
        )
    ]


def _hr_positive_regimens(p: ClinicalProfile) -> List[RegimenOption]:
    high_risk = p.clinical_high_risk
    risk_text = (
        f"{p.summary()}; high risk = G3, Ki-67 ≥ {KI67_HIGH_RISK}% or ≥ N1 → "
        f"{'high' if high_risk else 'not high'} risk"
    )
    return [
        RegimenOption(
            id="c_act_lum",
            name="AC-T",
            modality=Modality.CHEMO,
            description="Epirubicin + Cyclophosphamide → Docetaxel",
            cycle="q3w × 8",
            total_cycles=8,
            frequency_days=21,
            recommended=high_risk,
            rationale=f"Anthracycline → taxane for clinically high-risk HR-positive disease ({risk_text}).",
            drugs=[
                DrugDetail(name="Epirubicin", standard_dose=90, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Cyclophosphamide", standard_dose=600, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Docetaxel", standard_dose=75, unit=DosingUnit.SURFACE_AREA),
            ],
            pros=["Maximal benefit in high-risk disease"],
            cons=["Cardiotoxicity", "Longer course"],
        ),
        RegimenOption(
            id="c_tc_lum",
            name="TC",
            modality=Modality.CHEMO,
            description="Docetaxel + Cyclophosphamide",
            cycle="q3w × 4-6",
            total_cycles=4,
            frequency_days=21,
            recommended=not high_risk,
            rationale=f"Anthracycline-free option for lower-risk HR-positive disease ({risk_text}).",
            drugs=[
                DrugDetail(name="Docetaxel", standard_dose=75, unit=DosingUnit.SURFACE_AREA),
                DrugDetail(name="Cyclophosphamide", standard_dose=600, unit=DosingUnit.SURFACE_AREA),
            ],
            pros=["No anthracycline", "Short course"],
            cons=["Less effective in high-risk disease"],
        ),
    ]


def evaluate_chemo(ctx: RegimenContext) -> List[RegimenOption]:
    if ctx.is_conservative:
        return []
    p = ctx.profile
    if p.her2_positive:
        return _her2_regimens(p)
    if p.triple_negative or p.er_low:
        return _triple_negative_regimens(ctx)
    if p.hr_positive:
        return _hr_positive_regimens(p)
    return []
