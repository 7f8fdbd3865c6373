"""
Clinical Decision Layer

Classified markers → pathway options → per-modality regimen options.

Usage:
    from oncoplan.core.clinical import build_profile, recommend_pathways, RegimenComposer

    profile = build_profile(patient.subtype, classify(markers), patient.age)
    pathways = recommend_pathways(profile)           # exactly two, recommended first
    plan = RegimenComposer().compose(profile, pathways[0].id)
"""
from .base import (
    ClinicalMarkers,
    DetailedRegimenPlan,
    DosingUnit,
    DrugDetail,
    EventCategory,
    Modality,
    MolecularSubtype,
    PathwayOption,
    Patient,
    RegimenOption,
    SelectedRegimens,
    TreatmentEvent,
    TreatmentStage,
)
from .profile import (
    ClinicalProfile,
    PATH_CONSERVATIVE,
    PATH_NEOADJUVANT,
    PATH_SURGERY,
    build_profile,
    high_risk_intensification_criterion,
)
from .pathways import assess_chemo_waiver, recommend_pathways
from .composer import RegimenComposer

__all__ = [
    "ClinicalMarkers",
    "DetailedRegimenPlan",
    "DosingUnit",
    "DrugDetail",
    "EventCategory",
    "Modality",
    "MolecularSubtype",
    "PathwayOption",
    "Patient",
    "RegimenOption",
    "SelectedRegimens",
    "TreatmentEvent",
    "TreatmentStage",
    "ClinicalProfile",
    "PATH_CONSERVATIVE",
    "PATH_NEOADJUVANT",
    "PATH_SURGERY",
    "build_profile",
    "high_risk_intensification_criterion",
    "assess_chemo_waiver",
    "recommend_pathways",
    "RegimenComposer",
]
