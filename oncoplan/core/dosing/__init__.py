"""
Dose Computation

Usage:
    from oncoplan.core.dosing import compute_dose

    result = compute_dose(drug, height_cm=165, weight_kg=58, age=46,
                          serum_creatinine=70, is_initial_cycle=True)
    result.describe(drug.name)     # "Trastuzumab (loading) 464 mg"
"""
from .engine import (
    DoseResult,
    DoseSentinel,
    body_surface_area,
    compute_dose,
    estimated_clearance,
    round_half_up,
)

__all__ = [
    "DoseResult",
    "DoseSentinel",
    "body_surface_area",
    "compute_dose",
    "estimated_clearance",
    "round_half_up",
]
