"""
Dose Engine

Computes a single drug's absolute dose from its dosing rule and the patient's
biometrics / labs, or returns the frozen snapshot when one exists.

Formulas:
    BSA (Stevenson)      : 0.0061 × height(cm) + 0.0128 × weight(kg) − 0.1529, floored at 0
    Surface-area scaled  : round(dose × BSA)
    Weight scaled        : round(dose × weight)
    Fixed                : dose unchanged
    AUC (Calvert)        : round(targetAUC × (clearance + 25))
    Clearance            : ((140 − age) × weight × 1.04) / serum creatinine (µmol/L)

Rounding is half-up to whole milligrams. BSA is used unrounded and only
rounded for display.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TYPE_CHECKING

from oncoplan.core.clinical.base import DosingUnit

if TYPE_CHECKING:
    from oncoplan.core.clinical.base import DrugDetail

# ── Constants ────────────────────────────────────────────────────────────────

BSA_HEIGHT_COEF   = 0.0061
BSA_WEIGHT_COEF   = 0.0128
BSA_INTERCEPT     = 0.1529

CLEARANCE_AGE_BASE   = 140
CLEARANCE_CONSTANT   = 1.04      # single correction constant, no sex branch
CALVERT_NON_RENAL    = 25        # mL/min


class DoseSentinel(str, Enum):
    """Returned in place of a dose when inputs are insufficient."""
    INSUFFICIENT_DATA       = "--"
    REQUIRES_RENAL_FUNCTION = "requires renal function"


@dataclass(frozen=True)
class DoseResult:
    """
    Outcome of one dose computation.

    Exactly one of ``milligrams`` / ``sentinel`` is set for computed doses;
    locked results carry the snapshot in ``text`` and neither magnitude.
    """
    text: str
    milligrams: Optional[float] = None
    sentinel: Optional[DoseSentinel] = None
    is_loading: bool = False
    locked: bool = False

    @property
    def label(self) -> str:
        return "loading" if self.is_loading else "maintenance"

    @property
    def is_available(self) -> bool:
        return self.sentinel is None

    def describe(self, drug_name: str) -> str:
        """Display string, e.g. "Trastuzumab (loading) 480 mg"."""
        prefix = f"{drug_name} (loading)" if self.is_loading else drug_name
        return f"{prefix} {self.text}"


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_mg(value: float) -> str:
    if float(value).is_integer():
        return f"{int(value)} mg"
    return f"{value:g} mg"


def body_surface_area(height_cm: Optional[float], weight_kg: Optional[float]) -> float:
    """Stevenson BSA in m²; 0 when either input is missing or non-positive."""
    if not height_cm or not weight_kg or height_cm <= 0 or weight_kg <= 0:
        return 0.0
    bsa = BSA_HEIGHT_COEF * height_cm + BSA_WEIGHT_COEF * weight_kg - BSA_INTERCEPT
    return max(0.0, bsa)


def estimated_clearance(
    age: Optional[float],
    weight_kg: Optional[float],
    serum_creatinine: Optional[float],
) -> Optional[float]:
    """Estimated creatinine clearance (mL/min), or None when inputs are missing."""
    if not serum_creatinine or serum_creatinine <= 0 or age is None:
        return None
    if not weight_kg or weight_kg <= 0:
        return None
    return ((CLEARANCE_AGE_BASE - age) * weight_kg * CLEARANCE_CONSTANT) / serum_creatinine


def compute_dose(
    drug: "DrugDetail",
    height_cm: Optional[float],
    weight_kg: Optional[float],
    age: Optional[float],
    serum_creatinine: Optional[float],
    is_initial_cycle: bool = False,
) -> DoseResult:
    """
    Compute the dose for one administration of ``drug``.

    ``is_initial_cycle`` selects the loading dose when the drug defines one.
    If the selected slot already holds a locked snapshot it is returned
    verbatim and nothing else is evaluated.
    """
    is_loading = is_initial_cycle and drug.has_loading_dose

    locked = drug.locked_loading_dose if is_loading else drug.locked_dose
    if locked is not None:
        return DoseResult(text=locked, is_loading=is_loading, locked=True)

    per_unit = drug.loading_dose if is_loading else drug.standard_dose

    if drug.unit == DosingUnit.FIXED:
        return DoseResult(text=format_mg(per_unit), milligrams=per_unit, is_loading=is_loading)

    if drug.unit == DosingUnit.AUC:
        if not weight_kg or weight_kg <= 0:
            return _sentinel(DoseSentinel.INSUFFICIENT_DATA, is_loading)
        clearance = estimated_clearance(age, weight_kg, serum_creatinine)
        if clearance is None:
            return _sentinel(DoseSentinel.REQUIRES_RENAL_FUNCTION, is_loading)
        mg = round_half_up(per_unit * (clearance + CALVERT_NON_RENAL))
        return DoseResult(text=format_mg(mg), milligrams=mg, is_loading=is_loading)

    if drug.unit == DosingUnit.WEIGHT:
        if not weight_kg or weight_kg <= 0:
            return _sentinel(DoseSentinel.INSUFFICIENT_DATA, is_loading)
        mg = round_half_up(per_unit * weight_kg)
        return DoseResult(text=format_mg(mg), milligrams=mg, is_loading=is_loading)

    # surface-area scaled
    bsa = body_surface_area(height_cm, weight_kg)
    if bsa <= 0:
        return _sentinel(DoseSentinel.INSUFFICIENT_DATA, is_loading)
    mg = round_half_up(per_unit * bsa)
    return DoseResult(text=format_mg(mg), milligrams=mg, is_loading=is_loading)


def _sentinel(sentinel: DoseSentinel, is_loading: bool) -> DoseResult:
    return DoseResult(text=sentinel.value, sentinel=sentinel, is_loading=is_loading)
