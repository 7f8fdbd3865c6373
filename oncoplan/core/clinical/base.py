"""
Clinical Decision Layer — Base Types

Defines the record types threaded through marker classification, pathway and
regimen recommendation, dose locking and schedule expansion. The Patient is
the single aggregate root; everything else hangs off it.
"""
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Iterator, List, Optional, Tuple


class MolecularSubtype(str, Enum):
    """Molecular subtype as recorded at diagnosis."""
    LUMINAL_A        = "Luminal A"
    LUMINAL_B        = "Luminal B"
    LUMINAL_B_LIKE   = "Luminal B-like"
    HER2_POSITIVE    = "HER2 Positive"
    HER2_ENRICHED    = "HER2 Enriched"
    TRIPLE_NEGATIVE  = "Triple Negative"
    UNKNOWN          = "Unknown"


class TreatmentStage(str, Enum):
    DIAGNOSIS   = "diagnosis"
    NEOADJUVANT = "neoadjuvant"
    SURGERY     = "surgery"
    ADJUVANT    = "adjuvant"
    FOLLOW_UP   = "follow_up"


class Modality(str, Enum):
    """Treatment modality; each has its own regimen list and selection slot."""
    CHEMO     = "chemo"
    ENDOCRINE = "endocrine"
    TARGET    = "target"
    IMMUNE    = "immune"


class EventCategory(str, Enum):
    """Timeline event tag. Generated events always carry a modality value."""
    CHEMO     = "chemo"
    ENDOCRINE = "endocrine"
    TARGET    = "target"
    IMMUNE    = "immune"
    SURGERY   = "surgery"
    EXAM      = "exam"
    OTHER     = "other"


class DosingUnit(str, Enum):
    """
    How a drug's per-unit dose scales to the patient.

    SURFACE_AREA – mg per m² of body surface area
    WEIGHT       – mg per kg of body weight
    FIXED        – flat mg dose
    AUC          – target area-under-curve, scaled by estimated renal clearance
    """
    SURFACE_AREA = "mg/m²"
    WEIGHT       = "mg/kg"
    FIXED        = "mg"
    AUC          = "AUC"


@dataclass
class ClinicalMarkers:
    """Marker values exactly as entered by the clinician (free text)."""
    er_status: str = ""
    pr_status: str = ""
    her2_status: str = ""
    ki67: str = ""
    tumor_size: str = ""
    node_status: str = ""
    histological_grade: str = ""
    menopause: bool = False
    genetic_test_result: Optional[str] = None   # 21-gene recurrence score
    serum_creatinine: Optional[str] = None      # µmol/L


@dataclass
class PathwayOption:
    """One high-level treatment pathway offered to the clinician."""
    id: str
    title: str
    rationale: str
    recommended: bool = False
    highly_recommended: bool = False
    duration: str = ""
    pros: List[str] = field(default_factory=list)
    cons: List[str] = field(default_factory=list)


@dataclass
class DrugDetail:
    """
    One drug inside a regimen.

    ``standard_dose`` and ``loading_dose`` are per-unit magnitudes (mg/m²,
    mg/kg, mg or target AUC depending on ``unit``). The ``locked_*`` strings
    are the frozen dose snapshots written at lock time.
    """
    name: str
    standard_dose: float
    unit: DosingUnit
    loading_dose: Optional[float] = None
    administration: Optional[str] = None     # e.g. "bid", "weekly"
    locked_dose: Optional[str] = None
    locked_loading_dose: Optional[str] = None

    @property
    def has_loading_dose(self) -> bool:
        return self.loading_dose is not None

    @property
    def is_locked(self) -> bool:
        return self.locked_dose is not None or self.locked_loading_dose is not None


@dataclass
class RegimenOption:
    """A concrete drug regimen for one modality."""
    id: str
    name: str
    modality: Modality
    cycle: str                               # e.g. "q3w × 6"
    drugs: List[DrugDetail] = field(default_factory=list)
    recommended: bool = False
    rationale: str = ""
    description: str = ""
    total_cycles: Optional[int] = None
    frequency_days: Optional[int] = None
    pros: List[str] = field(default_factory=list)
    cons: List[str] = field(default_factory=list)


@dataclass
class DetailedRegimenPlan:
    """Candidate regimens for every modality."""
    chemo_options: List[RegimenOption] = field(default_factory=list)
    endocrine_options: List[RegimenOption] = field(default_factory=list)
    target_options: List[RegimenOption] = field(default_factory=list)
    immune_options: List[RegimenOption] = field(default_factory=list)

    def options_for(self, modality: Modality) -> List[RegimenOption]:
        return getattr(self, f"{modality.value}_options")

    def find(self, modality: Modality, regimen_id: Optional[str]) -> Optional[RegimenOption]:
        if regimen_id is None:
            return None
        for option in self.options_for(modality):
            if option.id == regimen_id:
                return option
        return None

    def iter_options(self) -> Iterator[RegimenOption]:
        for modality in Modality:
            yield from self.options_for(modality)


@dataclass
class SelectedRegimens:
    """At most one selected regimen id per modality."""
    chemo_id: Optional[str] = None
    endocrine_id: Optional[str] = None
    target_id: Optional[str] = None
    immune_id: Optional[str] = None

    def get(self, modality: Modality) -> Optional[str]:
        return getattr(self, f"{modality.value}_id")

    def with_selection(self, modality: Modality, regimen_id: Optional[str]) -> "SelectedRegimens":
        return replace(self, **{f"{modality.value}_id": regimen_id})

    def items(self) -> List[Tuple[Modality, str]]:
        """(modality, id) pairs for every modality that has a selection."""
        return [(m, self.get(m)) for m in Modality if self.get(m) is not None]


@dataclass
class TreatmentEvent:
    """A dated timeline entry. Drafts produced by the expander have no id yet."""
    date: date
    title: str
    description: str = ""
    category: EventCategory = EventCategory.OTHER
    completed: bool = False
    id: Optional[str] = None
    side_effects: List[str] = field(default_factory=list)
    dosage_details: Optional[str] = None


@dataclass
class Patient:
    """Aggregate root. Owned by the caller between invocations."""
    id: str
    name: str
    age: int
    subtype: MolecularSubtype = MolecularSubtype.UNKNOWN
    markers: ClinicalMarkers = field(default_factory=ClinicalMarkers)
    mrn: str = ""
    admission_date: Optional[date] = None
    diagnosis: str = ""
    stage: TreatmentStage = TreatmentStage.DIAGNOSIS

    height: Optional[float] = None   # cm
    weight: Optional[float] = None   # kg

    pathway_options: List[PathwayOption] = field(default_factory=list)
    selected_pathway_id: Optional[str] = None

    detailed_plan: Optional[DetailedRegimenPlan] = None
    selected_regimens: SelectedRegimens = field(default_factory=SelectedRegimens)

    is_plan_locked: bool = False
    locked_markers: Optional[ClinicalMarkers] = None

    timeline: List[TreatmentEvent] = field(default_factory=list)
