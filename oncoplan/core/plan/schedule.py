"""
Schedule Expander

Expands the selected regimens into dated TreatmentEvent drafts:

    cycles      = min(total_cycles or 1, SCHEDULE_HARD_CAP)   (1 when no frequency)
    event[i]    = start + i × frequency_days
    dosage      = per-drug dose strings joined with " + "; cycle 1 uses the
                  loading dose where the drug defines one

Locked plans need no special handling: the dose engine returns the locked
snapshot whenever one is present.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Mapping, Optional

from oncoplan.core.clinical.base import (
    ClinicalMarkers,
    EventCategory,
    Modality,
    Patient,
    RegimenOption,
    TreatmentEvent,
)
from oncoplan.core.dosing import compute_dose
from oncoplan.core.markers import parse_serum_creatinine
from oncoplan.utils import get_logger

logger = get_logger(__name__)

# Covers five years of daily dosing (1825) with margin.
SCHEDULE_HARD_CAP = 2000


@dataclass(frozen=True)
class DoseInputs:
    """Biometrics and labs used for the dose text of each event."""
    height_cm: Optional[float] = None
    weight_kg: Optional[float] = None
    age: Optional[float] = None
    serum_creatinine: Optional[float] = None

    @classmethod
    def from_patient(cls, patient: Patient, markers: Optional[ClinicalMarkers] = None) -> "DoseInputs":
        source = markers if markers is not None else patient.markers
        return cls(
            height_cm=patient.height,
            weight_kg=patient.weight,
            age=patient.age,
            serum_creatinine=parse_serum_creatinine(source.serum_creatinine),
        )


def dosage_details(regimen: RegimenOption, inputs: DoseInputs, is_initial: bool) -> Optional[str]:
    """Dose text for one administration of ``regimen``, drugs joined by ' + '."""
    if not regimen.drugs:
        return None
    parts = []
    for drug in regimen.drugs:
        result = compute_dose(
            drug,
            height_cm=inputs.height_cm,
            weight_kg=inputs.weight_kg,
            age=inputs.age,
            serum_creatinine=inputs.serum_creatinine,
            is_initial_cycle=is_initial,
        )
        if result.is_available:
            text = result.describe(drug.name)
        else:
            text = f"{drug.name} {drug.standard_dose:g} {drug.unit.value} ({result.text})"
        if drug.administration:
            text += f" {drug.administration}"
        parts.append(text)
    return " + ".join(parts)


def _start_date(modality: Modality, start_dates: Mapping[Modality, date], today: date) -> date:
    return start_dates.get(modality) or start_dates.get(Modality.CHEMO) or today


def expand_regimen(regimen: RegimenOption, start: date, inputs: DoseInputs) -> List[TreatmentEvent]:
    frequency = regimen.frequency_days or 0
    requested = 1 if regimen.total_cycles is None else regimen.total_cycles
    cycles = 1 if frequency <= 0 else max(0, min(requested, SCHEDULE_HARD_CAP))
    if frequency > 0 and requested > SCHEDULE_HARD_CAP:
        logger.warning(
            f"ScheduleExpander: {regimen.id} requests {requested} cycles, "
            f"capped at {SCHEDULE_HARD_CAP}"
        )

    initial_text = dosage_details(regimen, inputs, is_initial=True)
    standard_text = dosage_details(regimen, inputs, is_initial=False)
    continuous = frequency == 1

    events = []
    for i in range(cycles):
        events.append(TreatmentEvent(
            date=start + timedelta(days=i * frequency),
            title=regimen.name if continuous else f"{regimen.name} (cycle {i + 1})",
            description=regimen.cycle,
            category=EventCategory(regimen.modality.value),
            completed=False,
            dosage_details=initial_text if i == 0 else standard_text,
        ))
    return events


def expand_schedule(
    regimens: List[RegimenOption],
    start_dates: Mapping[Modality, date],
    today: date,
    inputs: DoseInputs,
) -> List[TreatmentEvent]:
    """
    Expand every regimen and merge the events, stably sorted by date.

    A modality without a start date uses the chemotherapy start date, then
    ``today``.
    """
    events: List[TreatmentEvent] = []
    for regimen in regimens:
        start = _start_date(regimen.modality, start_dates, today)
        expanded = expand_regimen(regimen, start, inputs)
        logger.debug(f"ScheduleExpander: {regimen.id} → {len(expanded)} event(s) from {start}")
        events.extend(expanded)

    events.sort(key=lambda e: e.date)
    logger.info(f"ScheduleExpander: {len(events)} event(s) from {len(regimens)} regimen(s)")
    return events
