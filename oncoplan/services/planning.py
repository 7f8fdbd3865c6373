"""
Planning Service

Threads the Patient aggregate through the decision core. Every method takes
an aggregate (plus optional draft markers) and returns a new one; nothing is
cached between calls. Edits are refused while the plan is locked.
"""
from __future__ import annotations

import copy
import uuid
from dataclasses import dataclass, replace
from datetime import date
from typing import List, Mapping, Optional

from oncoplan.core.clinical import (
    ClinicalMarkers,
    Modality,
    PathwayOption,
    Patient,
    RegimenComposer,
    RegimenOption,
    SelectedRegimens,
    TreatmentEvent,
    build_profile,
    recommend_pathways,
)
from oncoplan.core.dosing import DoseResult, compute_dose
from oncoplan.core.markers import classify
from oncoplan.core.plan import DoseInputs, LockController, ensure_editable, expand_schedule
from oncoplan.utils import RegimenSelectionError, ScheduleError, get_logger

logger = get_logger(__name__)


@dataclass
class DrugDoses:
    """Computed doses for one drug of a regimen."""
    name: str
    standard: DoseResult
    loading: Optional[DoseResult] = None


class PlanningService:
    """Orchestrates classification → pathways → regimens → lock → schedule."""

    def __init__(
        self,
        composer: Optional[RegimenComposer] = None,
        lock_controller: Optional[LockController] = None,
    ):
        self.composer = composer or RegimenComposer()
        self.lock_controller = lock_controller or LockController()

    # ── Markers & biometrics ──────────────────────────────────────────────

    def update_markers(self, patient: Patient, markers: ClinicalMarkers) -> Patient:
        ensure_editable(patient, "update_markers")
        return replace(patient, markers=copy.deepcopy(markers))

    def update_biometrics(
        self,
        patient: Patient,
        height: Optional[float],
        weight: Optional[float],
    ) -> Patient:
        ensure_editable(patient, "update_biometrics")
        return replace(patient, height=height, weight=weight)

    # ── Pathways ──────────────────────────────────────────────────────────

    def recommend_pathways(
        self,
        patient: Patient,
        markers: Optional[ClinicalMarkers] = None,
    ) -> Patient:
        """
        Regenerate the pathway options from the (draft) markers and preselect
        the recommended one. Draft markers are saved onto the patient.

        Any previously composed regimen plan is discarded since it was derived
        from the old pathway list.
        """
        ensure_editable(patient, "recommend_pathways")
        source = copy.deepcopy(markers if markers is not None else patient.markers)
        profile = build_profile(patient.subtype, classify(source), patient.age)
        options = recommend_pathways(profile)
        selected = next((o.id for o in options if o.recommended), options[0].id)
        logger.info(
            f"PlanningService: pathways {[o.id for o in options]}, selected {selected}",
            extra={"patient_id": patient.id},
        )
        return replace(
            patient,
            markers=source,
            pathway_options=options,
            selected_pathway_id=selected,
            detailed_plan=None,
            selected_regimens=SelectedRegimens(),
        )

    def select_pathway(self, patient: Patient, pathway_id: str) -> Patient:
        ensure_editable(patient, "select_pathway")
        if not any(o.id == pathway_id for o in patient.pathway_options):
            raise RegimenSelectionError(
                f"Pathway '{pathway_id}' is not among the current options.",
                selection_id=pathway_id,
            )
        return replace(patient, selected_pathway_id=pathway_id)

    def selected_pathway(self, patient: Patient) -> Optional[PathwayOption]:
        return next(
            (o for o in patient.pathway_options if o.id == patient.selected_pathway_id),
            None,
        )

    # ── Regimens ──────────────────────────────────────────────────────────

    def compose_regimens(
        self,
        patient: Patient,
        markers: Optional[ClinicalMarkers] = None,
        pathway_id: Optional[str] = None,
    ) -> Patient:
        """
        Compose the per-modality plan for the selected (or given) pathway.

        Draft markers the plan was composed from are saved onto the patient.
        """
        ensure_editable(patient, "compose_regimens")
        pathway_id = pathway_id or patient.selected_pathway_id
        if pathway_id is None:
            raise RegimenSelectionError("No pathway has been selected.", selection_id="none")
        source = copy.deepcopy(markers if markers is not None else patient.markers)
        profile = build_profile(patient.subtype, classify(source), patient.age)
        plan = self.composer.compose(profile, pathway_id)
        return replace(
            patient,
            markers=source,
            selected_pathway_id=pathway_id,
            detailed_plan=plan,
            selected_regimens=self.composer.default_selection(plan),
        )

    def select_regimen(self, patient: Patient, modality: Modality, regimen_id: Optional[str]) -> Patient:
        """Select (or clear, with ``None``) the regimen for one modality."""
        ensure_editable(patient, "select_regimen")
        if regimen_id is not None:
            if patient.detailed_plan is None or patient.detailed_plan.find(modality, regimen_id) is None:
                raise RegimenSelectionError(
                    f"Regimen '{regimen_id}' is not a {modality.value} option.",
                    selection_id=regimen_id,
                    details={"modality": modality.value},
                )
        return replace(
            patient,
            selected_regimens=patient.selected_regimens.with_selection(modality, regimen_id),
        )

    def selected_regimen_options(self, patient: Patient) -> List[RegimenOption]:
        plan = patient.detailed_plan
        if plan is None:
            return []
        selected = (plan.find(m, rid) for m, rid in patient.selected_regimens.items())
        return [r for r in selected if r is not None]

    # ── Doses ─────────────────────────────────────────────────────────────

    def regimen_doses(
        self,
        patient: Patient,
        regimen: RegimenOption,
        markers: Optional[ClinicalMarkers] = None,
    ) -> List[DrugDoses]:
        """Standard and (where defined) loading dose for every drug of ``regimen``."""
        inputs = DoseInputs.from_patient(patient, markers)
        rows = []
        for drug in regimen.drugs:
            kwargs = dict(
                height_cm=inputs.height_cm,
                weight_kg=inputs.weight_kg,
                age=inputs.age,
                serum_creatinine=inputs.serum_creatinine,
            )
            rows.append(DrugDoses(
                name=drug.name,
                standard=compute_dose(drug, is_initial_cycle=False, **kwargs),
                loading=compute_dose(drug, is_initial_cycle=True, **kwargs) if drug.has_loading_dose else None,
            ))
        return rows

    # ── Lock ──────────────────────────────────────────────────────────────

    def lock(
        self,
        patient: Patient,
        markers: Optional[ClinicalMarkers] = None,
        modalities: Optional[List[Modality]] = None,
    ) -> Patient:
        return self.lock_controller.lock(patient, markers=markers, modalities=modalities)

    def unlock(self, patient: Patient) -> Patient:
        return self.lock_controller.unlock(patient)

    # ── Schedule ──────────────────────────────────────────────────────────

    def preview_schedule(
        self,
        patient: Patient,
        start_dates: Mapping[Modality, date],
        today: date,
    ) -> List[TreatmentEvent]:
        regimens = self.selected_regimen_options(patient)
        if not regimens:
            raise ScheduleError("No regimen is selected.", details={"patient_id": patient.id})
        return expand_schedule(regimens, start_dates, today, DoseInputs.from_patient(patient))

    def commit_schedule(self, patient: Patient, drafts: List[TreatmentEvent]) -> Patient:
        """Assign ids to the drafts and append them to the timeline."""
        committed = [replace(e, id=e.id or uuid.uuid4().hex) for e in drafts]
        logger.info(f"PlanningService: appended {len(committed)} event(s)", extra={"patient_id": patient.id})
        return replace(patient, timeline=list(patient.timeline) + committed)
