"""
Dosage Lock Controller

Two-state machine over the Patient aggregate:

    UNLOCKED ──lock──▶ LOCKED ──unlock──▶ UNLOCKED

Locking freezes the computed doses of every selected regimen into
``locked_dose`` / ``locked_loading_dose`` strings and snapshots the markers.
It is all-or-nothing: any failed precondition raises PlanLockError with a
LockRefusal reason before anything is built, and the input aggregate is never
mutated. Unlocking clears the snapshots on every drug of every modality.

While LOCKED, marker edits and pathway / regimen reselection must be refused;
``ensure_editable`` is the guard callers use.
"""
from __future__ import annotations

import copy
from dataclasses import replace
from typing import Callable, Iterable, List, Optional

from oncoplan.core.clinical.base import (
    ClinicalMarkers,
    DetailedRegimenPlan,
    DosingUnit,
    DrugDetail,
    Modality,
    Patient,
    RegimenOption,
    SelectedRegimens,
)
from oncoplan.core.dosing import DoseResult, DoseSentinel, compute_dose
from oncoplan.core.markers import classify
from oncoplan.utils import LockRefusal, PlanLockError, PlanLockedError, get_logger

logger = get_logger(__name__)

DoseFn = Callable[[DrugDetail, bool], DoseResult]


# ── Pure plan transforms ─────────────────────────────────────────────────────

def _copy_option(option: RegimenOption, drugs: List[DrugDetail]) -> RegimenOption:
    return replace(option, drugs=drugs, pros=list(option.pros), cons=list(option.cons))


def _locked_drug(drug: DrugDetail, dose_fn: DoseFn, regimen_id: str) -> DrugDetail:
    fresh = replace(drug, locked_dose=None, locked_loading_dose=None)
    standard = dose_fn(fresh, False)
    loading = dose_fn(fresh, True) if drug.has_loading_dose else None
    for result in (standard, loading):
        if result is not None and not result.is_available:
            reason = (
                LockRefusal.MISSING_RENAL_FUNCTION
                if result.sentinel == DoseSentinel.REQUIRES_RENAL_FUNCTION
                else LockRefusal.MISSING_BIOMETRICS
            )
            raise PlanLockError(
                f"Cannot compute a dose for {drug.name}: {result.text}",
                reason=reason,
                details={"regimen_id": regimen_id, "drug": drug.name},
            )
    return replace(
        fresh,
        locked_dose=standard.text,
        locked_loading_dose=loading.text if loading is not None else None,
    )


def lock_plan(
    plan: DetailedRegimenPlan,
    selection: SelectedRegimens,
    dose_fn: DoseFn,
) -> DetailedRegimenPlan:
    """
    Return a new plan whose selected regimens carry locked dose strings.

    Unselected regimens are copied with their lock fields cleared. No list or
    record is shared with ``plan``.
    """
    lists = {}
    for modality in Modality:
        selected_id = selection.get(modality)
        rebuilt = []
        for option in plan.options_for(modality):
            if option.id == selected_id:
                drugs = [_locked_drug(d, dose_fn, option.id) for d in option.drugs]
            else:
                drugs = [replace(d, locked_dose=None, locked_loading_dose=None) for d in option.drugs]
            rebuilt.append(_copy_option(option, drugs))
        lists[f"{modality.value}_options"] = rebuilt
    return DetailedRegimenPlan(**lists)


def unlock_plan(plan: DetailedRegimenPlan) -> DetailedRegimenPlan:
    """Return a new plan with every lock field cleared in every modality."""
    lists = {}
    for modality in Modality:
        lists[f"{modality.value}_options"] = [
            _copy_option(
                option,
                [replace(d, locked_dose=None, locked_loading_dose=None) for d in option.drugs],
            )
            for option in plan.options_for(modality)
        ]
    return DetailedRegimenPlan(**lists)


# ── Guard ────────────────────────────────────────────────────────────────────

def is_editable(patient: Patient) -> bool:
    return not patient.is_plan_locked


def ensure_editable(patient: Patient, action: str) -> None:
    """Raise PlanLockedError when ``action`` would edit a locked plan."""
    if patient.is_plan_locked:
        logger.warning(f"LockController: refused '{action}' on locked plan", extra={"patient_id": patient.id})
        raise PlanLockedError(
            f"Plan is locked; unlock it before attempting '{action}'.",
            action=action,
            details={"patient_id": patient.id},
        )


# ── State machine ────────────────────────────────────────────────────────────

class LockController:
    """Validated lock / unlock transitions on the Patient aggregate."""

    def lock(
        self,
        patient: Patient,
        markers: Optional[ClinicalMarkers] = None,
        modalities: Optional[Iterable[Modality]] = None,
    ) -> Patient:
        """
        UNLOCKED → LOCKED.

        Args:
            patient:    aggregate to lock; never mutated.
            markers:    draft markers to persist with the plan (defaults to
                        the patient's saved markers).
            modalities: modalities the clinician intends to lock; each must
                        have a selection. Defaults to every selected modality.

        Returns:
            A new Patient with locked doses, the marker snapshot and
            ``is_plan_locked=True``.

        Raises:
            PlanLockError: with the failed precondition as ``reason``.
        """
        if patient.is_plan_locked:
            raise PlanLockError("Plan is already locked.", reason=LockRefusal.ALREADY_LOCKED)

        plan = patient.detailed_plan
        if plan is None:
            raise PlanLockError("No regimen plan has been composed.", reason=LockRefusal.NO_PLAN)

        selection = patient.selected_regimens
        selected = selection.items()
        if not selected:
            raise PlanLockError("No regimen is selected.", reason=LockRefusal.NO_SELECTION)

        if modalities is not None:
            missing = [m.value for m in modalities if selection.get(m) is None]
            if missing:
                raise PlanLockError(
                    "A regimen must be selected for every modality being locked.",
                    reason=LockRefusal.NO_SELECTION,
                    details={"modalities": missing},
                )

        regimens = []
        for modality, regimen_id in selected:
            regimen = plan.find(modality, regimen_id)
            if regimen is None:
                raise PlanLockError(
                    f"Selected {modality.value} regimen '{regimen_id}' is not in the plan.",
                    reason=LockRefusal.UNKNOWN_REGIMEN,
                    details={"modality": modality.value, "regimen_id": regimen_id},
                )
            regimens.append(regimen)

        if not patient.height or not patient.weight or patient.height <= 0 or patient.weight <= 0:
            raise PlanLockError(
                "Height and weight must be recorded before doses can be locked.",
                reason=LockRefusal.MISSING_BIOMETRICS,
                details={"height": patient.height, "weight": patient.weight},
            )

        snapshot = copy.deepcopy(markers if markers is not None else patient.markers)
        serum_creatinine = classify(snapshot).serum_creatinine

        auc_drugs = [
            d.name for r in regimens for d in r.drugs if d.unit == DosingUnit.AUC
        ]
        if auc_drugs and serum_creatinine is None:
            raise PlanLockError(
                "Serum creatinine is required for AUC-dosed drugs.",
                reason=LockRefusal.MISSING_RENAL_FUNCTION,
                details={"drugs": auc_drugs},
            )

        def dose_fn(drug: DrugDetail, initial: bool) -> DoseResult:
            return compute_dose(
                drug,
                height_cm=patient.height,
                weight_kg=patient.weight,
                age=patient.age,
                serum_creatinine=serum_creatinine,
                is_initial_cycle=initial,
            )

        locked_plan = lock_plan(plan, selection, dose_fn)
        logger.info(
            f"LockController: locked {len(regimens)} regimen(s): " + ", ".join(r.id for r in regimens),
            extra={"patient_id": patient.id},
        )
        return replace(
            patient,
            markers=snapshot,
            locked_markers=copy.deepcopy(snapshot),
            detailed_plan=locked_plan,
            is_plan_locked=True,
        )

    def unlock(self, patient: Patient) -> Patient:
        """LOCKED → UNLOCKED. Clears every dose snapshot in every modality."""
        if not patient.is_plan_locked:
            logger.debug("LockController: unlock on unlocked plan", extra={"patient_id": patient.id})
        plan = unlock_plan(patient.detailed_plan) if patient.detailed_plan is not None else None
        logger.info("LockController: unlocked plan", extra={"patient_id": patient.id})
        return replace(
            patient,
            detailed_plan=plan,
            locked_markers=None,
            is_plan_locked=False,
        )
