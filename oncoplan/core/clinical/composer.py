"""
Regimen Composer

Central dispatcher. Takes a clinical profile and the chosen pathway and
returns every modality's candidate regimens from the fixed rule table.

Usage:
    from oncoplan.core.clinical import RegimenComposer

    composer = RegimenComposer()
    plan = composer.compose(profile, pathway_id="path_surgery")
    selection = composer.default_selection(plan)

Replacing the rule table:
    Each modality has one rule module (rules_<modality>.py) exposing
    evaluate_<modality>(RegimenContext) -> List[RegimenOption], registered in
    _MODALITY_RULES below. Guideline updates replace these modules wholesale.
"""
from __future__ import annotations

from typing import Dict, List

from oncoplan.utils import get_logger
from .base import DetailedRegimenPlan, Modality, RegimenOption, SelectedRegimens
from .profile import ClinicalProfile, RegimenContext
from .rules_chemo import evaluate_chemo
from .rules_endocrine import evaluate_endocrine
from .rules_immune import evaluate_immune
from .rules_targeted import evaluate_targeted

logger = get_logger(__name__)

# ── Registry: modality → rule evaluator ──────────────────────────────────────
_MODALITY_RULES = {
    Modality.CHEMO:     evaluate_chemo,
    Modality.ENDOCRINE: evaluate_endocrine,
    Modality.TARGET:    evaluate_targeted,
    Modality.IMMUNE:    evaluate_immune,
}


class RegimenComposer:
    """
    Builds a DetailedRegimenPlan from the rule table.

    Stateless; every call re-derives the plan from its inputs.
    """

    def compose(self, profile: ClinicalProfile, pathway_id: str) -> DetailedRegimenPlan:
        ctx = RegimenContext(profile=profile, pathway_id=pathway_id)
        options: Dict[Modality, List[RegimenOption]] = {}

        for modality, evaluator in _MODALITY_RULES.items():
            regimens = evaluator(ctx)
            options[modality] = regimens
            if regimens:
                logger.info(
                    f"RegimenComposer [{modality.value}]: "
                    + ", ".join(
                        f"{r.id}{'*' if r.recommended else ''}" for r in regimens
                    )
                )
            else:
                logger.debug(f"RegimenComposer [{modality.value}]: no options")

        return DetailedRegimenPlan(
            chemo_options=options[Modality.CHEMO],
            endocrine_options=options[Modality.ENDOCRINE],
            target_options=options[Modality.TARGET],
            immune_options=options[Modality.IMMUNE],
        )

    @staticmethod
    def default_selection(plan: DetailedRegimenPlan) -> SelectedRegimens:
        """Pre-select the recommended option (else the first) in every non-empty modality."""
        selection = SelectedRegimens()
        for modality in Modality:
            regimens = plan.options_for(modality)
            if not regimens:
                continue
            chosen = next((r for r in regimens if r.recommended), regimens[0])
            selection = selection.with_selection(modality, chosen.id)
        return selection

    @staticmethod
    def registered_modalities() -> List[Modality]:
        return list(_MODALITY_RULES.keys())
