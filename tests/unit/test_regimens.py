"""
Unit Tests for the Regimen Composer and per-modality rules.
"""
import pytest

from oncoplan.core.clinical import (
    ClinicalMarkers,
    Modality,
    MolecularSubtype,
    PATH_CONSERVATIVE,
    PATH_NEOADJUVANT,
    PATH_SURGERY,
    RegimenComposer,
    build_profile,
    high_risk_intensification_criterion,
)
from oncoplan.core.markers import classify


@pytest.fixture
def composer() -> RegimenComposer:
    return RegimenComposer()


def _profile(subtype=MolecularSubtype.LUMINAL_B, age=50, **marker_fields):
    fields = dict(
        er_status=">50%",
        pr_status="10%-50%",
        her2_status="1+",
        ki67="15%",
        tumor_size="1.5cm",
        node_status="N0",
        histological_grade="G2",
        menopause=False,
    )
    fields.update(marker_fields)
    return build_profile(subtype, classify(ClinicalMarkers(**fields)), age)


def _her2_profile(**overrides):
    fields = dict(subtype=MolecularSubtype.HER2_POSITIVE, er_status="0%", pr_status="0%", her2_status="3+")
    fields.update(overrides)
    return _profile(**fields)


def _tnbc_profile(**overrides):
    fields = dict(
        subtype=MolecularSubtype.TRIPLE_NEGATIVE, er_status="0%", pr_status="0%",
        her2_status="0", tumor_size="2.5cm", node_status="N1", histological_grade="G3",
    )
    fields.update(overrides)
    return _profile(**fields)


def _ids(options):
    return [o.id for o in options]


class TestComposerStructure:
    """Tests for the composer itself."""

    def test_registered_modalities(self):
        assert set(RegimenComposer.registered_modalities()) == set(Modality)

    def test_options_carry_their_modality(self, composer):
        plan = composer.compose(_tnbc_profile(), PATH_NEOADJUVANT)

        for modality in Modality:
            for option in plan.options_for(modality):
                assert option.modality == modality

    def test_default_selection_prefers_recommended(self, composer):
        plan = composer.compose(_profile(menopause=True), PATH_SURGERY)
        selection = RegimenComposer.default_selection(plan)

        assert selection.get(Modality.ENDOCRINE) == "e_letrozole"
        assert selection.get(Modality.CHEMO) == "c_tc_lum"
        assert selection.get(Modality.IMMUNE) is None

    def test_compose_is_repeatable(self, composer):
        profile = _her2_profile(node_status="N1")
        assert composer.compose(profile, PATH_SURGERY) == composer.compose(profile, PATH_SURGERY)


class TestHer2Positive:

    def test_chemo_and_dual_blockade(self, composer):
        plan = composer.compose(_her2_profile(node_status="N1"), PATH_NEOADJUVANT)

        assert _ids(plan.chemo_options) == ["c_tchp", "c_ac_thp"]
        assert plan.chemo_options[0].recommended
        assert _ids(plan.target_options) == ["t_hp", "t_h"]
        assert plan.target_options[0].recommended
        assert plan.endocrine_options == []
        assert plan.immune_options == []

    def test_single_agent_for_small_node_negative(self, composer):
        plan = composer.compose(_her2_profile(), PATH_SURGERY)

        recommended = [o.id for o in plan.target_options if o.recommended]
        assert recommended == ["t_h"]

    def test_trastuzumab_has_loading_dose(self, composer):
        plan = composer.compose(_her2_profile(), PATH_SURGERY)
        trastuzumab = plan.find(Modality.TARGET, "t_h").drugs[0]

        assert trastuzumab.has_loading_dose
        assert trastuzumab.loading_dose == 8

    def test_her2_hr_positive_high_risk_gets_abemaciclib_alongside_her2(self, composer):
        plan = composer.compose(_her2_profile(er_status=">50%", node_status="N2"), PATH_SURGERY)

        assert plan.endocrine_options
        assert "t_abema" in _ids(plan.target_options)
        assert _ids(plan.target_options)[0] == "t_hp"
        assert composer.default_selection(plan).target_id == "t_hp"

    def test_her2_hr_positive_low_risk_gets_no_abemaciclib(self, composer):
        plan = composer.compose(_her2_profile(er_status=">50%"), PATH_SURGERY)

        assert "t_abema" not in _ids(plan.target_options)


class TestTripleNegative:

    def test_neoadjuvant_platinum_and_immunotherapy(self, composer):
        plan = composer.compose(_tnbc_profile(), PATH_NEOADJUVANT)

        assert _ids(plan.chemo_options) == ["c_kn522"]
        assert _ids(plan.immune_options) == ["i_pembro"]
        assert plan.endocrine_options == []

    def test_adjuvant_dose_dense(self, composer):
        plan = composer.compose(_tnbc_profile(), PATH_SURGERY)

        assert _ids(plan.chemo_options) == ["c_dd_act"]
        assert plan.chemo_options[0].frequency_days == 14
        assert plan.immune_options == []

    def test_small_node_negative_no_immunotherapy(self, composer):
        plan = composer.compose(_tnbc_profile(tumor_size="1.5cm", node_status="N0"), PATH_NEOADJUVANT)

        assert plan.immune_options == []

    def test_er_low_follows_triple_negative_chemo(self, composer):
        plan = composer.compose(_profile(er_status="1%-10%", pr_status="0%"), PATH_SURGERY)

        assert _ids(plan.chemo_options) == ["c_dd_act"]
        assert plan.endocrine_options


class TestHormoneReceptorPositive:

    def test_conservative_pathway_has_no_chemo(self, composer):
        plan = composer.compose(_profile(menopause=True), PATH_CONSERVATIVE)

        assert plan.chemo_options == []
        assert plan.endocrine_options

    def test_high_risk_prefers_anthracycline(self, composer):
        plan = composer.compose(_profile(histological_grade="G3"), PATH_SURGERY)

        recommended = [o.id for o in plan.chemo_options if o.recommended]
        assert recommended == ["c_act_lum"]

    def test_postmenopausal_aromatase_inhibitors(self, composer):
        plan = composer.compose(_profile(menopause=True), PATH_SURGERY)

        assert _ids(plan.endocrine_options) == ["e_letrozole", "e_anastrozole", "e_exemestane"]
        assert plan.endocrine_options[0].recommended
        assert plan.endocrine_options[0].frequency_days == 1
        assert plan.endocrine_options[0].total_cycles == 1825

    def test_premenopausal_low_risk_tamoxifen(self, composer):
        plan = composer.compose(_profile(), PATH_SURGERY)

        assert _ids(plan.endocrine_options) == ["e_tamoxifen"]

    def test_premenopausal_young_gets_ovarian_suppression(self, composer):
        plan = composer.compose(_profile(age=32), PATH_SURGERY)

        assert _ids(plan.endocrine_options) == ["e_ofs_ai", "e_ofs_tam"]
        assert plan.endocrine_options[0].recommended

    def test_premenopausal_high_recurrence_score_gets_ovarian_suppression(self, composer):
        plan = composer.compose(_profile(genetic_test_result="30"), PATH_SURGERY)

        assert plan.endocrine_options[0].id == "e_ofs_ai"


class TestIntensification:
    """CDK4/6-inhibitor criterion and how it stacks onto endocrine therapy."""

    @pytest.mark.parametrize("fields,expected", [
        (dict(node_status="N2"), True),
        (dict(node_status="N1", histological_grade="G3"), True),
        (dict(node_status="N1", tumor_size="5.5cm"), True),
        (dict(node_status="N1", ki67="25%"), True),
        (dict(node_status="N1"), False),
        (dict(node_status="N0", histological_grade="G3"), False),
    ])
    def test_criterion(self, fields, expected):
        assert high_risk_intensification_criterion(_profile(**fields)) is expected

    def test_abemaciclib_offered_and_noted(self, composer):
        plan = composer.compose(_profile(node_status="N2", menopause=True), PATH_SURGERY)

        abema = plan.find(Modality.TARGET, "t_abema")
        assert abema is not None
        assert abema.drugs[0].administration == "bid"
        assert all("Abemaciclib" in o.rationale for o in plan.endocrine_options)

    def test_no_abemaciclib_below_criterion(self, composer):
        plan = composer.compose(_profile(node_status="N1", menopause=True), PATH_SURGERY)

        assert plan.target_options == []
        assert all("Abemaciclib" not in o.rationale for o in plan.endocrine_options)
