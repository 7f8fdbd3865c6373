"""
Unit Tests for the Pathway Recommender

Rule order: neoadjuvant trigger → chemotherapy waiver → surgery-first default.
"""
import pytest

from oncoplan.core.clinical import (
    ClinicalMarkers,
    MolecularSubtype,
    PATH_CONSERVATIVE,
    PATH_NEOADJUVANT,
    PATH_SURGERY,
    assess_chemo_waiver,
    build_profile,
    recommend_pathways,
)
from oncoplan.core.markers import classify


def _profile(subtype=MolecularSubtype.LUMINAL_A, age=55, **marker_fields):
    fields = dict(
        er_status=">50%",
        pr_status=">50%",
        her2_status="1+",
        ki67="10%",
        tumor_size="1.5cm",
        node_status="N0",
        histological_grade="G2",
        menopause=True,
    )
    fields.update(marker_fields)
    return build_profile(subtype, classify(ClinicalMarkers(**fields)), age)


def _ids(options):
    return [o.id for o in options]


PROFILE_GRID = [
    dict(subtype=MolecularSubtype.HER2_POSITIVE, her2_status="3+", er_status="0%", pr_status="0%",
         tumor_size="3cm", node_status="N1"),
    dict(subtype=MolecularSubtype.HER2_POSITIVE, her2_status="3+", tumor_size="1.2cm"),
    dict(subtype=MolecularSubtype.TRIPLE_NEGATIVE, er_status="0%", pr_status="0%", her2_status="0",
         tumor_size="1.0cm", node_status="N0"),
    dict(node_status="N3"),
    dict(node_status="N2", histological_grade="G3"),
    dict(node_status="N2"),
    dict(genetic_test_result="8"),
    dict(genetic_test_result="18"),
    dict(genetic_test_result="23", histological_grade="G3"),
    dict(genetic_test_result="31"),
    dict(tumor_size="0.8cm"),
    dict(ki67="40%"),
    dict(),
]


class TestPathwayCardinality:
    """Every profile yields exactly two options, recommended first."""

    @pytest.mark.parametrize("fields", PROFILE_GRID)
    def test_two_options_recommended_first(self, fields):
        options = recommend_pathways(_profile(**fields))

        assert len(options) == 2
        assert options[0].recommended
        assert sum(1 for o in options if o.recommended) == 1
        assert len(set(_ids(options))) == 2
        assert all(o.rationale for o in options)


class TestNeoadjuvantTrigger:
    """Tests for rule 1."""

    def test_her2_large_tumor(self):
        options = recommend_pathways(_profile(
            subtype=MolecularSubtype.HER2_POSITIVE, her2_status="3+", tumor_size="3cm",
        ))

        assert _ids(options) == [PATH_NEOADJUVANT, PATH_SURGERY]
        assert "2 cm" in options[0].rationale
        assert "or node stage" in options[0].rationale

    def test_her2_small_node_negative_goes_to_surgery(self):
        options = recommend_pathways(_profile(
            subtype=MolecularSubtype.HER2_POSITIVE, her2_status="3+", tumor_size="1.5cm",
        ))

        assert _ids(options) == [PATH_SURGERY, PATH_NEOADJUVANT]

    def test_triple_negative_node_positive(self):
        options = recommend_pathways(_profile(
            subtype=MolecularSubtype.TRIPLE_NEGATIVE, er_status="0%", pr_status="0%",
            her2_status="0", tumor_size="1.5cm", node_status="N1",
        ))

        assert options[0].id == PATH_NEOADJUVANT

    def test_luminal_bulky_nodes(self):
        assert recommend_pathways(_profile(node_status="N3"))[0].id == PATH_NEOADJUVANT

    def test_luminal_n2_grade3(self):
        assert recommend_pathways(_profile(node_status="N2", histological_grade="G3"))[0].id == PATH_NEOADJUVANT

    def test_luminal_n2_grade2_is_surgery_first(self):
        options = recommend_pathways(_profile(node_status="N2"))

        assert _ids(options) == [PATH_SURGERY, PATH_NEOADJUVANT]


class TestChemoWaiver:
    """Tests for rule 2."""

    def test_very_low_recurrence_score(self):
        options = recommend_pathways(_profile(genetic_test_result="8"))

        assert _ids(options) == [PATH_CONSERVATIVE, PATH_SURGERY]
        assert options[0].highly_recommended

    def test_low_intermediate_recurrence_score_strongly_waives(self):
        options = recommend_pathways(_profile(genetic_test_result="14"))

        assert _ids(options) == [PATH_CONSERVATIVE, PATH_SURGERY]
        assert options[0].recommended
        assert options[0].highly_recommended

    @pytest.mark.parametrize("score", ["18", "20", "25"])
    def test_upper_intermediate_recurrence_score_offers_waiver_second(self, score):
        options = recommend_pathways(_profile(genetic_test_result=score))

        assert _ids(options) == [PATH_SURGERY, PATH_CONSERVATIVE]
        assert options[0].recommended
        assert not options[1].recommended
        assert not options[1].highly_recommended

    def test_equivocal_her2_not_amplified_stays_in_waiver_population(self):
        options = recommend_pathways(_profile(
            her2_status="2+, ISH non-amplified", genetic_test_result="8",
            tumor_size="0.8cm", node_status="N0", histological_grade="G2",
        ))

        assert _ids(options) == [PATH_CONSERVATIVE, PATH_SURGERY]
        assert options[0].highly_recommended

    def test_caution_band_with_clinical_high_risk(self):
        options = recommend_pathways(_profile(genetic_test_result="23", histological_grade="G3"))

        assert _ids(options) == [PATH_SURGERY, PATH_CONSERVATIVE]
        assert not options[1].recommended
        assert "caution" in options[1].rationale

    def test_high_recurrence_score_no_waiver(self):
        options = recommend_pathways(_profile(genetic_test_result="31"))

        assert _ids(options) == [PATH_SURGERY, PATH_NEOADJUVANT]

    def test_very_low_risk_without_score(self):
        options = recommend_pathways(_profile(tumor_size="0.8cm"))

        assert options[0].id == PATH_CONSERVATIVE
        assert options[0].highly_recommended

    def test_low_risk_without_score_advises_testing(self):
        options = recommend_pathways(_profile(tumor_size="1.8cm", ki67="20%"))

        assert _ids(options) == [PATH_SURGERY, PATH_CONSERVATIVE]
        assert "genomic" in options[1].rationale

    def test_high_risk_without_score_no_waiver(self):
        options = recommend_pathways(_profile(histological_grade="G3"))

        assert _ids(options) == [PATH_SURGERY, PATH_NEOADJUVANT]

    def test_outside_waiver_population(self):
        assert assess_chemo_waiver(_profile(node_status="N2")) is None
        assert assess_chemo_waiver(_profile(
            subtype=MolecularSubtype.HER2_POSITIVE, her2_status="3+",
        )) is None

    @pytest.mark.parametrize("grade", ["G2", "G3"])
    def test_lower_score_never_loses_eligibility(self, grade):
        eligible = [
            assess_chemo_waiver(_profile(genetic_test_result=str(rs), histological_grade=grade)).eligible
            for rs in range(0, 41)
        ]
        for lower, higher in zip(eligible, eligible[1:]):
            assert lower or not higher
