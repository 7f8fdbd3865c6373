"""
Pytest Configuration and Fixtures

Shared fixtures for treatment-planning tests.
"""
import sys
from pathlib import Path

import pytest

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from oncoplan.core.clinical import ClinicalMarkers, MolecularSubtype, Patient
from oncoplan.services import PlanningService


@pytest.fixture
def her2_markers() -> ClinicalMarkers:
    """HER2 3+, 3 cm, node-positive, hormone-receptor negative."""
    return ClinicalMarkers(
        er_status="0%",
        pr_status="0%",
        her2_status="3+",
        ki67="40%",
        tumor_size="3.0cm",
        node_status="cN1",
        histological_grade="G3",
        menopause=False,
        serum_creatinine="70",
    )


@pytest.fixture
def tnbc_markers() -> ClinicalMarkers:
    return ClinicalMarkers(
        er_status="0%",
        pr_status="0%",
        her2_status="0",
        ki67="60%",
        tumor_size="2.5cm",
        node_status="N1",
        histological_grade="G3",
        menopause=False,
        serum_creatinine="65",
    )


@pytest.fixture
def luminal_markers() -> ClinicalMarkers:
    """Small, node-negative, low-grade HR-positive disease."""
    return ClinicalMarkers(
        er_status=">50%",
        pr_status=">50%",
        her2_status="1+",
        ki67="10%",
        tumor_size="0.8cm",
        node_status="N0",
        histological_grade="G2",
        menopause=True,
    )


@pytest.fixture
def make_patient():
    """Factory for a patient with biometrics recorded."""
    def _make(subtype: MolecularSubtype, markers: ClinicalMarkers, **overrides) -> Patient:
        fields = dict(
            id="P-001",
            name="Test Patient",
            age=50,
            subtype=subtype,
            markers=markers,
            height=165.0,
            weight=60.0,
        )
        fields.update(overrides)
        return Patient(**fields)
    return _make


@pytest.fixture
def service() -> PlanningService:
    return PlanningService()


@pytest.fixture
def her2_patient(make_patient, her2_markers) -> Patient:
    return make_patient(MolecularSubtype.HER2_POSITIVE, her2_markers)


@pytest.fixture
def her2_planned(service, her2_patient) -> Patient:
    """HER2-positive patient with pathways and default regimens selected."""
    patient = service.recommend_pathways(her2_patient)
    return service.compose_regimens(patient)
