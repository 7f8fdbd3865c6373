"""
Pydantic envelopes for the planning API.

The domain records are plain dataclasses and are embedded directly; pydantic
validates and serializes them field by field.
"""
from datetime import date
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from oncoplan.core.clinical import ClinicalMarkers, Modality, Patient, TreatmentEvent


class HealthResponse(BaseModel):
    status: str
    version: str
    timestamp: str
    uptime_seconds: float


class ClassifyRequest(BaseModel):
    markers: ClinicalMarkers


class PatientRequest(BaseModel):
    """Patient aggregate plus optional unsaved (draft) markers."""
    patient: Patient
    markers: Optional[ClinicalMarkers] = Field(
        None, description="Draft markers; the patient's saved markers are used when omitted"
    )


class RegimenRequest(PatientRequest):
    pathway_id: Optional[str] = Field(
        None, description="Pathway to compose for; defaults to the selected pathway"
    )


class DoseRequest(PatientRequest):
    modality: Modality
    regimen_id: str


class DoseRow(BaseModel):
    """Standard and loading dose of one drug."""
    drug: str
    dose: str
    milligrams: Optional[float] = None
    loading_dose: Optional[str] = None
    loading_milligrams: Optional[float] = None
    locked: bool = False


class DoseResponse(BaseModel):
    regimen_id: str
    body_surface_area: float
    doses: List[DoseRow]


class LockRequest(PatientRequest):
    modalities: Optional[List[Modality]] = Field(
        None, description="Modalities the caller is confirming; each must have a selection"
    )


class ScheduleRequest(BaseModel):
    patient: Patient
    start_dates: Dict[Modality, date] = Field(default_factory=dict)
    today: Optional[date] = None


class ScheduleResponse(BaseModel):
    event_count: int
    events: List[TreatmentEvent]


class CommitRequest(BaseModel):
    patient: Patient
    events: List[TreatmentEvent]
