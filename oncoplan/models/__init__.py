"""
API request / response models.
"""
from .plan import (
    ClassifyRequest,
    CommitRequest,
    DoseRequest,
    DoseRow,
    DoseResponse,
    HealthResponse,
    LockRequest,
    PatientRequest,
    RegimenRequest,
    ScheduleRequest,
    ScheduleResponse,
)

__all__ = [
    "ClassifyRequest",
    "CommitRequest",
    "DoseRequest",
    "DoseRow",
    "DoseResponse",
    "HealthResponse",
    "LockRequest",
    "PatientRequest",
    "RegimenRequest",
    "ScheduleRequest",
    "ScheduleResponse",
]
