"""
Plan Lifecycle — dose locking and schedule expansion.
"""
from .lock import LockController, ensure_editable, is_editable, lock_plan, unlock_plan
from .schedule import (
    SCHEDULE_HARD_CAP,
    DoseInputs,
    dosage_details,
    expand_regimen,
    expand_schedule,
)

__all__ = [
    "LockController",
    "ensure_editable",
    "is_editable",
    "lock_plan",
    "unlock_plan",
    "SCHEDULE_HARD_CAP",
    "DoseInputs",
    "dosage_details",
    "expand_regimen",
    "expand_schedule",
]
