"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    LockRefusal,
    OncoPlanError,
    PlanLockError,
    PlanLockedError,
    RegimenSelectionError,
    ScheduleError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "LockRefusal",
    "OncoPlanError",
    "PlanLockError",
    "PlanLockedError",
    "RegimenSelectionError",
    "ScheduleError",
]
