"""
Custom Exception Hierarchy

Provides specific exception types for the planning workflow with structured
error information. Marker classification and dose computation never raise;
these cover refused state transitions and invalid selections.
"""
from enum import Enum
from typing import Optional, Dict, Any


class LockRefusal(str, Enum):
    """Enumerable reasons a lock transition is refused."""
    ALREADY_LOCKED = "already_locked"
    NO_PLAN = "no_plan"
    NO_SELECTION = "no_selection"
    UNKNOWN_REGIMEN = "unknown_regimen"
    MISSING_BIOMETRICS = "missing_biometrics"
    MISSING_RENAL_FUNCTION = "missing_renal_function"


class OncoPlanError(Exception):
    """Base exception for all treatment-planning errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class PlanLockError(OncoPlanError):
    """A lock transition was refused; no state was changed."""

    def __init__(
        self,
        message: str,
        reason: LockRefusal,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="LOCK_REFUSED",
            details={"reason": reason.value, **(details or {})}
        )
        self.reason = reason


class PlanLockedError(OncoPlanError):
    """An edit was attempted while the plan is locked."""

    def __init__(
        self,
        message: str,
        action: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="PLAN_LOCKED",
            details={"action": action, **(details or {})}
        )
        self.action = action


class RegimenSelectionError(OncoPlanError):
    """A pathway or regimen id does not exist in the current options."""

    def __init__(
        self,
        message: str,
        selection_id: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="SELECTION_ERROR",
            details={"selection_id": selection_id, **(details or {})}
        )
        self.selection_id = selection_id


class ScheduleError(OncoPlanError):
    """Errors while expanding or committing a schedule."""

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="SCHEDULE_ERROR",
            details=details
        )
