"""CrewPlan domain layer - entities, errors, and hour calculation."""

from .calculator import AllocationCalculator
from .entities import (
    Absence,
    AbsenceConflict,
    AbsenceType,
    Allocation,
    ConflictResolution,
    Employee,
    NewAbsenceConflict,
    ProjectPhase,
    Resource,
)
from .errors import (
    ConflictAlreadyResolvedError,
    DomainError,
    ErrorCategory,
    ErrorCode,
    InvalidResolutionError,
    NotFoundError,
    ValidationError,
)
from .results import ActionError, ActionResult

__all__ = [
    "AllocationCalculator",
    # Entities
    "Absence",
    "AbsenceConflict",
    "AbsenceType",
    "Allocation",
    "ConflictResolution",
    "Employee",
    "NewAbsenceConflict",
    "ProjectPhase",
    "Resource",
    # Errors
    "ConflictAlreadyResolvedError",
    "DomainError",
    "ErrorCategory",
    "ErrorCode",
    "InvalidResolutionError",
    "NotFoundError",
    "ValidationError",
    # Results
    "ActionError",
    "ActionResult",
]
