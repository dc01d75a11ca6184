"""
Domain error taxonomy.

Every error carries a stable machine-readable ``code`` and a human-readable
message. ``category`` groups codes into the four kinds callers branch on.
Absence overlaps are warnings, never errors.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_RESOLVED = "ALREADY_RESOLVED"
    INVALID_RESOLUTION = "INVALID_RESOLUTION"


class ErrorCode(str, Enum):
    """Machine-readable error codes."""

    # Validation
    ALLOCATION_USER_OR_RESOURCE_REQUIRED = "ALLOCATION_USER_OR_RESOURCE_REQUIRED"
    ALLOCATION_CANNOT_HAVE_BOTH = "ALLOCATION_CANNOT_HAVE_BOTH"
    ALLOCATION_USER_INACTIVE = "ALLOCATION_USER_INACTIVE"
    ALLOCATION_RESOURCE_INACTIVE = "ALLOCATION_RESOURCE_INACTIVE"
    MOVE_TARGET_REQUIRED = "MOVE_TARGET_REQUIRED"
    DELETE_CONFIRMATION_REQUIRED = "DELETE_CONFIRMATION_REQUIRED"
    ABSENCE_INVALID_DATES = "ABSENCE_INVALID_DATES"
    ABSENCE_INVALID_TYPE = "ABSENCE_INVALID_TYPE"
    VALIDATION_INVALID_RANGE = "VALIDATION_INVALID_RANGE"
    NEW_DATE_REQUIRED = "NEW_DATE_REQUIRED"

    # Not found
    ALLOCATION_NOT_FOUND = "ALLOCATION_NOT_FOUND"
    PHASE_NOT_FOUND = "PHASE_NOT_FOUND"
    USER_NOT_FOUND = "USER_NOT_FOUND"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    ABSENCE_NOT_FOUND = "ABSENCE_NOT_FOUND"
    CONFLICT_NOT_FOUND = "CONFLICT_NOT_FOUND"

    # Conflict lifecycle
    CONFLICT_ALREADY_RESOLVED = "CONFLICT_ALREADY_RESOLVED"
    INVALID_RESOLUTION = "INVALID_RESOLUTION"
    RESOLVE_CONFLICT_FAILED = "RESOLVE_CONFLICT_FAILED"


class DomainError(Exception):
    """Base class for domain-level errors."""

    category: ErrorCategory = ErrorCategory.VALIDATION

    def __init__(
        self,
        message: str,
        *,
        code: ErrorCode | str,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code.value if isinstance(code, ErrorCode) else code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "message": self.message}


class ValidationError(DomainError):
    """Raised when input is malformed or violates an entity invariant."""

    category = ErrorCategory.VALIDATION


class NotFoundError(DomainError):
    """Raised when an id cannot be resolved within the caller's tenant."""

    category = ErrorCategory.NOT_FOUND

    def __init__(self, entity: str, entity_id: str, *, code: ErrorCode | str):
        super().__init__(
            f"{entity} not found: {entity_id}",
            code=code,
            details={"entity": entity, "id": entity_id},
        )


class ConflictAlreadyResolvedError(DomainError):
    """Raised when a resolved conflict is resolved a second time."""

    category = ErrorCategory.ALREADY_RESOLVED

    def __init__(self, conflict_id: str):
        super().__init__(
            f"Conflict {conflict_id} has already been resolved",
            code=ErrorCode.CONFLICT_ALREADY_RESOLVED,
            details={"id": conflict_id},
        )


class InvalidResolutionError(DomainError):
    """Raised for an unrecognized resolution kind."""

    category = ErrorCategory.INVALID_RESOLUTION

    def __init__(self, resolution: Any):
        super().__init__(
            f"Invalid resolution: {resolution!r}",
            code=ErrorCode.INVALID_RESOLUTION,
            details={"resolution": str(resolution)},
        )
