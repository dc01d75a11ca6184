"""
Domain entities for allocation scheduling.

Entities are immutable pydantic models. Storage maps its rows into these
types; nothing outside ``crewplan.storage`` ever sees an ORM row.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from crewplan.domain.errors import ErrorCode, ValidationError

WORK_DAYS_PER_WEEK = 5
DEFAULT_DAILY_HOURS = 8.0


def generate_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AbsenceType(str, Enum):
    """Absence categories."""

    VACATION = "vacation"
    SICK = "sick"
    HOLIDAY = "holiday"
    TRAINING = "training"
    OTHER = "other"


class ConflictResolution(str, Enum):
    """How an absence conflict was closed."""

    MOVED = "moved"
    DELETED = "deleted"
    IGNORED = "ignored"


class Employee(BaseModel):
    """An employee that can be allocated to project phases."""

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: str
    email: str
    full_name: str
    weekly_hours: float = 40.0
    is_active: bool = True

    @property
    def daily_hours(self) -> float:
        """Per-day capacity derived from contracted weekly hours."""
        if self.weekly_hours and self.weekly_hours > 0:
            return self.weekly_hours / WORK_DAYS_PER_WEEK
        return DEFAULT_DAILY_HOURS


class Resource(BaseModel):
    """A piece of equipment (vehicle, machine) that can be allocated."""

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: str
    name: str
    is_active: bool = True


class ProjectPhase(BaseModel):
    """A date-bounded unit of project work. Either bound may be unset."""

    model_config = ConfigDict(frozen=True)

    id: str
    tenant_id: str
    project_id: str
    name: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class Allocation(BaseModel):
    """
    One employee-or-resource assignment to one project phase on one day.

    Exactly one of ``user_id`` / ``resource_id`` is set. Resource
    allocations never carry planned hours.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    tenant_id: str
    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    project_phase_id: str
    date: date
    planned_hours: Optional[float] = None
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("notes")
    @classmethod
    def _strip_notes(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="before")
    @classmethod
    def _drop_resource_hours(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("resource_id"):
            data = {**data, "planned_hours": None}
        return data

    @model_validator(mode="after")
    def _check_user_xor_resource(self) -> "Allocation":
        validate_user_or_resource(self.user_id, self.resource_id)
        return self

    @property
    def is_user_allocation(self) -> bool:
        return bool(self.user_id)


def validate_user_or_resource(user_id: Optional[str], resource_id: Optional[str]) -> None:
    if not user_id and not resource_id:
        raise ValidationError(
            "Either an employee or a resource is required",
            code=ErrorCode.ALLOCATION_USER_OR_RESOURCE_REQUIRED,
            details={"field": "user_id/resource_id"},
        )
    if user_id and resource_id:
        raise ValidationError(
            "An allocation cannot reference both an employee and a resource",
            code=ErrorCode.ALLOCATION_CANNOT_HAVE_BOTH,
            details={"field": "user_id/resource_id"},
        )


class Absence(BaseModel):
    """An inclusive date range during which an employee is unavailable."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    tenant_id: str
    user_id: str
    type: AbsenceType
    start_date: date
    end_date: date
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("type", mode="before")
    @classmethod
    def _check_type(cls, value: Any) -> AbsenceType:
        try:
            return AbsenceType(value)
        except ValueError:
            raise ValidationError(
                f"Invalid absence type: {value!r}",
                code=ErrorCode.ABSENCE_INVALID_TYPE,
                details={"field": "type"},
            ) from None

    @model_validator(mode="after")
    def _check_range(self) -> "Absence":
        if self.end_date < self.start_date:
            raise ValidationError(
                "Absence end date must not be before its start date",
                code=ErrorCode.ABSENCE_INVALID_DATES,
                details={"field": "end_date"},
            )
        return self

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def includes_date(self, day: date) -> bool:
        return self.start_date <= day <= self.end_date

    def covered_dates(self, range_start: date, range_end: date) -> list[date]:
        """Days of this absence that fall inside ``[range_start, range_end]``."""
        start = max(self.start_date, range_start)
        end = min(self.end_date, range_end)
        return [start + timedelta(days=i) for i in range((end - start).days + 1)]


class NewAbsenceConflict(BaseModel):
    """Input for persisting a newly detected conflict."""

    model_config = ConfigDict(frozen=True)

    tenant_id: str
    allocation_id: str
    absence_id: str
    user_id: str
    date: date
    absence_type: AbsenceType


class AbsenceConflict(NewAbsenceConflict):
    """
    Persisted fact: an allocation falls on a day covered by an absence of
    the same employee. Resolved at most once.
    """

    id: str
    resolved_at: Optional[datetime] = None
    resolved_by: Optional[str] = None
    resolution: Optional[ConflictResolution] = None
    created_at: datetime = Field(default_factory=utcnow)

    @property
    def is_resolved(self) -> bool:
        return self.resolved_at is not None
