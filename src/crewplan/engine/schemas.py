"""
Engine Schemas - Inputs, results and warnings of the scheduling workflows.

Warnings are non-blocking: a mutation always commits and reports every
warning that applies to it. A discriminated union on ``type`` keeps the
four warning kinds distinguishable once serialized.
"""

from datetime import date
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field

from crewplan.domain.entities import AbsenceType, Allocation, ProjectPhase


# --- Warnings ---

class AbsenceConflictWarning(BaseModel):
    type: Literal["absence_conflict"] = "absence_conflict"
    absence_id: str
    absence_type: AbsenceType
    start_date: date
    end_date: date


class MultiAllocationWarning(BaseModel):
    type: Literal["multi_allocation"] = "multi_allocation"
    date: date
    count: int


class PhaseExtendedWarning(BaseModel):
    type: Literal["phase_extended"] = "phase_extended"
    phase_id: str
    new_end_date: date


class PhasePreponedWarning(BaseModel):
    type: Literal["phase_preponed"] = "phase_preponed"
    phase_id: str
    new_start_date: date


AllocationWarning = Annotated[
    Union[
        AbsenceConflictWarning,
        MultiAllocationWarning,
        PhaseExtendedWarning,
        PhasePreponedWarning,
    ],
    Field(discriminator="type"),
]


# --- Allocation workflows ---

class CreateAllocationRequest(BaseModel):
    tenant_id: str
    project_phase_id: str
    date: date
    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    notes: Optional[str] = None


class MoveAllocationRequest(BaseModel):
    tenant_id: str
    allocation_id: str
    new_date: Optional[date] = None
    new_project_phase_id: Optional[str] = None


class DeleteAllocationRequest(BaseModel):
    tenant_id: str
    allocation_id: str
    confirmed: bool = False


class AllocationResult(BaseModel):
    """The mutated allocation plus everything the planner should be told."""

    allocation: Allocation
    warnings: List[AllocationWarning] = Field(default_factory=list)
    updated_phase: Optional[ProjectPhase] = None
    redistributed_hours: Dict[str, float] = Field(default_factory=dict)

    def has_warning(self, kind: str) -> bool:
        return any(w.type == kind for w in self.warnings)


class DeleteAllocationResult(BaseModel):
    deleted_id: str
    redistributed_hours: Dict[str, float] = Field(default_factory=dict)


# --- Conflict resolution ---

class ResolveConflictInput(BaseModel):
    conflict_id: str
    tenant_id: Optional[str] = None
    resolution: str
    resolved_by: str
    new_date: Optional[date] = None


# --- Queries ---

class AllocationWithWarning(BaseModel):
    allocation: Allocation
    has_absence_warning: bool = False
    absence_type: Optional[AbsenceType] = None
    absence_id: Optional[str] = None
