from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field

from crewplan.domain.entities import Absence, AbsenceConflict

# --- Allocations ---

class AllocationCreate(BaseModel):
    project_phase_id: str
    date: date
    user_id: Optional[str] = None
    resource_id: Optional[str] = None
    notes: Optional[str] = None

class AllocationMove(BaseModel):
    new_date: Optional[date] = None
    new_project_phase_id: Optional[str] = None

# --- Conflicts ---

class ConflictResolve(BaseModel):
    resolution: str = Field(..., description="moved, deleted or ignored")
    resolved_by: str
    new_date: Optional[date] = None

class ConflictCount(BaseModel):
    count: int

# --- Absences ---

class AbsenceCreate(BaseModel):
    user_id: str
    type: str
    start_date: date
    end_date: date
    notes: Optional[str] = None

class AbsenceUpdate(BaseModel):
    user_id: Optional[str] = None
    type: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    notes: Optional[str] = None

class AbsenceWriteResponse(BaseModel):
    absence: Absence
    conflicts: List[AbsenceConflict] = Field(default_factory=list)
