"""CrewPlan Engine - allocation workflows, absence conflicts and availability."""

from .absence_conflict_checker import AbsenceConflictChecker
from .absence_conflict_service import AbsenceConflictService
from .absence_service import AbsenceService
from .allocation_queries import AllocationQueryService
from .allocations import (
    CreateAllocationUseCase,
    DeleteAllocationUseCase,
    MoveAllocationUseCase,
)
from .availability_analyzer import AvailabilityAnalyzer
from .resolve_conflict import ResolveConflictUseCase

__all__ = [
    "AbsenceConflictChecker",
    "AbsenceConflictService",
    "AbsenceService",
    "AllocationQueryService",
    "AvailabilityAnalyzer",
    "CreateAllocationUseCase",
    "DeleteAllocationUseCase",
    "MoveAllocationUseCase",
    "ResolveConflictUseCase",
]
