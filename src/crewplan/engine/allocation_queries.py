"""
Allocation window query with absence warnings attached.
"""

from datetime import date
from typing import List, Optional

from crewplan.domain.errors import ErrorCode, ValidationError
from crewplan.engine.absence_conflict_checker import AbsenceConflictChecker
from crewplan.engine.schemas import AllocationWithWarning
from crewplan.storage.repositories.base import AllocationRepository


class AllocationQueryService:

    def __init__(self, allocation_repo: AllocationRepository, absence_checker: AbsenceConflictChecker):
        self.allocation_repo = allocation_repo
        self.absence_checker = absence_checker

    async def get_allocations_with_warnings(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        user_id: Optional[str] = None,
    ) -> List[AllocationWithWarning]:
        """One tenant query plus one absence lookup per employee in the window."""
        if end_date < start_date:
            raise ValidationError(
                "End date must not be before start date",
                code=ErrorCode.VALIDATION_INVALID_RANGE,
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

        allocations = await self.allocation_repo.find_by_tenant_and_date_range(
            tenant_id, start_date, end_date, user_id=user_id
        )
        conflicts = await self.absence_checker.get_conflicts_for_allocations(allocations)

        results = []
        for allocation in allocations:
            absence = conflicts.get(allocation.id)
            results.append(
                AllocationWithWarning(
                    allocation=allocation,
                    has_absence_warning=absence is not None,
                    absence_type=absence.type if absence else None,
                    absence_id=absence.id if absence else None,
                )
            )
        return results
