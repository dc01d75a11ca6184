"""
Absence Conflict Checker - Read-only absence lookups at allocation time.

Answers "is this employee absent on this day?" for single allocations and
for batches. Results are advisory; nothing here ever blocks a mutation or
raises for missing data.
"""

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from crewplan.domain.entities import Absence, Allocation
from crewplan.platform.logging import get_logger
from crewplan.storage.repositories.base import AbsenceRepository

logger = get_logger(__name__)


class AbsenceConflictChecker:
    """Looks up absences covering allocation dates."""

    def __init__(self, absence_repo: AbsenceRepository):
        self.absence_repo = absence_repo

    async def has_conflict(self, user_id: str, day: date) -> bool:
        return await self.get_conflicting_absence(user_id, day) is not None

    async def get_conflicting_absence(self, user_id: str, day: date) -> Optional[Absence]:
        """
        First absence (in repository order) of ``user_id`` covering ``day``.

        Returns None when no absence covers the day, even if the employee
        has absences elsewhere in time.
        """
        absences = await self.absence_repo.find_by_user_and_date_range(user_id, day, day)
        return next((a for a in absences if a.includes_date(day)), None)

    async def get_conflicts_for_allocations(
        self, allocations: Sequence[Allocation]
    ) -> Dict[str, Absence]:
        """
        Map allocation id to the absence covering its date.

        Resource allocations are skipped. One absence lookup is issued per
        distinct employee, spanning that employee's earliest to latest
        allocation date; each allocation is then matched on its exact day.
        """
        by_user: Dict[str, List[Allocation]] = defaultdict(list)
        for allocation in allocations:
            if allocation.is_user_allocation:
                by_user[allocation.user_id].append(allocation)

        conflicts: Dict[str, Absence] = {}
        for user_id, user_allocations in by_user.items():
            dates = [a.date for a in user_allocations]
            absences = await self.absence_repo.find_by_user_and_date_range(
                user_id, min(dates), max(dates)
            )
            if not absences:
                continue
            for allocation in user_allocations:
                match = next((a for a in absences if a.includes_date(allocation.date)), None)
                if match:
                    conflicts[allocation.id] = match

        logger.debug(
            "Checked allocations for absence conflicts",
            allocations=len(allocations),
            employees=len(by_user),
            conflicts=len(conflicts),
        )
        return conflicts
