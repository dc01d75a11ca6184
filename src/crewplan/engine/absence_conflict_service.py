"""
Absence Conflict Service - Persisted conflict lifecycle.

Whenever an absence is written, allocations of the same employee that now
fall inside it are materialized as conflict records. Records are resolved
at most once and removed together with their absence or allocation.

Detection checks for an existing record before inserting, but concurrent
absence edits can still race between that check and the insert. The
storage-level unique constraint on ``(allocation_id, absence_id)`` is what
actually keeps records unique; ``save_many`` skips rows that violate it.
"""

from typing import List

from crewplan.domain.entities import (
    Absence,
    AbsenceConflict,
    ConflictResolution,
    NewAbsenceConflict,
)
from crewplan.domain.errors import (
    ConflictAlreadyResolvedError,
    ErrorCode,
    InvalidResolutionError,
    NotFoundError,
)
from crewplan.platform.logging import get_logger
from crewplan.storage.repositories.base import (
    AbsenceConflictRepository,
    AllocationRepository,
)

logger = get_logger(__name__)


def parse_resolution(value) -> ConflictResolution:
    """Coerce ``value`` to a resolution kind or raise InvalidResolutionError."""
    try:
        return ConflictResolution(value)
    except ValueError:
        raise InvalidResolutionError(value) from None


class AbsenceConflictService:
    """
    Detects, resolves and removes persisted absence conflicts.

    Resolution here only marks the record; the allocation-side effect of a
    resolution belongs to ``ResolveConflictUseCase``.
    """

    def __init__(
        self,
        conflict_repo: AbsenceConflictRepository,
        allocation_repo: AllocationRepository,
    ):
        self.conflict_repo = conflict_repo
        self.allocation_repo = allocation_repo

    async def detect_and_record_conflicts(self, absence: Absence) -> List[AbsenceConflict]:
        """
        Record a conflict for every allocation of the absence's employee
        inside its date range that has none yet.

        Returns:
            Only the records created by this call. Re-running for an
            unchanged absence returns an empty list.
        """
        allocations = await self.allocation_repo.find_by_user_and_date_range(
            absence.user_id, absence.start_date, absence.end_date
        )

        new_conflicts: List[NewAbsenceConflict] = []
        for allocation in allocations:
            if not absence.includes_date(allocation.date):
                continue
            existing = await self.conflict_repo.find_by_allocation_and_absence(
                allocation.id, absence.id
            )
            if existing:
                continue
            new_conflicts.append(
                NewAbsenceConflict(
                    tenant_id=absence.tenant_id,
                    allocation_id=allocation.id,
                    absence_id=absence.id,
                    user_id=absence.user_id,
                    date=allocation.date,
                    absence_type=absence.type,
                )
            )

        if not new_conflicts:
            return []

        created = await self.conflict_repo.save_many(new_conflicts)
        logger.info(
            "Recorded absence conflicts",
            absence_id=absence.id,
            user_id=absence.user_id,
            count=len(created),
        )
        return created

    async def resolve_conflict(
        self,
        conflict_id: str,
        resolution: ConflictResolution | str,
        resolved_by: str,
    ) -> AbsenceConflict:
        """
        Mark a conflict resolved.

        Raises:
            InvalidResolutionError: ``resolution`` is not moved/deleted/ignored
            NotFoundError: no conflict with ``conflict_id``
            ConflictAlreadyResolvedError: the conflict was resolved before
        """
        kind = parse_resolution(resolution)

        conflict = await self.conflict_repo.find_by_id(conflict_id)
        if not conflict:
            raise NotFoundError("Conflict", conflict_id, code=ErrorCode.CONFLICT_NOT_FOUND)
        if conflict.is_resolved:
            raise ConflictAlreadyResolvedError(conflict_id)

        resolved = await self.conflict_repo.resolve(conflict_id, kind, resolved_by)
        logger.info(
            "Resolved absence conflict",
            conflict_id=conflict_id,
            resolution=kind.value,
            resolved_by=resolved_by,
        )
        return resolved

    async def remove_conflicts_for_absence(self, absence_id: str) -> None:
        await self.conflict_repo.delete_by_absence_id(absence_id)
        logger.info("Removed conflicts for absence", absence_id=absence_id)

    async def remove_conflicts_for_allocation(self, allocation_id: str) -> None:
        await self.conflict_repo.delete_by_allocation_id(allocation_id)
        logger.info("Removed conflicts for allocation", allocation_id=allocation_id)

    async def update_conflicts_for_absence(
        self, old_absence: Absence, new_absence: Absence
    ) -> List[AbsenceConflict]:
        """
        Re-derive conflicts after an absence edit.

        A change of employee or of either date makes it a different absence:
        its conflicts are dropped and detected again. Any other change (type,
        notes) leaves the records alone and returns an empty list.
        """
        changed = (
            old_absence.user_id != new_absence.user_id
            or old_absence.start_date != new_absence.start_date
            or old_absence.end_date != new_absence.end_date
        )
        if not changed:
            return []

        await self.remove_conflicts_for_absence(old_absence.id)
        return await self.detect_and_record_conflicts(new_absence)

    async def list_unresolved(self, tenant_id: str) -> List[AbsenceConflict]:
        return await self.conflict_repo.find_unresolved_by_tenant(tenant_id)

    async def count_unresolved(self, tenant_id: str) -> int:
        return await self.conflict_repo.count_unresolved_by_tenant(tenant_id)
