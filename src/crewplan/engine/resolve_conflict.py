"""
Resolve Conflict Use Case - Close one absence conflict end to end.

State machine: ``unresolved -> resolved``, terminal once resolved.

- ``deleted``: delete the allocation and its other conflicts, then mark
  this one resolved
- ``moved``: move the allocation to ``new_date`` (required), then mark resolved
- ``ignored``: mark resolved only

Every failure is returned as an ``ActionResult`` carrying a stable code;
nothing is mutated before all input checks have passed.
"""

from crewplan.domain.entities import AbsenceConflict, ConflictResolution
from crewplan.domain.errors import DomainError, ErrorCode
from crewplan.domain.results import ActionResult
from crewplan.engine.absence_conflict_service import parse_resolution
from crewplan.engine.schemas import ResolveConflictInput
from crewplan.platform.logging import get_logger
from crewplan.storage.repositories.base import (
    AbsenceConflictRepository,
    AllocationRepository,
)

logger = get_logger(__name__)


class ResolveConflictUseCase:
    """Applies a resolution to the conflicting allocation and marks the conflict."""

    def __init__(
        self,
        conflict_repo: AbsenceConflictRepository,
        allocation_repo: AllocationRepository,
    ):
        self.conflict_repo = conflict_repo
        self.allocation_repo = allocation_repo

    async def execute(self, request: ResolveConflictInput) -> ActionResult[AbsenceConflict]:
        try:
            resolution = parse_resolution(request.resolution)

            conflict = await self.conflict_repo.find_by_id(request.conflict_id)
            if not conflict or (request.tenant_id and conflict.tenant_id != request.tenant_id):
                return ActionResult.fail(
                    ErrorCode.CONFLICT_NOT_FOUND,
                    f"Conflict not found: {request.conflict_id}",
                )
            if conflict.is_resolved:
                return ActionResult.fail(
                    ErrorCode.CONFLICT_ALREADY_RESOLVED,
                    f"Conflict {request.conflict_id} has already been resolved",
                )
            if resolution == ConflictResolution.MOVED and request.new_date is None:
                return ActionResult.fail(
                    ErrorCode.NEW_DATE_REQUIRED,
                    "A new date is required to move the allocation",
                )

            if resolution == ConflictResolution.DELETED:
                await self.allocation_repo.delete(conflict.allocation_id)
                # Sibling conflicts on the removed allocation go with it
                await self.conflict_repo.delete_by_allocation_id(
                    conflict.allocation_id, keep_conflict_id=conflict.id
                )
            elif resolution == ConflictResolution.MOVED:
                await self.allocation_repo.move_to_date(conflict.allocation_id, request.new_date)

            resolved = await self.conflict_repo.resolve(
                conflict.id, resolution, request.resolved_by
            )
        except DomainError as e:
            return ActionResult.fail(e.code, e.message)
        except Exception as e:
            logger.exception(
                "Failed to resolve conflict",
                conflict_id=request.conflict_id,
                resolution=str(request.resolution),
            )
            return ActionResult.fail(ErrorCode.RESOLVE_CONFLICT_FAILED, str(e))

        logger.info(
            "Conflict resolved",
            conflict_id=resolved.id,
            allocation_id=resolved.allocation_id,
            resolution=resolution.value,
            resolved_by=request.resolved_by,
        )
        return ActionResult.ok(resolved)
