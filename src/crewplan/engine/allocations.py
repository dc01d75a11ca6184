"""
Allocation Workflows - Create, move and delete allocations.

The planner's intent is never blocked by scheduling facts. Absence overlaps,
multiple same-day allocations and dates outside the phase window all commit
and come back as warnings:

- ``absence_conflict``: the employee is absent on the allocation's date
- ``multi_allocation``: the employee now has more than one allocation that
  day; daily capacity is redistributed across all of them
- ``phase_extended`` / ``phase_preponed``: the phase window was widened to
  contain the allocation's date

Validation failures (missing employee/resource, inactive employee, unknown
phase) raise ``DomainError`` subclasses. Entities of another tenant are
reported as not found.
"""

from datetime import date
from typing import Dict, List, Optional, Tuple

from crewplan.domain.calculator import AllocationCalculator
from crewplan.domain.entities import (
    Allocation,
    Employee,
    ProjectPhase,
    validate_user_or_resource,
)
from crewplan.domain.errors import ErrorCode, NotFoundError, ValidationError
from crewplan.engine.absence_conflict_checker import AbsenceConflictChecker
from crewplan.engine.absence_conflict_service import AbsenceConflictService
from crewplan.engine.schemas import (
    AbsenceConflictWarning,
    AllocationResult,
    AllocationWarning,
    CreateAllocationRequest,
    DeleteAllocationRequest,
    DeleteAllocationResult,
    MoveAllocationRequest,
    MultiAllocationWarning,
    PhaseExtendedWarning,
    PhasePreponedWarning,
)
from crewplan.platform.logging import get_logger
from crewplan.storage.repositories.base import (
    AllocationRepository,
    ProjectPhaseRepository,
    ResourceRepository,
    UserRepository,
)

logger = get_logger(__name__)


class _AllocationWorkflow:
    """Lookups and side effects shared by the allocation use cases."""

    def __init__(self, allocation_repo: AllocationRepository, user_repo: UserRepository):
        self.allocation_repo = allocation_repo
        self.user_repo = user_repo

    async def _get_allocation(self, tenant_id: str, allocation_id: str) -> Allocation:
        allocation = await self.allocation_repo.find_by_id(allocation_id)
        if not allocation or allocation.tenant_id != tenant_id:
            raise NotFoundError("Allocation", allocation_id, code=ErrorCode.ALLOCATION_NOT_FOUND)
        return allocation

    async def _get_employee(self, tenant_id: str, user_id: str) -> Employee:
        employee = await self.user_repo.find_by_id(user_id)
        if not employee or employee.tenant_id != tenant_id:
            raise NotFoundError("Employee", user_id, code=ErrorCode.USER_NOT_FOUND)
        return employee

    async def _redistribute_day(
        self, employee: Employee, day: date
    ) -> Tuple[List[Allocation], Dict[str, float]]:
        """
        Split the employee's daily capacity across their allocations on ``day``.

        Returns:
            The day's allocations and the new hours of every allocation
            whose planned hours changed.
        """
        same_day = await self.allocation_repo.find_by_user_and_date(employee.id, day)
        hours = AllocationCalculator.redistribute(employee.daily_hours, same_day)
        changed = {a.id: hours[a.id] for a in same_day if a.planned_hours != hours[a.id]}
        if changed:
            await self.allocation_repo.update_many_planned_hours(changed)
        return same_day, changed


class _PlacementWorkflow(_AllocationWorkflow):
    """Adds the phase-window and absence checks of create and move."""

    def __init__(
        self,
        allocation_repo: AllocationRepository,
        user_repo: UserRepository,
        phase_repo: ProjectPhaseRepository,
        absence_checker: AbsenceConflictChecker,
    ):
        super().__init__(allocation_repo, user_repo)
        self.phase_repo = phase_repo
        self.absence_checker = absence_checker

    async def _get_phase(self, tenant_id: str, phase_id: str) -> ProjectPhase:
        phase = await self.phase_repo.find_by_id(phase_id)
        if not phase or phase.tenant_id != tenant_id:
            raise NotFoundError("Project phase", phase_id, code=ErrorCode.PHASE_NOT_FOUND)
        return phase

    async def _absence_warning(self, user_id: str, day: date) -> Optional[AbsenceConflictWarning]:
        absence = await self.absence_checker.get_conflicting_absence(user_id, day)
        if not absence:
            return None
        logger.warning(
            "Allocation overlaps absence",
            user_id=user_id,
            date=day.isoformat(),
            absence_id=absence.id,
            absence_type=absence.type.value,
        )
        return AbsenceConflictWarning(
            absence_id=absence.id,
            absence_type=absence.type,
            start_date=absence.start_date,
            end_date=absence.end_date,
        )

    async def _fit_phase_to_date(
        self, phase: ProjectPhase, day: date
    ) -> Tuple[Optional[AllocationWarning], Optional[ProjectPhase]]:
        """
        Widen the phase window to contain ``day``; bounds never shrink.

        Unset bounds are left unset.
        """
        if phase.end_date and day > phase.end_date:
            updated = await self.phase_repo.update_dates(phase.id, end_date=day)
            logger.info("Phase extended", phase_id=phase.id, new_end_date=day.isoformat())
            return PhaseExtendedWarning(phase_id=phase.id, new_end_date=day), updated

        if phase.start_date and day < phase.start_date:
            updated = await self.phase_repo.update_dates(phase.id, start_date=day)
            logger.info("Phase preponed", phase_id=phase.id, new_start_date=day.isoformat())
            return PhasePreponedWarning(phase_id=phase.id, new_start_date=day), updated

        return None, None


class CreateAllocationUseCase(_PlacementWorkflow):
    """Creates one allocation and reports every warning it triggers."""

    def __init__(
        self,
        allocation_repo: AllocationRepository,
        user_repo: UserRepository,
        phase_repo: ProjectPhaseRepository,
        resource_repo: ResourceRepository,
        absence_checker: AbsenceConflictChecker,
    ):
        super().__init__(allocation_repo, user_repo, phase_repo, absence_checker)
        self.resource_repo = resource_repo

    async def execute(self, request: CreateAllocationRequest) -> AllocationResult:
        validate_user_or_resource(request.user_id, request.resource_id)

        phase = await self._get_phase(request.tenant_id, request.project_phase_id)
        warnings: List[AllocationWarning] = []
        employee: Optional[Employee] = None

        if request.user_id:
            employee = await self._get_employee(request.tenant_id, request.user_id)
            if not employee.is_active:
                raise ValidationError(
                    "Inactive employees cannot be allocated",
                    code=ErrorCode.ALLOCATION_USER_INACTIVE,
                    details={"field": "user_id"},
                )
            absence_warning = await self._absence_warning(employee.id, request.date)
            if absence_warning:
                warnings.append(absence_warning)
        else:
            await self._validate_resource(request.tenant_id, request.resource_id)

        phase_warning, updated_phase = await self._fit_phase_to_date(phase, request.date)
        if phase_warning:
            warnings.append(phase_warning)

        allocation = await self.allocation_repo.save(
            Allocation(
                tenant_id=request.tenant_id,
                user_id=request.user_id,
                resource_id=request.resource_id,
                project_phase_id=phase.id,
                date=request.date,
                planned_hours=employee.daily_hours if employee else None,
                notes=request.notes,
            )
        )

        redistributed: Dict[str, float] = {}
        if employee:
            same_day, changed = await self._redistribute_day(employee, request.date)
            if len(same_day) > 1:
                warnings.append(MultiAllocationWarning(date=request.date, count=len(same_day)))
            if allocation.id in changed:
                allocation = allocation.model_copy(update={"planned_hours": changed[allocation.id]})
            redistributed = {k: v for k, v in changed.items() if k != allocation.id}

        logger.info(
            "Allocation created",
            allocation_id=allocation.id,
            tenant_id=allocation.tenant_id,
            user_id=allocation.user_id,
            resource_id=allocation.resource_id,
            date=allocation.date.isoformat(),
            warnings=[w.type for w in warnings],
        )
        return AllocationResult(
            allocation=allocation,
            warnings=warnings,
            updated_phase=updated_phase,
            redistributed_hours=redistributed,
        )

    async def _validate_resource(self, tenant_id: str, resource_id: str) -> None:
        resource = await self.resource_repo.find_by_id(resource_id)
        if not resource or resource.tenant_id != tenant_id:
            raise NotFoundError("Resource", resource_id, code=ErrorCode.RESOURCE_NOT_FOUND)
        if not resource.is_active:
            raise ValidationError(
                "Inactive resources cannot be allocated",
                code=ErrorCode.ALLOCATION_RESOURCE_INACTIVE,
                details={"field": "resource_id"},
            )


class MoveAllocationUseCase(_PlacementWorkflow):
    """
    Moves an allocation to another date, another phase, or both.

    Absence and phase-window checks run against the target date. A date
    change redistributes hours on both the old and the new day.
    """

    async def execute(self, request: MoveAllocationRequest) -> AllocationResult:
        if request.new_date is None and not request.new_project_phase_id:
            raise ValidationError(
                "A new date or a new phase is required",
                code=ErrorCode.MOVE_TARGET_REQUIRED,
                details={"field": "new_date/new_project_phase_id"},
            )

        allocation = await self._get_allocation(request.tenant_id, request.allocation_id)
        old_date = allocation.date
        target_date = request.new_date or old_date
        target_phase_id = request.new_project_phase_id or allocation.project_phase_id
        date_changed = target_date != old_date
        phase_changed = target_phase_id != allocation.project_phase_id

        phase = await self._get_phase(request.tenant_id, target_phase_id)
        warnings: List[AllocationWarning] = []

        if allocation.is_user_allocation and date_changed:
            absence_warning = await self._absence_warning(allocation.user_id, target_date)
            if absence_warning:
                warnings.append(absence_warning)

        updated_phase = None
        if date_changed or phase_changed:
            phase_warning, updated_phase = await self._fit_phase_to_date(phase, target_date)
            if phase_warning:
                warnings.append(phase_warning)

        moved = allocation
        if date_changed:
            moved = await self.allocation_repo.move_to_date(allocation.id, target_date)
        if phase_changed:
            moved = await self.allocation_repo.move_to_phase(allocation.id, target_phase_id)

        redistributed: Dict[str, float] = {}
        if allocation.is_user_allocation and date_changed:
            employee = await self.user_repo.find_by_id(allocation.user_id)
            if employee:
                _, changed_old = await self._redistribute_day(employee, old_date)
                same_day, changed_new = await self._redistribute_day(employee, target_date)
                if len(same_day) > 1:
                    warnings.append(MultiAllocationWarning(date=target_date, count=len(same_day)))
                if moved.id in changed_new:
                    moved = moved.model_copy(update={"planned_hours": changed_new[moved.id]})
                redistributed = {
                    k: v for k, v in {**changed_old, **changed_new}.items() if k != moved.id
                }

        logger.info(
            "Allocation moved",
            allocation_id=moved.id,
            from_date=old_date.isoformat(),
            to_date=target_date.isoformat(),
            phase_id=target_phase_id,
            warnings=[w.type for w in warnings],
        )
        return AllocationResult(
            allocation=moved,
            warnings=warnings,
            updated_phase=updated_phase,
            redistributed_hours=redistributed,
        )


class DeleteAllocationUseCase(_AllocationWorkflow):
    """
    Deletes an allocation.

    Allocations carrying a note need explicit confirmation. The allocation's
    conflict records are removed first; the employee's remaining allocations
    that day are redistributed afterwards.
    """

    def __init__(
        self,
        allocation_repo: AllocationRepository,
        user_repo: UserRepository,
        conflict_service: AbsenceConflictService,
    ):
        super().__init__(allocation_repo, user_repo)
        self.conflict_service = conflict_service

    async def execute(self, request: DeleteAllocationRequest) -> DeleteAllocationResult:
        allocation = await self._get_allocation(request.tenant_id, request.allocation_id)

        if allocation.notes and not request.confirmed:
            raise ValidationError(
                "Deleting an allocation with notes requires confirmation",
                code=ErrorCode.DELETE_CONFIRMATION_REQUIRED,
                details={"field": "confirmed", "reason": "allocation has notes"},
            )

        await self.conflict_service.remove_conflicts_for_allocation(allocation.id)
        await self.allocation_repo.delete(allocation.id)

        redistributed: Dict[str, float] = {}
        if allocation.user_id:
            employee = await self.user_repo.find_by_id(allocation.user_id)
            if employee:
                _, redistributed = await self._redistribute_day(employee, allocation.date)

        logger.info(
            "Allocation deleted",
            allocation_id=allocation.id,
            tenant_id=allocation.tenant_id,
            redistributed=len(redistributed),
        )
        return DeleteAllocationResult(
            deleted_id=allocation.id,
            redistributed_hours=redistributed,
        )
