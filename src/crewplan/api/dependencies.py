"""
Per-request construction of repositories and engine services.

The only long-lived object is the ``DatabaseAdapter`` opened by the
application lifespan and held on ``app.state``.
"""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from crewplan.engine.absence_conflict_checker import AbsenceConflictChecker
from crewplan.engine.absence_conflict_service import AbsenceConflictService
from crewplan.engine.absence_service import AbsenceService
from crewplan.engine.allocation_queries import AllocationQueryService
from crewplan.engine.allocations import (
    CreateAllocationUseCase,
    DeleteAllocationUseCase,
    MoveAllocationUseCase,
)
from crewplan.engine.availability_analyzer import AvailabilityAnalyzer
from crewplan.engine.resolve_conflict import ResolveConflictUseCase
from crewplan.storage.database import DatabaseAdapter
from crewplan.storage.repositories import (
    SqlAlchemyAbsenceConflictRepository,
    SqlAlchemyAbsenceRepository,
    SqlAlchemyAllocationRepository,
    SqlAlchemyProjectPhaseRepository,
    SqlAlchemyResourceRepository,
    SqlAlchemyUserRepository,
)


def get_database(request: Request) -> DatabaseAdapter:
    database = getattr(request.app.state, "database", None)
    if database is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database is not initialized",
        )
    return database


Database = Annotated[DatabaseAdapter, Depends(get_database)]


# --- Repositories ---

def get_allocation_repository(db: Database) -> SqlAlchemyAllocationRepository:
    return SqlAlchemyAllocationRepository(db)


def get_absence_repository(db: Database) -> SqlAlchemyAbsenceRepository:
    return SqlAlchemyAbsenceRepository(db)


def get_conflict_repository(db: Database) -> SqlAlchemyAbsenceConflictRepository:
    return SqlAlchemyAbsenceConflictRepository(db)


def get_user_repository(db: Database) -> SqlAlchemyUserRepository:
    return SqlAlchemyUserRepository(db)


def get_phase_repository(db: Database) -> SqlAlchemyProjectPhaseRepository:
    return SqlAlchemyProjectPhaseRepository(db)


def get_resource_repository(db: Database) -> SqlAlchemyResourceRepository:
    return SqlAlchemyResourceRepository(db)


AllocationRepo = Annotated[SqlAlchemyAllocationRepository, Depends(get_allocation_repository)]
AbsenceRepo = Annotated[SqlAlchemyAbsenceRepository, Depends(get_absence_repository)]
ConflictRepo = Annotated[SqlAlchemyAbsenceConflictRepository, Depends(get_conflict_repository)]
UserRepo = Annotated[SqlAlchemyUserRepository, Depends(get_user_repository)]


# --- Engine services ---

def get_absence_checker(absence_repo: AbsenceRepo) -> AbsenceConflictChecker:
    return AbsenceConflictChecker(absence_repo)


def get_conflict_service(
    conflict_repo: ConflictRepo, allocation_repo: AllocationRepo
) -> AbsenceConflictService:
    return AbsenceConflictService(conflict_repo, allocation_repo)


Checker = Annotated[AbsenceConflictChecker, Depends(get_absence_checker)]
ConflictService = Annotated[AbsenceConflictService, Depends(get_conflict_service)]


def get_create_allocation_use_case(
    allocation_repo: AllocationRepo,
    user_repo: UserRepo,
    phase_repo: Annotated[SqlAlchemyProjectPhaseRepository, Depends(get_phase_repository)],
    resource_repo: Annotated[SqlAlchemyResourceRepository, Depends(get_resource_repository)],
    checker: Checker,
) -> CreateAllocationUseCase:
    return CreateAllocationUseCase(allocation_repo, user_repo, phase_repo, resource_repo, checker)


def get_move_allocation_use_case(
    allocation_repo: AllocationRepo,
    user_repo: UserRepo,
    phase_repo: Annotated[SqlAlchemyProjectPhaseRepository, Depends(get_phase_repository)],
    checker: Checker,
) -> MoveAllocationUseCase:
    return MoveAllocationUseCase(allocation_repo, user_repo, phase_repo, checker)


def get_delete_allocation_use_case(
    allocation_repo: AllocationRepo,
    user_repo: UserRepo,
    conflict_service: ConflictService,
) -> DeleteAllocationUseCase:
    return DeleteAllocationUseCase(allocation_repo, user_repo, conflict_service)


def get_allocation_query_service(
    allocation_repo: AllocationRepo, checker: Checker
) -> AllocationQueryService:
    return AllocationQueryService(allocation_repo, checker)


def get_resolve_conflict_use_case(
    conflict_repo: ConflictRepo, allocation_repo: AllocationRepo
) -> ResolveConflictUseCase:
    return ResolveConflictUseCase(conflict_repo, allocation_repo)


def get_availability_analyzer(
    user_repo: UserRepo, allocation_repo: AllocationRepo, absence_repo: AbsenceRepo
) -> AvailabilityAnalyzer:
    return AvailabilityAnalyzer(user_repo, allocation_repo, absence_repo)


def get_absence_service(
    absence_repo: AbsenceRepo, user_repo: UserRepo, conflict_service: ConflictService
) -> AbsenceService:
    return AbsenceService(absence_repo, user_repo, conflict_service)
