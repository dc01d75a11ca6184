from .absence_conflict_repository import SqlAlchemyAbsenceConflictRepository
from .absence_repository import SqlAlchemyAbsenceRepository
from .allocation_repository import SqlAlchemyAllocationRepository
from .project_phase_repository import SqlAlchemyProjectPhaseRepository
from .resource_repository import SqlAlchemyResourceRepository
from .user_repository import SqlAlchemyUserRepository

__all__ = [
    "SqlAlchemyAbsenceConflictRepository",
    "SqlAlchemyAbsenceRepository",
    "SqlAlchemyAllocationRepository",
    "SqlAlchemyProjectPhaseRepository",
    "SqlAlchemyResourceRepository",
    "SqlAlchemyUserRepository",
]
