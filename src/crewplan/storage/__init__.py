"""CrewPlan Storage Layer - async SQLAlchemy adapter, ORM models and repositories."""

from .base import StorageAdapter
from .database import DatabaseAdapter, DatabaseConfig
from .models import (
    AbsenceConflictModel,
    AbsenceModel,
    AllocationModel,
    Base,
    ProjectPhaseModel,
    ResourceModel,
    UserModel,
)

__all__ = [
    "StorageAdapter",
    "DatabaseAdapter",
    "DatabaseConfig",
    "Base",
    "UserModel",
    "ResourceModel",
    "ProjectPhaseModel",
    "AllocationModel",
    "AbsenceModel",
    "AbsenceConflictModel",
]
