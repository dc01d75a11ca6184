"""
Row-to-entity mapping between ORM models and domain entities.
"""

from crewplan.domain.entities import (
    Absence,
    AbsenceConflict,
    AbsenceType,
    Allocation,
    ConflictResolution,
    Employee,
    ProjectPhase,
    Resource,
)
from crewplan.storage.models import (
    AbsenceConflictModel,
    AbsenceModel,
    AllocationModel,
    ProjectPhaseModel,
    ResourceModel,
    UserModel,
)


def employee_from_row(row: UserModel) -> Employee:
    return Employee(
        id=row.id,
        tenant_id=row.tenant_id,
        email=row.email,
        full_name=row.full_name,
        weekly_hours=row.weekly_hours if row.weekly_hours is not None else 0.0,
        is_active=bool(row.is_active),
    )


def employee_to_row(entity: Employee) -> UserModel:
    return UserModel(
        id=entity.id,
        tenant_id=entity.tenant_id,
        email=entity.email,
        full_name=entity.full_name,
        weekly_hours=entity.weekly_hours,
        is_active=entity.is_active,
    )


def resource_from_row(row: ResourceModel) -> Resource:
    return Resource(
        id=row.id,
        tenant_id=row.tenant_id,
        name=row.name,
        is_active=bool(row.is_active),
    )


def resource_to_row(entity: Resource) -> ResourceModel:
    return ResourceModel(
        id=entity.id,
        tenant_id=entity.tenant_id,
        name=entity.name,
        is_active=entity.is_active,
    )


def phase_from_row(row: ProjectPhaseModel) -> ProjectPhase:
    return ProjectPhase(
        id=row.id,
        tenant_id=row.tenant_id,
        project_id=row.project_id,
        name=row.name,
        start_date=row.start_date,
        end_date=row.end_date,
    )


def phase_to_row(entity: ProjectPhase) -> ProjectPhaseModel:
    return ProjectPhaseModel(
        id=entity.id,
        tenant_id=entity.tenant_id,
        project_id=entity.project_id,
        name=entity.name,
        start_date=entity.start_date,
        end_date=entity.end_date,
    )


def allocation_from_row(row: AllocationModel) -> Allocation:
    return Allocation(
        id=row.id,
        tenant_id=row.tenant_id,
        user_id=row.user_id,
        resource_id=row.resource_id,
        project_phase_id=row.project_phase_id,
        date=row.date,
        planned_hours=row.planned_hours,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def allocation_to_row(entity: Allocation) -> AllocationModel:
    return AllocationModel(
        id=entity.id,
        tenant_id=entity.tenant_id,
        user_id=entity.user_id,
        resource_id=entity.resource_id,
        project_phase_id=entity.project_phase_id,
        date=entity.date,
        planned_hours=entity.planned_hours,
        notes=entity.notes,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


def absence_from_row(row: AbsenceModel) -> Absence:
    return Absence(
        id=row.id,
        tenant_id=row.tenant_id,
        user_id=row.user_id,
        type=AbsenceType(row.type),
        start_date=row.start_date,
        end_date=row.end_date,
        notes=row.notes,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def absence_to_row(entity: Absence) -> AbsenceModel:
    return AbsenceModel(
        id=entity.id,
        tenant_id=entity.tenant_id,
        user_id=entity.user_id,
        type=entity.type.value,
        start_date=entity.start_date,
        end_date=entity.end_date,
        notes=entity.notes,
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )


def conflict_from_row(row: AbsenceConflictModel) -> AbsenceConflict:
    return AbsenceConflict(
        id=row.id,
        tenant_id=row.tenant_id,
        allocation_id=row.allocation_id,
        absence_id=row.absence_id,
        user_id=row.user_id,
        date=row.date,
        absence_type=AbsenceType(row.absence_type),
        resolved_at=row.resolved_at,
        resolved_by=row.resolved_by,
        resolution=ConflictResolution(row.resolution) if row.resolution else None,
        created_at=row.created_at,
    )
