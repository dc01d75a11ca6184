from typing import Annotated, List

from fastapi import APIRouter, Depends

from crewplan.api import schemas
from crewplan.api.dependencies import get_conflict_service, get_resolve_conflict_use_case
from crewplan.api.errors import action_error_response
from crewplan.domain.entities import AbsenceConflict
from crewplan.engine.absence_conflict_service import AbsenceConflictService
from crewplan.engine.resolve_conflict import ResolveConflictUseCase
from crewplan.engine.schemas import ResolveConflictInput

router = APIRouter()


@router.get("/", response_model=List[AbsenceConflict])
async def list_unresolved_conflicts(
    tenant_id: str,
    service: Annotated[AbsenceConflictService, Depends(get_conflict_service)],
):
    """
    List unresolved conflicts, oldest date first.
    """
    return await service.list_unresolved(tenant_id)


@router.get("/count", response_model=schemas.ConflictCount)
async def count_unresolved_conflicts(
    tenant_id: str,
    service: Annotated[AbsenceConflictService, Depends(get_conflict_service)],
):
    return schemas.ConflictCount(count=await service.count_unresolved(tenant_id))


@router.post("/{conflict_id}/resolve")
async def resolve_conflict(
    tenant_id: str,
    conflict_id: str,
    payload: schemas.ConflictResolve,
    use_case: Annotated[ResolveConflictUseCase, Depends(get_resolve_conflict_use_case)],
):
    """
    Resolve a conflict by moving, deleting or ignoring its allocation.
    """
    result = await use_case.execute(
        ResolveConflictInput(
            tenant_id=tenant_id,
            conflict_id=conflict_id,
            resolution=payload.resolution,
            resolved_by=payload.resolved_by,
            new_date=payload.new_date,
        )
    )
    if not result.success:
        return action_error_response(result.error)
    return {"success": True, "data": result.data.model_dump(mode="json")}
