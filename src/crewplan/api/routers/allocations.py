from datetime import date
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, status

from crewplan.api import schemas
from crewplan.api.dependencies import (
    get_allocation_query_service,
    get_create_allocation_use_case,
    get_delete_allocation_use_case,
    get_move_allocation_use_case,
)
from crewplan.engine.allocation_queries import AllocationQueryService
from crewplan.engine.allocations import (
    CreateAllocationUseCase,
    DeleteAllocationUseCase,
    MoveAllocationUseCase,
)
from crewplan.engine.schemas import (
    AllocationResult,
    AllocationWithWarning,
    CreateAllocationRequest,
    DeleteAllocationRequest,
    DeleteAllocationResult,
    MoveAllocationRequest,
)

router = APIRouter()


@router.get("/", response_model=List[AllocationWithWarning])
async def list_allocations(
    tenant_id: str,
    start_date: date,
    end_date: date,
    service: Annotated[AllocationQueryService, Depends(get_allocation_query_service)],
    user_id: Optional[str] = None,
):
    """
    List a tenant's allocations in a date window, flagging absence overlaps.
    """
    return await service.get_allocations_with_warnings(
        tenant_id, start_date, end_date, user_id=user_id
    )


@router.post("/", response_model=AllocationResult, status_code=status.HTTP_201_CREATED)
async def create_allocation(
    tenant_id: str,
    payload: schemas.AllocationCreate,
    use_case: Annotated[CreateAllocationUseCase, Depends(get_create_allocation_use_case)],
):
    """
    Create an allocation. Scheduling issues come back as warnings.
    """
    return await use_case.execute(
        CreateAllocationRequest(tenant_id=tenant_id, **payload.model_dump())
    )


@router.post("/{allocation_id}/move", response_model=AllocationResult)
async def move_allocation(
    tenant_id: str,
    allocation_id: str,
    payload: schemas.AllocationMove,
    use_case: Annotated[MoveAllocationUseCase, Depends(get_move_allocation_use_case)],
):
    """
    Move an allocation to a new date and/or phase.
    """
    return await use_case.execute(
        MoveAllocationRequest(
            tenant_id=tenant_id,
            allocation_id=allocation_id,
            new_date=payload.new_date,
            new_project_phase_id=payload.new_project_phase_id,
        )
    )


@router.delete("/{allocation_id}", response_model=DeleteAllocationResult)
async def delete_allocation(
    tenant_id: str,
    allocation_id: str,
    use_case: Annotated[DeleteAllocationUseCase, Depends(get_delete_allocation_use_case)],
    confirmed: bool = False,
):
    """
    Delete an allocation. Allocations with notes need ``confirmed=true``.
    """
    return await use_case.execute(
        DeleteAllocationRequest(
            tenant_id=tenant_id,
            allocation_id=allocation_id,
            confirmed=confirmed,
        )
    )
