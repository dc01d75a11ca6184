from typing import Annotated

from fastapi import APIRouter, Depends, status

from crewplan.api import schemas
from crewplan.api.dependencies import get_absence_service
from crewplan.engine.absence_service import AbsenceService

router = APIRouter()


@router.post("/", response_model=schemas.AbsenceWriteResponse, status_code=status.HTTP_201_CREATED)
async def record_absence(
    tenant_id: str,
    payload: schemas.AbsenceCreate,
    service: Annotated[AbsenceService, Depends(get_absence_service)],
):
    """
    Record an absence and the allocation conflicts it creates.
    """
    absence, conflicts = await service.record_absence(
        tenant_id,
        payload.user_id,
        payload.type,
        payload.start_date,
        payload.end_date,
        notes=payload.notes,
    )
    return schemas.AbsenceWriteResponse(absence=absence, conflicts=conflicts)


@router.patch("/{absence_id}", response_model=schemas.AbsenceWriteResponse)
async def change_absence(
    tenant_id: str,
    absence_id: str,
    payload: schemas.AbsenceUpdate,
    service: Annotated[AbsenceService, Depends(get_absence_service)],
):
    """
    Change an absence. Conflicts are re-derived when the employee or dates change.
    """
    absence, conflicts = await service.change_absence(
        tenant_id, absence_id, **payload.model_dump(exclude_unset=True)
    )
    return schemas.AbsenceWriteResponse(absence=absence, conflicts=conflicts)


@router.delete("/{absence_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_absence(
    tenant_id: str,
    absence_id: str,
    service: Annotated[AbsenceService, Depends(get_absence_service)],
):
    """
    Remove an absence together with its conflict records.
    """
    await service.remove_absence(tenant_id, absence_id)
    return None
