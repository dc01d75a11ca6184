from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, Query

from crewplan.api.dependencies import get_availability_analyzer
from crewplan.engine.availability_analyzer import (
    HOURS_PER_DAY,
    AvailabilityAnalyzer,
    AvailabilityContext,
)

router = APIRouter()


@router.get("/", response_model=AvailabilityContext)
async def get_availability(
    tenant_id: str,
    start_date: date,
    end_date: date,
    analyzer: Annotated[AvailabilityAnalyzer, Depends(get_availability_analyzer)],
    min_available_hours: Annotated[float, Query(ge=0)] = HOURS_PER_DAY,
):
    """
    Available and overloaded employees of a tenant for a date window.
    """
    context = await analyzer.get_tenant_availability_context(
        tenant_id, start_date, end_date, min_available_hours
    )
    return AvailabilityContext(
        available_users=context.available_users,
        overloaded_users=context.overloaded_users,
    )
