"""
Availability Analyzer - Tenant-wide free capacity and overload.

Pure aggregation over one tenant and one date window. All data is loaded in
a fixed number of batched queries (active employees, then the window's
allocations and absences concurrently) and grouped in memory, so the cost
does not grow with the number of employees.

Working days are Monday to Friday, unconditionally. Every employee is
measured against the nominal 8 hour day regardless of contract hours.
"""

import asyncio
import math
from collections import defaultdict
from datetime import date, timedelta
from typing import Dict, List, Set, Tuple

from pydantic import BaseModel, Field

from crewplan.domain.entities import Absence, Allocation, Employee
from crewplan.domain.errors import ErrorCode, ValidationError
from crewplan.platform.logging import get_logger
from crewplan.storage.repositories.base import (
    AbsenceRepository,
    AllocationRepository,
    UserRepository,
)

logger = get_logger(__name__)

HOURS_PER_DAY = 8


class AvailableUser(BaseModel):
    id: str
    name: str
    email: str
    available_days: List[date] = Field(default_factory=list)
    available_hours: int
    current_utilization: int


class OverloadedUser(BaseModel):
    id: str
    name: str
    utilization_percent: int


class AvailabilityContext(BaseModel):
    available_users: List[AvailableUser] = Field(default_factory=list)
    overloaded_users: List[OverloadedUser] = Field(default_factory=list)


class TenantAvailabilityContext(AvailabilityContext):
    allocations_by_user: Dict[str, List[Allocation]] = Field(default_factory=dict)
    absences_by_user: Dict[str, List[Absence]] = Field(default_factory=dict)
    users: List[Employee] = Field(default_factory=list)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def working_days(start_date: date, end_date: date) -> List[date]:
    """Monday-to-Friday days of the inclusive range."""
    days = []
    day = start_date
    while day <= end_date:
        if day.weekday() < 5:
            days.append(day)
        day += timedelta(days=1)
    return days


class AvailabilityAnalyzer:
    """
    Computes per-employee free hours and utilization for a tenant.

    ``get_tenant_availability_context`` is the canonical entry point; the
    other methods are narrower views over the same computation.
    """

    def __init__(
        self,
        user_repo: UserRepository,
        allocation_repo: AllocationRepository,
        absence_repo: AbsenceRepository,
    ):
        self.user_repo = user_repo
        self.allocation_repo = allocation_repo
        self.absence_repo = absence_repo

    async def get_tenant_availability_context(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        min_available_hours: float = HOURS_PER_DAY,
    ) -> TenantAvailabilityContext:
        """
        Availability, overload and the raw grouped data for a tenant window.

        Args:
            tenant_id: Tenant to analyze
            start_date: First day of the window (inclusive)
            end_date: Last day of the window (inclusive)
            min_available_hours: Free hours an employee needs to count as available

        Returns:
            Empty context when the tenant has no active employees or the
            window has no working days; no window queries are issued then.
        """
        if end_date < start_date:
            raise ValidationError(
                "End date must not be before start date",
                code=ErrorCode.VALIDATION_INVALID_RANGE,
                details={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
            )

        users = await self.user_repo.find_active_by_tenant(tenant_id)
        days = working_days(start_date, end_date)
        if not users or not days:
            return TenantAvailabilityContext()

        user_ids = [u.id for u in users]
        allocations, absences = await asyncio.gather(
            self.allocation_repo.find_by_tenant_and_date_range(tenant_id, start_date, end_date),
            self.absence_repo.find_by_users_and_date_range(user_ids, start_date, end_date),
        )
        logger.debug(
            "Loaded availability window",
            tenant_id=tenant_id,
            users=len(users),
            allocations=len(allocations),
            absences=len(absences),
        )

        active_ids = set(user_ids)
        allocations_by_user: Dict[str, List[Allocation]] = defaultdict(list)
        hours_by_user_day: Dict[str, Dict[date, float]] = defaultdict(lambda: defaultdict(float))
        for allocation in allocations:
            if allocation.user_id not in active_ids:
                continue
            allocations_by_user[allocation.user_id].append(allocation)
            hours_by_user_day[allocation.user_id][allocation.date] += allocation.planned_hours or 0.0

        absences_by_user: Dict[str, List[Absence]] = defaultdict(list)
        for absence in absences:
            absences_by_user[absence.user_id].append(absence)

        available: List[AvailableUser] = []
        overloaded: List[OverloadedUser] = []
        for user in users:
            absent_days = _absent_working_days(absences_by_user.get(user.id, []), start_date, end_date)
            summary, free_hours = _summarize(
                user, days, hours_by_user_day.get(user.id, {}), absent_days
            )

            # Threshold applies to the unrounded free hours
            if free_hours >= min_available_hours:
                available.append(summary)
            if summary.current_utilization > 100:
                overloaded.append(
                    OverloadedUser(
                        id=user.id,
                        name=user.full_name,
                        utilization_percent=summary.current_utilization,
                    )
                )

        available.sort(key=lambda u: u.available_hours, reverse=True)
        overloaded.sort(key=lambda u: u.utilization_percent, reverse=True)

        return TenantAvailabilityContext(
            available_users=available,
            overloaded_users=overloaded,
            allocations_by_user=dict(allocations_by_user),
            absences_by_user=dict(absences_by_user),
            users=users,
        )

    async def find_available_users(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        min_available_hours: float = HOURS_PER_DAY,
    ) -> List[AvailableUser]:
        context = await self.get_tenant_availability_context(
            tenant_id, start_date, end_date, min_available_hours
        )
        return context.available_users

    async def find_overloaded_users(
        self, tenant_id: str, start_date: date, end_date: date
    ) -> List[OverloadedUser]:
        context = await self.get_tenant_availability_context(tenant_id, start_date, end_date)
        return context.overloaded_users

    async def get_availability_context(
        self, tenant_id: str, start_date: date, end_date: date
    ) -> AvailabilityContext:
        context = await self.get_tenant_availability_context(tenant_id, start_date, end_date)
        return AvailabilityContext(
            available_users=context.available_users,
            overloaded_users=context.overloaded_users,
        )


def _absent_working_days(absences: List[Absence], start_date: date, end_date: date) -> Set[date]:
    days: Set[date] = set()
    for absence in absences:
        days.update(d for d in absence.covered_dates(start_date, end_date) if d.weekday() < 5)
    return days


def _summarize(
    user: Employee,
    days: List[date],
    hours_by_day: Dict[date, float],
    absent_days: Set[date],
) -> Tuple[AvailableUser, float]:
    free_total = 0.0
    allocated_total = 0.0
    free_days: List[date] = []

    for day in days:
        if day in absent_days:
            continue
        allocated = hours_by_day.get(day, 0.0)
        allocated_total += allocated
        free = max(0.0, HOURS_PER_DAY - allocated)
        if free > 0:
            free_total += free
            free_days.append(day)

    expected = len(days) * HOURS_PER_DAY
    summary = AvailableUser(
        id=user.id,
        name=user.full_name,
        email=user.email,
        available_days=free_days,
        available_hours=round_half_up(free_total),
        current_utilization=round_half_up(allocated_total / expected * 100),
    )
    return summary, free_total
