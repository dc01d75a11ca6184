"""
Pytest configuration and shared fixtures.
"""

import os
import sys
from datetime import date, datetime, timedelta, timezone

import pytest

sys.path.append(os.path.join(os.getcwd(), "src"))

from crewplan.domain.entities import (  # noqa: E402
    Absence,
    AbsenceConflict,
    AbsenceType,
    Allocation,
    Employee,
    ProjectPhase,
    Resource,
)

TENANT_ID = "tenant-1"


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment() -> None:
    """Set up test environment variables."""
    os.environ.setdefault("APP_ENV", "test")
    os.environ.setdefault("DEBUG", "true")
    os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def make_employee(id="u1", weekly_hours=40.0, is_active=True, tenant_id=TENANT_ID, **kwargs) -> Employee:
    return Employee(
        id=id,
        tenant_id=tenant_id,
        email=kwargs.pop("email", f"{id}@example.com"),
        full_name=kwargs.pop("full_name", f"Employee {id}"),
        weekly_hours=weekly_hours,
        is_active=is_active,
        **kwargs,
    )


def make_allocation(
    id="a1",
    user_id="u1",
    day=date(2026, 2, 6),
    planned_hours=8.0,
    created_offset=0,
    tenant_id=TENANT_ID,
    **kwargs,
) -> Allocation:
    created = datetime(2026, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=created_offset)
    return Allocation(
        id=id,
        tenant_id=tenant_id,
        user_id=user_id,
        resource_id=kwargs.pop("resource_id", None),
        project_phase_id=kwargs.pop("project_phase_id", "p1"),
        date=day,
        planned_hours=planned_hours,
        created_at=created,
        updated_at=created,
        **kwargs,
    )


def make_absence(
    id="abs1",
    user_id="u1",
    start=date(2026, 2, 5),
    end=date(2026, 2, 7),
    type=AbsenceType.VACATION,
    tenant_id=TENANT_ID,
) -> Absence:
    return Absence(
        id=id,
        tenant_id=tenant_id,
        user_id=user_id,
        type=type,
        start_date=start,
        end_date=end,
    )


def make_conflict(id="c1", resolved=False, **kwargs) -> AbsenceConflict:
    return AbsenceConflict(
        id=id,
        tenant_id=kwargs.pop("tenant_id", TENANT_ID),
        allocation_id=kwargs.pop("allocation_id", "a1"),
        absence_id=kwargs.pop("absence_id", "abs1"),
        user_id=kwargs.pop("user_id", "u1"),
        date=kwargs.pop("date", date(2026, 2, 6)),
        absence_type=kwargs.pop("absence_type", AbsenceType.VACATION),
        resolved_at=datetime(2026, 2, 1, tzinfo=timezone.utc) if resolved else None,
        resolved_by="planner-1" if resolved else None,
        resolution="ignored" if resolved else None,
        **kwargs,
    )


def make_phase(id="p1", start=date(2026, 2, 2), end=date(2026, 2, 27), tenant_id=TENANT_ID) -> ProjectPhase:
    return ProjectPhase(
        id=id,
        tenant_id=tenant_id,
        project_id="proj-1",
        name=f"Phase {id}",
        start_date=start,
        end_date=end,
    )


def make_resource(id="r1", is_active=True, tenant_id=TENANT_ID) -> Resource:
    return Resource(id=id, tenant_id=tenant_id, name=f"Excavator {id}", is_active=is_active)
