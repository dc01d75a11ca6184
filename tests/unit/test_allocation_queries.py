import pytest
from datetime import date
from unittest.mock import AsyncMock

from crewplan.domain.errors import ValidationError
from crewplan.engine.absence_conflict_checker import AbsenceConflictChecker
from crewplan.engine.allocation_queries import AllocationQueryService
from crewplan.storage.repositories.base import AbsenceRepository, AllocationRepository

from conftest import TENANT_ID, make_absence, make_allocation


@pytest.fixture
def allocation_repo():
    return AsyncMock(spec=AllocationRepository)


@pytest.fixture
def absence_repo():
    return AsyncMock(spec=AbsenceRepository)


@pytest.fixture
def service(allocation_repo, absence_repo):
    return AllocationQueryService(allocation_repo, AbsenceConflictChecker(absence_repo))


@pytest.mark.asyncio
async def test_flags_only_covered_allocations(service, allocation_repo, absence_repo):
    allocation_repo.find_by_tenant_and_date_range.return_value = [
        make_allocation(id="a1", day=date(2026, 2, 6)),
        make_allocation(id="a2", day=date(2026, 2, 9)),
        make_allocation(id="r1", user_id=None, resource_id="r1", day=date(2026, 2, 6)),
    ]
    absence_repo.find_by_user_and_date_range.return_value = [make_absence()]

    results = await service.get_allocations_with_warnings(TENANT_ID, date(2026, 2, 2), date(2026, 2, 13))

    flags = {r.allocation.id: (r.has_absence_warning, r.absence_id) for r in results}
    assert flags == {"a1": (True, "abs1"), "a2": (False, None), "r1": (False, None)}
    assert results[0].absence_type.value == "vacation"
    absence_repo.find_by_user_and_date_range.assert_awaited_once()


@pytest.mark.asyncio
async def test_user_filter_forwarded(service, allocation_repo):
    allocation_repo.find_by_tenant_and_date_range.return_value = []

    assert await service.get_allocations_with_warnings(
        TENANT_ID, date(2026, 2, 2), date(2026, 2, 6), user_id="u1"
    ) == []
    allocation_repo.find_by_tenant_and_date_range.assert_awaited_once_with(
        TENANT_ID, date(2026, 2, 2), date(2026, 2, 6), user_id="u1"
    )


@pytest.mark.asyncio
async def test_inverted_range(service, allocation_repo):
    with pytest.raises(ValidationError):
        await service.get_allocations_with_warnings(TENANT_ID, date(2026, 2, 6), date(2026, 2, 2))
    allocation_repo.find_by_tenant_and_date_range.assert_not_awaited()
