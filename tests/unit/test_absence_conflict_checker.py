"""
Unit tests for AbsenceConflictChecker against a mocked absence repository.
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock

from crewplan.engine.absence_conflict_checker import AbsenceConflictChecker
from crewplan.storage.repositories.base import AbsenceRepository

from conftest import make_absence, make_allocation


@pytest.fixture
def absence_repo():
    return AsyncMock(spec=AbsenceRepository)


@pytest.fixture
def checker(absence_repo):
    return AbsenceConflictChecker(absence_repo)


@pytest.mark.asyncio
async def test_has_conflict_inside_range(checker, absence_repo):
    absence_repo.find_by_user_and_date_range.return_value = [make_absence()]

    assert await checker.has_conflict("u1", date(2026, 2, 6)) is True
    absence_repo.find_by_user_and_date_range.assert_awaited_once_with(
        "u1", date(2026, 2, 6), date(2026, 2, 6)
    )


@pytest.mark.asyncio
async def test_no_conflict_when_repository_empty(checker, absence_repo):
    absence_repo.find_by_user_and_date_range.return_value = []

    assert await checker.has_conflict("u1", date(2026, 2, 6)) is False
    assert await checker.get_conflicting_absence("u1", date(2026, 2, 6)) is None


@pytest.mark.asyncio
async def test_absence_elsewhere_in_time_is_not_a_conflict(checker, absence_repo):
    # Repository returns an absence that does not actually cover the day
    absence_repo.find_by_user_and_date_range.return_value = [
        make_absence(start=date(2026, 3, 1), end=date(2026, 3, 3))
    ]

    assert await checker.get_conflicting_absence("u1", date(2026, 2, 6)) is None


@pytest.mark.asyncio
async def test_first_covering_absence_wins(checker, absence_repo):
    first = make_absence(id="abs-first", start=date(2026, 2, 1), end=date(2026, 2, 10))
    second = make_absence(id="abs-second", start=date(2026, 2, 6), end=date(2026, 2, 6))
    absence_repo.find_by_user_and_date_range.return_value = [first, second]

    result = await checker.get_conflicting_absence("u1", date(2026, 2, 6))

    assert result.id == "abs-first"


@pytest.mark.asyncio
async def test_batch_scenario_only_covered_allocation_conflicts(checker, absence_repo):
    absence = make_absence(id="abs1", start=date(2026, 2, 5), end=date(2026, 2, 7))
    absence_repo.find_by_user_and_date_range.return_value = [absence]
    a1 = make_allocation(id="a1", user_id="u1", day=date(2026, 2, 6))
    a2 = make_allocation(id="a2", user_id="u1", day=date(2026, 2, 8))

    conflicts = await checker.get_conflicts_for_allocations([a1, a2])

    assert list(conflicts.keys()) == ["a1"]
    assert conflicts["a1"].id == "abs1"
    absence_repo.find_by_user_and_date_range.assert_awaited_once_with(
        "u1", date(2026, 2, 6), date(2026, 2, 8)
    )


@pytest.mark.asyncio
async def test_batch_issues_one_lookup_per_employee(checker, absence_repo):
    absence_repo.find_by_user_and_date_range.return_value = []
    allocations = [
        make_allocation(id=f"u1-{i}", user_id="u1", day=date(2026, 2, 2 + i)) for i in range(5)
    ] + [
        make_allocation(id=f"u2-{i}", user_id="u2", day=date(2026, 2, 10 + i)) for i in range(3)
    ]

    await checker.get_conflicts_for_allocations(allocations)

    assert absence_repo.find_by_user_and_date_range.await_count == 2
    windows = {
        call.args[0]: (call.args[1], call.args[2])
        for call in absence_repo.find_by_user_and_date_range.await_args_list
    }
    assert windows == {
        "u1": (date(2026, 2, 2), date(2026, 2, 6)),
        "u2": (date(2026, 2, 10), date(2026, 2, 12)),
    }


@pytest.mark.asyncio
async def test_batch_skips_resource_allocations(checker, absence_repo):
    resource_allocation = make_allocation(id="res-a", user_id=None, resource_id="r1")

    conflicts = await checker.get_conflicts_for_allocations([resource_allocation])

    assert conflicts == {}
    absence_repo.find_by_user_and_date_range.assert_not_awaited()


@pytest.mark.asyncio
async def test_batch_empty_input(checker, absence_repo):
    assert await checker.get_conflicts_for_allocations([]) == {}
    absence_repo.find_by_user_and_date_range.assert_not_awaited()
