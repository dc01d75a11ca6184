"""
Unit tests for ResolveConflictUseCase.
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock

from crewplan.domain.entities import ConflictResolution
from crewplan.domain.errors import ErrorCode, NotFoundError
from crewplan.engine.resolve_conflict import ResolveConflictUseCase
from crewplan.engine.schemas import ResolveConflictInput
from crewplan.storage.repositories.base import (
    AbsenceConflictRepository,
    AllocationRepository,
)

from conftest import TENANT_ID, make_allocation, make_conflict


@pytest.fixture
def conflict_repo():
    repo = AsyncMock(spec=AbsenceConflictRepository)
    repo.find_by_id.return_value = make_conflict()
    repo.resolve.side_effect = lambda conflict_id, resolution, resolved_by: make_conflict(
        id=conflict_id, resolved=True
    )
    return repo


@pytest.fixture
def allocation_repo():
    return AsyncMock(spec=AllocationRepository)


@pytest.fixture
def use_case(conflict_repo, allocation_repo):
    return ResolveConflictUseCase(conflict_repo, allocation_repo)


def resolve_input(resolution, **overrides) -> ResolveConflictInput:
    values = {
        "conflict_id": "c1",
        "tenant_id": TENANT_ID,
        "resolution": resolution,
        "resolved_by": "planner-1",
    }
    values.update(overrides)
    return ResolveConflictInput(**values)


@pytest.mark.asyncio
async def test_ignored_only_marks_conflict(use_case, conflict_repo, allocation_repo):
    result = await use_case.execute(resolve_input("ignored"))

    assert result.success
    assert result.data.is_resolved
    conflict_repo.resolve.assert_awaited_once_with("c1", ConflictResolution.IGNORED, "planner-1")
    allocation_repo.delete.assert_not_awaited()
    allocation_repo.move_to_date.assert_not_awaited()


@pytest.mark.asyncio
async def test_deleted_removes_allocation(use_case, conflict_repo, allocation_repo):
    result = await use_case.execute(resolve_input("deleted"))

    assert result.success
    allocation_repo.delete.assert_awaited_once_with("a1")
    conflict_repo.delete_by_allocation_id.assert_awaited_once_with("a1", keep_conflict_id="c1")
    conflict_repo.resolve.assert_awaited_once_with("c1", ConflictResolution.DELETED, "planner-1")


@pytest.mark.asyncio
async def test_moved_relocates_allocation(use_case, conflict_repo, allocation_repo):
    allocation_repo.move_to_date.return_value = make_allocation(day=date(2026, 2, 12))

    result = await use_case.execute(resolve_input("moved", new_date=date(2026, 2, 12)))

    assert result.success
    allocation_repo.move_to_date.assert_awaited_once_with("a1", date(2026, 2, 12))
    conflict_repo.delete_by_allocation_id.assert_not_awaited()
    conflict_repo.resolve.assert_awaited_once_with("c1", ConflictResolution.MOVED, "planner-1")


@pytest.mark.asyncio
async def test_moved_without_date_mutates_nothing(use_case, conflict_repo, allocation_repo):
    result = await use_case.execute(resolve_input("moved"))

    assert not result.success
    assert result.error.code == ErrorCode.NEW_DATE_REQUIRED.value
    allocation_repo.move_to_date.assert_not_awaited()
    conflict_repo.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_already_resolved(use_case, conflict_repo, allocation_repo):
    conflict_repo.find_by_id.return_value = make_conflict(resolved=True)

    result = await use_case.execute(resolve_input("deleted"))

    assert result.error.code == ErrorCode.CONFLICT_ALREADY_RESOLVED.value
    allocation_repo.delete.assert_not_awaited()
    conflict_repo.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_invalid_resolution(use_case, conflict_repo):
    result = await use_case.execute(resolve_input("postponed"))

    assert result.error.code == ErrorCode.INVALID_RESOLUTION.value
    conflict_repo.find_by_id.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize("found", [None, make_conflict(tenant_id="other-tenant")])
async def test_not_found_or_other_tenant(use_case, conflict_repo, found):
    conflict_repo.find_by_id.return_value = found

    result = await use_case.execute(resolve_input("ignored"))

    assert result.error.code == ErrorCode.CONFLICT_NOT_FOUND.value
    conflict_repo.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_missing_allocation_reported_as_domain_code(use_case, allocation_repo, conflict_repo):
    allocation_repo.delete.side_effect = NotFoundError(
        "Allocation", "a1", code=ErrorCode.ALLOCATION_NOT_FOUND
    )

    result = await use_case.execute(resolve_input("deleted"))

    assert result.error.code == ErrorCode.ALLOCATION_NOT_FOUND.value
    conflict_repo.resolve.assert_not_awaited()


@pytest.mark.asyncio
async def test_unexpected_failure_is_reported(use_case, conflict_repo):
    conflict_repo.resolve.side_effect = RuntimeError("connection reset")

    result = await use_case.execute(resolve_input("ignored"))

    assert not result.success
    assert result.error.code == ErrorCode.RESOLVE_CONFLICT_FAILED.value
    assert result.error.message == "connection reset"
    assert result.to_dict()["error"]["code"] == "RESOLVE_CONFLICT_FAILED"
