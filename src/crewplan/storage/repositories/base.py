"""
Repository contracts the engine depends on.

Every method is an awaited I/O operation returning domain entities.
"No data" is an empty list or ``None``, never an exception.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Dict, List, Optional, Sequence

from crewplan.domain.entities import (
    Absence,
    AbsenceConflict,
    Allocation,
    ConflictResolution,
    Employee,
    NewAbsenceConflict,
    ProjectPhase,
    Resource,
)


class AllocationRepository(ABC):

    @abstractmethod
    async def find_by_id(self, allocation_id: str) -> Optional[Allocation]:
        pass

    @abstractmethod
    async def find_by_user_and_date(self, user_id: str, day: date) -> List[Allocation]:
        pass

    @abstractmethod
    async def find_by_user_and_date_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[Allocation]:
        pass

    @abstractmethod
    async def find_by_tenant_and_date_range(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        user_id: Optional[str] = None,
    ) -> List[Allocation]:
        pass

    @abstractmethod
    async def save(self, allocation: Allocation) -> Allocation:
        pass

    @abstractmethod
    async def update_many_planned_hours(self, hours_by_id: Dict[str, float]) -> None:
        pass

    @abstractmethod
    async def delete(self, allocation_id: str) -> None:
        pass

    @abstractmethod
    async def move_to_date(self, allocation_id: str, new_date: date) -> Allocation:
        pass

    @abstractmethod
    async def move_to_phase(self, allocation_id: str, new_phase_id: str) -> Allocation:
        pass


class AbsenceRepository(ABC):

    @abstractmethod
    async def find_by_id(self, absence_id: str) -> Optional[Absence]:
        pass

    @abstractmethod
    async def find_by_user_and_date_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[Absence]:
        """Absences of one employee overlapping ``[start_date, end_date]``."""
        pass

    @abstractmethod
    async def find_by_users_and_date_range(
        self, user_ids: Sequence[str], start_date: date, end_date: date
    ) -> List[Absence]:
        """Absences of any of ``user_ids`` overlapping the window, in one query."""
        pass

    @abstractmethod
    async def save(self, absence: Absence) -> Absence:
        pass

    @abstractmethod
    async def update(self, absence: Absence) -> Absence:
        pass

    @abstractmethod
    async def delete(self, absence_id: str) -> None:
        pass


class AbsenceConflictRepository(ABC):

    @abstractmethod
    async def find_by_id(self, conflict_id: str) -> Optional[AbsenceConflict]:
        pass

    @abstractmethod
    async def find_by_allocation_and_absence(
        self, allocation_id: str, absence_id: str
    ) -> Optional[AbsenceConflict]:
        pass

    @abstractmethod
    async def find_unresolved_by_tenant(self, tenant_id: str) -> List[AbsenceConflict]:
        pass

    @abstractmethod
    async def count_unresolved_by_tenant(self, tenant_id: str) -> int:
        pass

    @abstractmethod
    async def save_many(self, conflicts: Sequence[NewAbsenceConflict]) -> List[AbsenceConflict]:
        """Insert in one batch; returns only the rows actually created."""
        pass

    @abstractmethod
    async def resolve(
        self, conflict_id: str, resolution: ConflictResolution, resolved_by: str
    ) -> AbsenceConflict:
        pass

    @abstractmethod
    async def delete_by_absence_id(self, absence_id: str) -> None:
        pass

    @abstractmethod
    async def delete_by_allocation_id(
        self, allocation_id: str, keep_conflict_id: Optional[str] = None
    ) -> None:
        pass


class UserRepository(ABC):

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[Employee]:
        pass

    @abstractmethod
    async def find_active_by_tenant(self, tenant_id: str) -> List[Employee]:
        """Active employees only."""
        pass


class ProjectPhaseRepository(ABC):

    @abstractmethod
    async def find_by_id(self, phase_id: str) -> Optional[ProjectPhase]:
        pass

    @abstractmethod
    async def update_dates(
        self,
        phase_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ProjectPhase:
        """Set whichever bounds are given; leaves the others untouched."""
        pass


class ResourceRepository(ABC):

    @abstractmethod
    async def find_by_id(self, resource_id: str) -> Optional[Resource]:
        pass
