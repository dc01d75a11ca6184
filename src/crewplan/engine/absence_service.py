"""
Absence Service - Absence writes that keep conflict records in step.

Conflict detection runs synchronously inside the write, right after the
absence itself is persisted.
"""

from datetime import date
from typing import List, Optional, Tuple

from crewplan.domain.entities import Absence, AbsenceConflict, AbsenceType, utcnow
from crewplan.domain.errors import ErrorCode, NotFoundError
from crewplan.engine.absence_conflict_service import AbsenceConflictService
from crewplan.platform.logging import get_logger
from crewplan.storage.repositories.base import AbsenceRepository, UserRepository

logger = get_logger(__name__)


class AbsenceService:

    def __init__(
        self,
        absence_repo: AbsenceRepository,
        user_repo: UserRepository,
        conflict_service: AbsenceConflictService,
    ):
        self.absence_repo = absence_repo
        self.user_repo = user_repo
        self.conflict_service = conflict_service

    async def record_absence(
        self,
        tenant_id: str,
        user_id: str,
        type: AbsenceType | str,
        start_date: date,
        end_date: date,
        notes: Optional[str] = None,
    ) -> Tuple[Absence, List[AbsenceConflict]]:
        """Persist a new absence and record the conflicts it creates."""
        await self._check_employee(tenant_id, user_id)
        absence = await self.absence_repo.save(
            Absence(
                tenant_id=tenant_id,
                user_id=user_id,
                type=type,
                start_date=start_date,
                end_date=end_date,
                notes=notes,
            )
        )
        conflicts = await self.conflict_service.detect_and_record_conflicts(absence)
        logger.info(
            "Absence recorded",
            absence_id=absence.id,
            user_id=user_id,
            days=absence.duration_days,
            conflicts=len(conflicts),
        )
        return absence, conflicts

    async def change_absence(
        self,
        tenant_id: str,
        absence_id: str,
        *,
        user_id: Optional[str] = None,
        type: AbsenceType | str | None = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        notes: Optional[str] = None,
    ) -> Tuple[Absence, List[AbsenceConflict]]:
        """
        Apply the given changes and re-derive conflicts when the employee or
        the date range moved. Unset arguments keep their current value.
        """
        old = await self._get_absence(tenant_id, absence_id)
        if user_id and user_id != old.user_id:
            await self._check_employee(tenant_id, user_id)

        new = Absence(
            **{
                **old.model_dump(),
                "user_id": user_id or old.user_id,
                "type": type or old.type,
                "start_date": start_date or old.start_date,
                "end_date": end_date or old.end_date,
                "notes": notes if notes is not None else old.notes,
                "updated_at": utcnow(),
            }
        )
        saved = await self.absence_repo.update(new)
        conflicts = await self.conflict_service.update_conflicts_for_absence(old, saved)
        logger.info(
            "Absence changed",
            absence_id=absence_id,
            conflicts=len(conflicts),
        )
        return saved, conflicts

    async def remove_absence(self, tenant_id: str, absence_id: str) -> None:
        absence = await self._get_absence(tenant_id, absence_id)
        await self.conflict_service.remove_conflicts_for_absence(absence.id)
        await self.absence_repo.delete(absence.id)
        logger.info("Absence removed", absence_id=absence_id)

    async def _get_absence(self, tenant_id: str, absence_id: str) -> Absence:
        absence = await self.absence_repo.find_by_id(absence_id)
        if not absence or absence.tenant_id != tenant_id:
            raise NotFoundError("Absence", absence_id, code=ErrorCode.ABSENCE_NOT_FOUND)
        return absence

    async def _check_employee(self, tenant_id: str, user_id: str) -> None:
        employee = await self.user_repo.find_by_id(user_id)
        if not employee or employee.tenant_id != tenant_id:
            raise NotFoundError("Employee", user_id, code=ErrorCode.USER_NOT_FOUND)
