from datetime import date
from typing import List, Optional, Sequence

from sqlalchemy import delete, select

from crewplan.domain.entities import Absence
from crewplan.domain.errors import ErrorCode, NotFoundError
from crewplan.storage.base import StorageAdapter
from crewplan.storage.mappers import absence_from_row, absence_to_row
from crewplan.storage.models import AbsenceModel
from .base import AbsenceRepository


class SqlAlchemyAbsenceRepository(AbsenceRepository):

    def __init__(self, db: StorageAdapter):
        self.db = db

    async def find_by_id(self, absence_id: str) -> Optional[Absence]:
        async with self.db.get_session() as session:
            row = await session.get(AbsenceModel, absence_id)
            return absence_from_row(row) if row else None

    async def find_by_user_and_date_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[Absence]:
        return await self.find_by_users_and_date_range([user_id], start_date, end_date)

    async def find_by_users_and_date_range(
        self, user_ids: Sequence[str], start_date: date, end_date: date
    ) -> List[Absence]:
        if not user_ids:
            return []
        # Overlap, not containment
        stmt = (
            select(AbsenceModel)
            .where(
                AbsenceModel.user_id.in_(list(user_ids)),
                AbsenceModel.start_date <= end_date,
                AbsenceModel.end_date >= start_date,
            )
            .order_by(AbsenceModel.start_date, AbsenceModel.created_at)
        )
        async with self.db.get_session() as session:
            rows = (await session.scalars(stmt)).all()
            return [absence_from_row(row) for row in rows]

    async def save(self, absence: Absence) -> Absence:
        async with self.db.get_session() as session:
            session.add(absence_to_row(absence))
            await session.flush()
        return absence

    async def update(self, absence: Absence) -> Absence:
        async with self.db.get_session() as session:
            row = await session.get(AbsenceModel, absence.id)
            if not row:
                raise NotFoundError("Absence", absence.id, code=ErrorCode.ABSENCE_NOT_FOUND)
            row.user_id = absence.user_id
            row.type = absence.type.value
            row.start_date = absence.start_date
            row.end_date = absence.end_date
            row.notes = absence.notes
            row.updated_at = absence.updated_at
            await session.flush()
            return absence_from_row(row)

    async def delete(self, absence_id: str) -> None:
        async with self.db.get_session() as session:
            result = await session.execute(
                delete(AbsenceModel).where(AbsenceModel.id == absence_id)
            )
            if result.rowcount == 0:
                raise NotFoundError("Absence", absence_id, code=ErrorCode.ABSENCE_NOT_FOUND)
