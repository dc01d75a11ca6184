from datetime import date
from typing import Optional

from crewplan.domain.entities import ProjectPhase
from crewplan.domain.errors import ErrorCode, NotFoundError
from crewplan.storage.base import StorageAdapter
from crewplan.storage.mappers import phase_from_row, phase_to_row
from crewplan.storage.models import ProjectPhaseModel
from .base import ProjectPhaseRepository


class SqlAlchemyProjectPhaseRepository(ProjectPhaseRepository):
    """Repository for project phases."""

    def __init__(self, db: StorageAdapter):
        self.db = db

    async def find_by_id(self, phase_id: str) -> Optional[ProjectPhase]:
        async with self.db.get_session() as session:
            row = await session.get(ProjectPhaseModel, phase_id)
            return phase_from_row(row) if row else None

    async def update_dates(
        self,
        phase_id: str,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> ProjectPhase:
        async with self.db.get_session() as session:
            row = await session.get(ProjectPhaseModel, phase_id)
            if not row:
                raise NotFoundError("Project phase", phase_id, code=ErrorCode.PHASE_NOT_FOUND)
            if start_date is not None:
                row.start_date = start_date
            if end_date is not None:
                row.end_date = end_date
            await session.flush()
            return phase_from_row(row)

    async def save(self, phase: ProjectPhase) -> ProjectPhase:
        async with self.db.get_session() as session:
            session.add(phase_to_row(phase))
            await session.flush()
        return phase
