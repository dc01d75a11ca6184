"""
Absence conflict persistence.

Batch inserts lean on the ``(allocation_id, absence_id)`` unique constraint:
rows that already exist are skipped by the database, and only the rows this
call actually created are read back.
"""

from datetime import datetime, timezone
from typing import List, Optional, Sequence
import logging

from sqlalchemy import delete, func, insert, select, update
from sqlalchemy.dialects import postgresql, sqlite

from crewplan.domain.entities import (
    AbsenceConflict,
    ConflictResolution,
    NewAbsenceConflict,
    generate_id,
)
from crewplan.domain.errors import ConflictAlreadyResolvedError, ErrorCode, NotFoundError
from crewplan.storage.base import StorageAdapter
from crewplan.storage.mappers import conflict_from_row
from crewplan.storage.models import AbsenceConflictModel
from .base import AbsenceConflictRepository

logger = logging.getLogger(__name__)

_UNIQUE_COLUMNS = ["allocation_id", "absence_id"]


class SqlAlchemyAbsenceConflictRepository(AbsenceConflictRepository):

    def __init__(self, db: StorageAdapter):
        self.db = db

    async def find_by_id(self, conflict_id: str) -> Optional[AbsenceConflict]:
        async with self.db.get_session() as session:
            row = await session.get(AbsenceConflictModel, conflict_id)
            return conflict_from_row(row) if row else None

    async def find_by_allocation_and_absence(
        self, allocation_id: str, absence_id: str
    ) -> Optional[AbsenceConflict]:
        stmt = select(AbsenceConflictModel).where(
            AbsenceConflictModel.allocation_id == allocation_id,
            AbsenceConflictModel.absence_id == absence_id,
        )
        async with self.db.get_session() as session:
            row = (await session.scalars(stmt)).first()
            return conflict_from_row(row) if row else None

    async def find_unresolved_by_tenant(self, tenant_id: str) -> List[AbsenceConflict]:
        stmt = (
            select(AbsenceConflictModel)
            .where(
                AbsenceConflictModel.tenant_id == tenant_id,
                AbsenceConflictModel.resolved_at.is_(None),
            )
            .order_by(AbsenceConflictModel.date, AbsenceConflictModel.created_at)
        )
        async with self.db.get_session() as session:
            rows = (await session.scalars(stmt)).all()
            return [conflict_from_row(row) for row in rows]

    async def count_unresolved_by_tenant(self, tenant_id: str) -> int:
        stmt = select(func.count()).select_from(AbsenceConflictModel).where(
            AbsenceConflictModel.tenant_id == tenant_id,
            AbsenceConflictModel.resolved_at.is_(None),
        )
        async with self.db.get_session() as session:
            return (await session.execute(stmt)).scalar_one()

    async def save_many(self, conflicts: Sequence[NewAbsenceConflict]) -> List[AbsenceConflict]:
        if not conflicts:
            return []

        now = datetime.now(timezone.utc)
        values = [
            {
                "id": generate_id(),
                "tenant_id": c.tenant_id,
                "allocation_id": c.allocation_id,
                "absence_id": c.absence_id,
                "user_id": c.user_id,
                "date": c.date,
                "absence_type": c.absence_type.value,
                "created_at": now,
            }
            for c in conflicts
        ]

        async with self.db.get_session() as session:
            await session.execute(self._insert_ignoring_duplicates(), values)
            stmt = (
                select(AbsenceConflictModel)
                .where(AbsenceConflictModel.id.in_([v["id"] for v in values]))
                .order_by(AbsenceConflictModel.date)
            )
            rows = (await session.scalars(stmt)).all()
            created = [conflict_from_row(row) for row in rows]

        if len(created) < len(values):
            logger.debug(f"Skipped {len(values) - len(created)} already recorded conflicts")
        return created

    def _insert_ignoring_duplicates(self):
        dialect = self.db.dialect_name
        if dialect == "postgresql":
            return postgresql.insert(AbsenceConflictModel).on_conflict_do_nothing(
                index_elements=_UNIQUE_COLUMNS
            )
        if dialect == "sqlite":
            return sqlite.insert(AbsenceConflictModel).on_conflict_do_nothing(
                index_elements=_UNIQUE_COLUMNS
            )
        return insert(AbsenceConflictModel)

    async def resolve(
        self, conflict_id: str, resolution: ConflictResolution, resolved_by: str
    ) -> AbsenceConflict:
        async with self.db.get_session() as session:
            # Only an unresolved row may transition
            result = await session.execute(
                update(AbsenceConflictModel)
                .where(
                    AbsenceConflictModel.id == conflict_id,
                    AbsenceConflictModel.resolved_at.is_(None),
                )
                .values(
                    resolved_at=datetime.now(timezone.utc),
                    resolved_by=resolved_by,
                    resolution=resolution.value,
                )
            )
            row = await session.get(AbsenceConflictModel, conflict_id, populate_existing=True)
            if row is None:
                raise NotFoundError("Conflict", conflict_id, code=ErrorCode.CONFLICT_NOT_FOUND)
            if result.rowcount == 0:
                raise ConflictAlreadyResolvedError(conflict_id)
            return conflict_from_row(row)

    async def delete_by_absence_id(self, absence_id: str) -> None:
        async with self.db.get_session() as session:
            await session.execute(
                delete(AbsenceConflictModel).where(AbsenceConflictModel.absence_id == absence_id)
            )

    async def delete_by_allocation_id(
        self, allocation_id: str, keep_conflict_id: Optional[str] = None
    ) -> None:
        stmt = delete(AbsenceConflictModel).where(
            AbsenceConflictModel.allocation_id == allocation_id
        )
        if keep_conflict_id is not None:
            stmt = stmt.where(AbsenceConflictModel.id != keep_conflict_id)
        async with self.db.get_session() as session:
            await session.execute(stmt)
