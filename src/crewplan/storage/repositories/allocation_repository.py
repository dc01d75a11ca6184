from datetime import date, datetime, timezone
from typing import Dict, List, Optional

from sqlalchemy import delete, select, update

from crewplan.domain.entities import Allocation
from crewplan.domain.errors import ErrorCode, NotFoundError
from crewplan.storage.base import StorageAdapter
from crewplan.storage.mappers import allocation_from_row, allocation_to_row
from crewplan.storage.models import AllocationModel
from .base import AllocationRepository


class SqlAlchemyAllocationRepository(AllocationRepository):

    def __init__(self, db: StorageAdapter):
        self.db = db

    async def find_by_id(self, allocation_id: str) -> Optional[Allocation]:
        async with self.db.get_session() as session:
            row = await session.get(AllocationModel, allocation_id)
            return allocation_from_row(row) if row else None

    async def find_by_user_and_date(self, user_id: str, day: date) -> List[Allocation]:
        stmt = (
            select(AllocationModel)
            .where(AllocationModel.user_id == user_id, AllocationModel.date == day)
            .order_by(AllocationModel.created_at, AllocationModel.id)
        )
        return await self._fetch(stmt)

    async def find_by_user_and_date_range(
        self, user_id: str, start_date: date, end_date: date
    ) -> List[Allocation]:
        stmt = (
            select(AllocationModel)
            .where(
                AllocationModel.user_id == user_id,
                AllocationModel.date >= start_date,
                AllocationModel.date <= end_date,
            )
            .order_by(AllocationModel.date, AllocationModel.created_at)
        )
        return await self._fetch(stmt)

    async def find_by_tenant_and_date_range(
        self,
        tenant_id: str,
        start_date: date,
        end_date: date,
        user_id: Optional[str] = None,
    ) -> List[Allocation]:
        stmt = select(AllocationModel).where(
            AllocationModel.tenant_id == tenant_id,
            AllocationModel.date >= start_date,
            AllocationModel.date <= end_date,
        )
        if user_id:
            stmt = stmt.where(AllocationModel.user_id == user_id)
        stmt = stmt.order_by(AllocationModel.date, AllocationModel.created_at)
        return await self._fetch(stmt)

    async def save(self, allocation: Allocation) -> Allocation:
        async with self.db.get_session() as session:
            session.add(allocation_to_row(allocation))
            await session.flush()
        return allocation

    async def update_many_planned_hours(self, hours_by_id: Dict[str, float]) -> None:
        if not hours_by_id:
            return
        now = datetime.now(timezone.utc)
        async with self.db.get_session() as session:
            for allocation_id, hours in hours_by_id.items():
                await session.execute(
                    update(AllocationModel)
                    .where(AllocationModel.id == allocation_id)
                    .values(planned_hours=hours, updated_at=now)
                )

    async def delete(self, allocation_id: str) -> None:
        async with self.db.get_session() as session:
            result = await session.execute(
                delete(AllocationModel).where(AllocationModel.id == allocation_id)
            )
            if result.rowcount == 0:
                raise NotFoundError("Allocation", allocation_id, code=ErrorCode.ALLOCATION_NOT_FOUND)

    async def move_to_date(self, allocation_id: str, new_date: date) -> Allocation:
        return await self._update_fields(allocation_id, date=new_date)

    async def move_to_phase(self, allocation_id: str, new_phase_id: str) -> Allocation:
        return await self._update_fields(allocation_id, project_phase_id=new_phase_id)

    async def _update_fields(self, allocation_id: str, **fields) -> Allocation:
        async with self.db.get_session() as session:
            row = await session.get(AllocationModel, allocation_id)
            if not row:
                raise NotFoundError("Allocation", allocation_id, code=ErrorCode.ALLOCATION_NOT_FOUND)
            for key, value in fields.items():
                setattr(row, key, value)
            row.updated_at = datetime.now(timezone.utc)
            await session.flush()
            return allocation_from_row(row)

    async def _fetch(self, stmt) -> List[Allocation]:
        async with self.db.get_session() as session:
            rows = (await session.scalars(stmt)).all()
            return [allocation_from_row(row) for row in rows]
